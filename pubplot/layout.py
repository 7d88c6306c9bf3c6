from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence

from pubplot.errors import NegativeExtentError, NoPanelsError
from pubplot.grid import GridSpec
from pubplot.metrics import TextMetricsProvider
from pubplot.model import Figure, Panel, Rect, TextMetric


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Margins:
    left: float
    right: float
    bottom: float
    top: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.left, self.right, self.bottom, self.top)


@dataclass(frozen=True)
class TextExtents:
    """Measured label geometry that feeds one panel's margins."""

    x_label: TextMetric
    y_label: TextMetric
    x_tick: TextMetric
    y_tick: TextMetric
    x_tick_last: TextMetric
    y_tick_last: TextMetric
    legend: TextMetric = TextMetric(width=0.0, height=0.0)


@dataclass(frozen=True)
class PanelLayout:
    index: int
    cell: Rect
    rect: Rect
    margins: Margins
    extents: TextExtents
    spacing: float
    tick_length: float


@dataclass(frozen=True)
class FigureLayout:
    width: float
    height: float
    grid: GridSpec
    panels: tuple[PanelLayout, ...]


_EMPTY = TextMetric(width=0.0, height=0.0)


def round_quarter(value: float) -> float:
    """Round to the nearest quarter point, halves away from zero."""

    scaled = abs(value) * 4.0
    return math.copysign(math.floor(scaled + 0.5), value) / 4.0 if scaled else 0.0


def ceil_quarter(value: float) -> float:
    return math.ceil(value * 4.0) / 4.0


def measure_extents(panel: Panel, metrics: TextMetricsProvider) -> TextExtents:
    font, size = panel.font_name, panel.font_size

    def one(text: str, rotate_deg: int = 0) -> TextMetric:
        if not text:
            return _EMPTY
        return metrics.measure(text, font, size, rotate_deg=rotate_deg)

    def widest(labels: Sequence[str]) -> TextMetric:
        sizes = [one(lbl) for lbl in labels if lbl]
        if not sizes:
            return _EMPTY
        return TextMetric(width=max(m.width for m in sizes), height=max(m.height for m in sizes))

    return TextExtents(
        x_label=one(panel.x_label),
        y_label=one(panel.y_label, rotate_deg=90),
        x_tick=widest(panel.x_tick_labels),
        y_tick=widest(panel.y_tick_labels),
        x_tick_last=one(panel.x_tick_labels[-1]) if panel.x_tick_labels else _EMPTY,
        y_tick_last=one(panel.y_tick_labels[-1]) if panel.y_tick_labels else _EMPTY,
        legend=_legend_extent(panel, metrics),
    )


def _legend_extent(panel: Panel, metrics: TextMetricsProvider) -> TextMetric:
    """Largest legend entry; the legend sits inside the plot so it adds no margin."""

    legend = panel.legend
    if legend is None or not legend.entries:
        return _EMPTY
    sizes = [metrics.measure(label, panel.font_name, legend.font_size) for _, label in legend.entries]
    return TextMetric(width=max(m.width for m in sizes), height=max(m.height for m in sizes))


def compute_margins(panel: Panel, cell: Rect, extents: TextExtents) -> Margins:
    s = panel.spacing
    tick_len = panel.tick_length[0]

    left = 3.0 * s + extents.y_label.width + extents.y_tick.width + tick_len
    bottom = 3.0 * s + extents.x_label.height + extents.x_tick.height + tick_len

    right = _far_margin(
        near=left,
        span=cell.width,
        limits=panel.xlim,
        ticks=panel.x_ticks,
        last_extent=extents.x_tick_last.width,
        spacing=s,
        axis_line_width=panel.axis_line_width,
    )
    top = _far_margin(
        near=bottom,
        span=cell.height,
        limits=panel.ylim,
        ticks=panel.y_ticks,
        last_extent=extents.y_tick_last.height,
        spacing=s,
        axis_line_width=panel.axis_line_width,
    )
    return Margins(
        left=round_quarter(left),
        right=round_quarter(right),
        bottom=round_quarter(bottom),
        top=round_quarter(top),
    )


def _far_margin(
    *,
    near: float,
    span: float,
    limits: tuple[float, float],
    ticks: Sequence[float],
    last_extent: float,
    spacing: float,
    axis_line_width: float,
) -> float:
    if ticks:
        vmin, vmax = limits
        available = span - near - spacing
        # Where the last tick lands if the far margin stays at one spacing unit.
        last_pos = available / (vmax - vmin) * (ticks[-1] - vmin) + near
        if last_pos + last_extent / 2.0 > span:
            return spacing + ceil_quarter(last_extent / 2.0)
    if axis_line_width > spacing:
        return spacing + ceil_quarter(axis_line_width)
    return spacing


def layout_panel(index: int, panel: Panel, cell: Rect, metrics: TextMetricsProvider) -> PanelLayout:
    extents = measure_extents(panel, metrics)
    margins = compute_margins(panel, cell, extents)
    rect = cell.shrink(left=margins.left, right=margins.right, bottom=margins.bottom, top=margins.top)
    if rect.width < 0 or rect.height < 0:
        raise NegativeExtentError(index, rect.width, rect.height)
    LOGGER.debug(
        "panel %d margins l=%.2f r=%.2f b=%.2f t=%.2f -> %.2fx%.2f pt",
        index,
        margins.left,
        margins.right,
        margins.bottom,
        margins.top,
        rect.width,
        rect.height,
    )
    return PanelLayout(
        index=index,
        cell=cell,
        rect=rect,
        margins=margins,
        extents=extents,
        spacing=panel.spacing,
        tick_length=panel.tick_length[0],
    )


def layout_figure(figure: Figure, grid: GridSpec, metrics: TextMetricsProvider) -> FigureLayout:
    """Compute whitespace-minimized plot rectangles for every panel.

    The figure is only read. Any panel whose labels do not fit its cell aborts
    the whole pass with ``NegativeExtentError``.
    """

    if not figure.panels:
        raise NoPanelsError("figure has no plot panels")
    panels = tuple(
        layout_panel(idx, panel, grid.cell(idx, figure.width, figure.height), metrics)
        for idx, panel in enumerate(figure.panels)
    )
    return FigureLayout(width=figure.width, height=figure.height, grid=grid, panels=panels)
