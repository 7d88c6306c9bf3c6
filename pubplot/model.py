from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence

import numpy as np

from pubplot.errors import PanelDataError


RGB = tuple[float, float, float]
SeriesMode = Literal["lines", "markers", "lines+markers"]
HAlign = Literal["left", "center", "right"]
VAlign = Literal["top", "middle", "bottom"]
TextRole = Literal["x_tick", "y_tick", "x_label", "y_label", "title", "legend"]
LegendLocation = Literal["northeast", "northwest", "southeast", "southwest"]
LEGEND_LOCATIONS = ("northeast", "northwest", "southeast", "southwest")


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    def shrink(self, *, left: float, right: float, bottom: float, top: float) -> "Rect":
        return Rect(
            x=self.x + left,
            y=self.y + bottom,
            width=self.width - (left + right),
            height=self.height - (bottom + top),
        )

    def contains(self, other: "Rect", *, tol: float = 1e-9) -> bool:
        return (
            other.x >= self.x - tol
            and other.y >= self.y - tol
            and other.right <= self.right + tol
            and other.top <= self.top + tol
        )


@dataclass(frozen=True)
class TextMetric:
    width: float
    height: float


@dataclass(frozen=True)
class TextPrimitive:
    """A piece of text positioned in page space (points, bottom-left origin)."""

    text: str
    x: float
    y: float
    role: TextRole
    halign: HAlign = "center"
    valign: VAlign = "middle"
    rotation: int = 0
    font_name: str = "Arial"
    font_size: float = 12.0
    bold: bool = False
    color: RGB = (0.0, 0.0, 0.0)


@dataclass(frozen=True, eq=False)
class Series:
    x: np.ndarray
    y: np.ndarray
    mode: SeriesMode = "lines"
    color: RGB = (0.0, 0.447, 0.741)

    def __post_init__(self) -> None:
        x = np.asarray(self.x, dtype=np.float64).reshape(-1)
        y = np.asarray(self.y, dtype=np.float64).reshape(-1)
        if x.shape != y.shape:
            raise PanelDataError(f"x and y length mismatch: {x.size} != {y.size}")
        if self.mode not in ("lines", "markers", "lines+markers"):
            raise PanelDataError(f"unsupported series mode: {self.mode!r}")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @property
    def finite_mask(self) -> np.ndarray:
        return np.isfinite(self.x) & np.isfinite(self.y)


@dataclass(frozen=True)
class Legend:
    """Legend entries in series order; an empty label leaves that series out."""

    labels: tuple[str, ...]
    location: LegendLocation = "northeast"
    font_size: float = 12.0
    box: bool = True
    interpreter: str = "tex"
    color: RGB = (0.0, 0.0, 0.0)
    rect: Rect | None = None

    def __post_init__(self) -> None:
        if isinstance(self.labels, str):
            raise PanelDataError("legend labels must be a sequence of strings")
        object.__setattr__(self, "labels", tuple(str(v) for v in self.labels))
        if self.location not in LEGEND_LOCATIONS:
            raise PanelDataError(
                f"legend location must be one of {', '.join(LEGEND_LOCATIONS)}; got {self.location!r}"
            )

    @property
    def entries(self) -> tuple[tuple[int, str], ...]:
        return tuple((idx, label) for idx, label in enumerate(self.labels) if label)


@dataclass(frozen=True)
class Panel:
    """One 2D axes. Page-space fields (``rect``, ``texts``) are filled by layout.

    ``tick_length`` is in points and is what the EPS exporter draws.
    ``tick_length_ratio`` is the same length relative to the longer plot side,
    for hosts that size ticks as a fraction of the axes.
    """

    xlim: tuple[float, float]
    ylim: tuple[float, float]
    x_ticks: tuple[float, ...] = ()
    y_ticks: tuple[float, ...] = ()
    x_tick_labels: tuple[str, ...] = ()
    y_tick_labels: tuple[str, ...] = ()
    title: str = ""
    x_label: str = ""
    y_label: str = ""
    zlim: tuple[float, float] | None = None
    rect: Rect | None = None
    series: tuple[Series, ...] = ()
    legend: Legend | None = None

    font_name: str = "Arial"
    font_size: float = 12.0
    axis_line_width: float = 0.5
    spacing: float = 1.0

    # styling applied by pubplot.style
    line_width: float = 0.5
    marker_size: float = 6.0
    tick_length: tuple[float, float] = (3.0, 1.5)
    tick_length_ratio: tuple[float, float] | None = None
    axis_color: RGB = (0.0, 0.0, 0.0)
    font_color: RGB = (0.0, 0.0, 0.0)
    box_color: RGB | None = None
    grid: bool = False
    grid_line_width: float = 0.5
    grid_color: RGB = (0.15, 0.15, 0.15)
    interpreter: str = "tex"
    show_host_text: bool = True
    texts: tuple[TextPrimitive, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "xlim", _limits(self.xlim, "xlim"))
        object.__setattr__(self, "ylim", _limits(self.ylim, "ylim"))
        object.__setattr__(self, "x_ticks", tuple(float(v) for v in self.x_ticks))
        object.__setattr__(self, "y_ticks", tuple(float(v) for v in self.y_ticks))
        object.__setattr__(self, "x_tick_labels", tuple(str(v) for v in self.x_tick_labels))
        object.__setattr__(self, "y_tick_labels", tuple(str(v) for v in self.y_tick_labels))
        object.__setattr__(self, "series", tuple(self.series))
        if self.x_tick_labels and len(self.x_tick_labels) != len(self.x_ticks):
            raise PanelDataError(
                f"x tick label count {len(self.x_tick_labels)} does not match tick count {len(self.x_ticks)}"
            )
        if self.y_tick_labels and len(self.y_tick_labels) != len(self.y_ticks):
            raise PanelDataError(
                f"y tick label count {len(self.y_tick_labels)} does not match tick count {len(self.y_ticks)}"
            )
        if self.legend is not None and len(self.legend.labels) > len(self.series):
            raise PanelDataError(
                f"legend has {len(self.legend.labels)} labels but the panel has {len(self.series)} series"
            )

    @property
    def is_3d(self) -> bool:
        if self.zlim is None:
            return False
        return tuple(float(v) for v in self.zlim) != (-1.0, 1.0)


@dataclass(frozen=True)
class Figure:
    width: float
    height: float
    panels: tuple[Panel, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")
        object.__setattr__(self, "panels", tuple(self.panels))


def _limits(values: Sequence[float], name: str) -> tuple[float, float]:
    if len(values) != 2:
        raise PanelDataError(f"{name} must hold exactly two values")
    lo, hi = float(values[0]), float(values[1])
    if not (np.isfinite(lo) and np.isfinite(hi)):
        raise PanelDataError(f"{name} must be finite")
    if not lo < hi:
        raise PanelDataError(f"{name} must satisfy min < max, got [{lo:g}, {hi:g}]")
    return (lo, hi)
