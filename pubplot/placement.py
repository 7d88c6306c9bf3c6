from __future__ import annotations

from dataclasses import dataclass

from pubplot.layout import FigureLayout, PanelLayout, round_quarter
from pubplot.model import Figure, Panel, Rect, TextPrimitive


# Sub-point shift the vector back end applies to the plot width, indexed by
# round(spacing * 4) mod 3.
APPARENT_WIDTH_CORRECTION = (0.0, 0.25, -0.25)

# Legend sample line and the gap before its label, in ems of the legend font.
LEGEND_SAMPLE_EM = 1.5
LEGEND_GAP_EM = 0.3


@dataclass(frozen=True)
class AxisMapping:
    vmin: float
    vmax: float
    extent: float

    def __call__(self, value: float) -> float:
        return self.extent / (self.vmax - self.vmin) * (value - self.vmin)


@dataclass(frozen=True)
class PanelPlacement:
    index: int
    texts: tuple[TextPrimitive, ...]
    apparent_width: float
    apparent_height: float
    tick_length_ratio: tuple[float, float]
    legend_rect: Rect | None = None


def apparent_width_offset(spacing: float) -> float:
    cycle = int(round_quarter(spacing) * 4.0) % 3
    return APPARENT_WIDTH_CORRECTION[cycle]


def place_panel(panel: Panel, layout: PanelLayout, *, sub_tick_length: float = 0.0) -> PanelPlacement:
    """Replace host-rendered tick labels, axis labels and title with page-space text."""

    rect = layout.rect
    margins = layout.margins
    s = layout.spacing
    tick_len = layout.tick_length
    apparent_w = rect.width + apparent_width_offset(s)
    apparent_h = rect.height
    x_pos = AxisMapping(panel.xlim[0], panel.xlim[1], apparent_w)
    y_pos = AxisMapping(panel.ylim[0], panel.ylim[1], apparent_h)
    x_label_h = layout.extents.x_label.height

    style = dict(font_name=panel.font_name, font_size=panel.font_size, color=panel.font_color)
    texts: list[TextPrimitive] = []

    x_tick_y = rect.y - (margins.bottom - 2.0 * s - x_label_h)
    for value, label in zip(panel.x_ticks, panel.x_tick_labels):
        if not label:
            continue
        texts.append(
            TextPrimitive(
                text=label,
                x=rect.x + x_pos(value),
                y=x_tick_y,
                role="x_tick",
                halign="center",
                valign="bottom",
                **style,
            )
        )

    y_tick_x = rect.x - (s + tick_len)
    for value, label in zip(panel.y_ticks, panel.y_tick_labels):
        if not label:
            continue
        texts.append(
            TextPrimitive(
                text=label,
                x=y_tick_x,
                y=rect.y + y_pos(value),
                role="y_tick",
                halign="right",
                valign="middle",
                **style,
            )
        )

    if panel.x_label:
        texts.append(
            TextPrimitive(
                text=panel.x_label,
                x=rect.x + apparent_w / 2.0,
                y=rect.y - (margins.bottom - s),
                role="x_label",
                halign="center",
                valign="bottom",
                **style,
            )
        )

    if panel.y_label:
        texts.append(
            TextPrimitive(
                text=panel.y_label,
                x=rect.x - (margins.left - s),
                y=rect.y + apparent_h / 2.0,
                role="y_label",
                halign="center",
                valign="top",
                rotation=90,
                **style,
            )
        )

    if panel.title:
        texts.append(
            TextPrimitive(
                text=panel.title,
                x=rect.x + apparent_w / 2.0,
                y=rect.y + apparent_h,
                role="title",
                halign="center",
                valign="middle",
                bold=True,
                **style,
            )
        )

    legend_rect = None
    if panel.legend is not None and panel.legend.entries:
        legend_texts, legend_rect = place_legend(panel, layout, apparent_w, apparent_h)
        texts.extend(legend_texts)

    longest = max(apparent_w, apparent_h)
    if longest > 0:
        ratio = (tick_len / longest, sub_tick_length / longest)
    else:
        ratio = (0.0, 0.0)
    return PanelPlacement(
        index=layout.index,
        texts=tuple(texts),
        apparent_width=apparent_w,
        apparent_height=apparent_h,
        tick_length_ratio=ratio,
        legend_rect=legend_rect,
    )


def place_legend(
    panel: Panel,
    layout: PanelLayout,
    apparent_w: float,
    apparent_h: float,
) -> tuple[list[TextPrimitive], Rect]:
    """Stack legend entries in the requested corner of the plot area.

    Each row leaves room for a sample line to the left of its label; the
    returned rect bounds samples and labels together.
    """

    legend = panel.legend
    rect = layout.rect
    pad = 2.0 * layout.spacing
    size = legend.font_size
    sample = LEGEND_SAMPLE_EM * size
    gap = LEGEND_GAP_EM * size
    row_h = layout.extents.legend.height
    block_w = sample + gap + layout.extents.legend.width
    block_h = len(legend.entries) * row_h

    if legend.location.endswith("west"):
        x0 = rect.x + pad
    else:
        x0 = rect.x + apparent_w - pad - block_w
    if legend.location.startswith("north"):
        y_top = rect.y + apparent_h - pad
    else:
        y_top = rect.y + pad + block_h

    texts = [
        TextPrimitive(
            text=label,
            x=x0 + sample + gap,
            y=y_top - (row + 0.5) * row_h,
            role="legend",
            halign="left",
            valign="middle",
            font_name=panel.font_name,
            font_size=size,
            color=legend.color,
        )
        for row, (_, label) in enumerate(legend.entries)
    ]
    return texts, Rect(x=x0, y=y_top - block_h, width=block_w, height=block_h)


def place_figure(figure: Figure, layout: FigureLayout) -> tuple[PanelPlacement, ...]:
    return tuple(
        place_panel(panel, panel_layout, sub_tick_length=panel.tick_length[1])
        for panel, panel_layout in zip(figure.panels, layout.panels, strict=True)
    )
