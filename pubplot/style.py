from __future__ import annotations

from dataclasses import replace

from pubplot.layout import FigureLayout
from pubplot.model import Figure, Legend, Panel
from pubplot.options import PubPlotOptions
from pubplot.placement import PanelPlacement


def prepare_panel(panel: Panel, options: PubPlotOptions) -> Panel:
    """Copy the cosmetic options onto a panel before it is measured."""

    return replace(
        panel,
        font_name=options.font_name,
        font_size=options.axis_font_size,
        axis_line_width=options.axis_line_width,
        spacing=options.spacing_offset,
        line_width=options.line_width,
        marker_size=options.marker_size,
        tick_length=(float(options.tick_length[0]), float(options.tick_length[1])),
        axis_color=options.axis_color,
        font_color=options.font_color,
        box_color=options.box_color,
        grid=options.grid,
        grid_line_width=options.grid_line_width,
        grid_color=options.grid_color,
        interpreter=options.interpreter,
        legend=prepare_legend(panel.legend, options),
    )


def prepare_legend(legend: Legend | None, options: PubPlotOptions) -> Legend | None:
    # legends use the title size, not the axis size, and lose their box
    if legend is None:
        return None
    return replace(
        legend,
        font_size=options.font_size,
        box=False,
        interpreter=options.interpreter,
        color=options.font_color,
    )


def prepare_figure(figure: Figure, options: PubPlotOptions) -> Figure:
    return Figure(
        width=float(options.canvas_width),
        height=float(options.canvas_height),
        panels=tuple(prepare_panel(p, options) for p in figure.panels),
    )


def apply_layout(
    figure: Figure,
    layout: FigureLayout,
    placements: tuple[PanelPlacement, ...],
    options: PubPlotOptions,
) -> Figure:
    """Return a new figure with the computed rectangles and placed text.

    Host-rendered tick labels, axis labels and titles are switched off; the
    placed text primitives take their place.
    """

    panels: list[Panel] = []
    for panel, panel_layout, placement in zip(figure.panels, layout.panels, placements, strict=True):
        title_texts = tuple(
            replace(t, font_size=options.font_size) if t.role == "title" else t for t in placement.texts
        )
        legend = panel.legend
        if legend is not None:
            legend = replace(legend, rect=placement.legend_rect)
        panels.append(
            replace(
                panel,
                rect=panel_layout.rect,
                texts=title_texts,
                show_host_text=False,
                tick_length_ratio=placement.tick_length_ratio,
                legend=legend,
            )
        )
    return Figure(width=figure.width, height=figure.height, panels=tuple(panels))
