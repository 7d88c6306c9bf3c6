from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from pubplot.eps import write_eps
from pubplot.errors import NoPanelsError, UnsupportedDimensionError
from pubplot.grid import GridSpec, grid_for
from pubplot.layout import FigureLayout, layout_figure
from pubplot.metrics import (
    SUPPORTED_FONT_FAMILY,
    CachingTextMetrics,
    PillowTextMetrics,
    TextMetricsProvider,
    split_font_name,
)
from pubplot.model import Figure
from pubplot.options import PubPlotOptions
from pubplot.placement import PanelPlacement, place_figure
from pubplot.postscript import ARIAL, PostScriptFontRewriter
from pubplot.scales import with_default_ticks
from pubplot.style import apply_layout, prepare_figure


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PubPlotResult:
    figure: Figure
    grid: GridSpec
    layout: FigureLayout
    placements: tuple[PanelPlacement, ...]
    output_path: Path | None = None
    message: str | None = None


def validate_figure(figure: Figure, options: PubPlotOptions) -> GridSpec:
    if not figure.panels:
        raise NoPanelsError("no plot panels detected; the figure is empty")
    for idx, panel in enumerate(figure.panels):
        if panel.is_3d:
            raise UnsupportedDimensionError(f"panel {idx} has a 3D axis; only 2D plots are supported")
    return grid_for(len(figure.panels), options.tiled_layout)


def pub_plot(
    figure: Figure,
    options: PubPlotOptions | None = None,
    *,
    metrics: TextMetricsProvider | None = None,
) -> PubPlotResult:
    """Lay out ``figure`` for publication and optionally export it as EPS.

    The input figure is left untouched; the returned result carries a new
    figure sized from the journal width table with every panel rectangle and
    text placement filled in. When ``options.filename`` is set the figure is
    exported and the file's font references and bounding box are rewritten.
    """

    options = options or PubPlotOptions()
    grid = validate_figure(figure, options)
    provider = CachingTextMetrics(metrics or PillowTextMetrics())

    prepared = prepare_figure(figure, options)
    prepared = Figure(
        width=prepared.width,
        height=prepared.height,
        panels=tuple(with_default_ticks(p) for p in prepared.panels),
    )
    layout = layout_figure(prepared, grid, provider)
    placements = place_figure(prepared, layout)
    styled = apply_layout(prepared, layout, placements, options)
    LOGGER.info(
        "laid out %d panel(s) on a %gx%g pt canvas as a %dx%d grid",
        len(styled.panels),
        styled.width,
        styled.height,
        grid.rows,
        grid.cols,
    )

    output_path: Path | None = None
    message: str | None = None
    if options.filename:
        output_path = export_figure(styled, options.filename, font_name=options.font_name)
        if options.show_export_message:
            message = f"Successfully updated and exported {output_path}."
    return PubPlotResult(
        figure=styled,
        grid=grid,
        layout=layout,
        placements=placements,
        output_path=output_path,
        message=message,
    )


def export_figure(figure: Figure, filename: str | Path, *, font_name: str = "Arial") -> Path:
    """Write ``figure`` as EPS and rewrite its fonts to the Arial faces.

    Arial is the only family whose metrics drive the layout, so the document
    is always rewritten to Arial; any other ``font_name`` is logged and ignored.
    """

    family, _ = split_font_name(font_name)
    if family.lower() != SUPPORTED_FONT_FAMILY.lower():
        LOGGER.warning(
            "font family %r is not supported (only %s); exporting with %s",
            family,
            SUPPORTED_FONT_FAMILY,
            SUPPORTED_FONT_FAMILY,
        )
    path = write_eps(figure, filename)
    rewriter = PostScriptFontRewriter(figure.width, figure.height, ARIAL)
    return rewriter.rewrite_file(path)
