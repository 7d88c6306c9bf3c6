from pubplot.api import PubPlotResult, export_figure, pub_plot
from pubplot.errors import (
    InvalidGridError,
    InvalidOptionError,
    NegativeExtentError,
    NoPanelsError,
    PanelDataError,
    PubPlotError,
    UnsupportedDimensionError,
)
from pubplot.grid import GridSpec, grid_for, resolve_grid
from pubplot.io import load_figure
from pubplot.layout import FigureLayout, PanelLayout, layout_figure
from pubplot.metrics import CachingTextMetrics, PillowTextMetrics, TextMetricsProvider
from pubplot.model import Figure, Legend, Panel, Rect, Series, TextMetric, TextPrimitive
from pubplot.options import JOURNAL_WIDTHS, PubPlotOptions, load_options
from pubplot.placement import PanelPlacement, place_figure
from pubplot.postscript import FontFamily, PostScriptFontRewriter

__all__ = [
    "CachingTextMetrics",
    "Figure",
    "FigureLayout",
    "FontFamily",
    "GridSpec",
    "InvalidGridError",
    "InvalidOptionError",
    "JOURNAL_WIDTHS",
    "Legend",
    "NegativeExtentError",
    "NoPanelsError",
    "Panel",
    "PanelDataError",
    "PanelLayout",
    "PanelPlacement",
    "PillowTextMetrics",
    "PostScriptFontRewriter",
    "PubPlotError",
    "PubPlotOptions",
    "PubPlotResult",
    "Rect",
    "Series",
    "TextMetric",
    "TextMetricsProvider",
    "TextPrimitive",
    "UnsupportedDimensionError",
    "export_figure",
    "grid_for",
    "layout_figure",
    "load_figure",
    "load_options",
    "place_figure",
    "pub_plot",
    "resolve_grid",
]
