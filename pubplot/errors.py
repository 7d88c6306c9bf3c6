from __future__ import annotations


class PubPlotError(Exception):
    """Base class for every failure raised while formatting a figure."""


class NoPanelsError(PubPlotError):
    pass


class UnsupportedDimensionError(PubPlotError):
    pass


class InvalidGridError(PubPlotError):
    pass


class InvalidOptionError(PubPlotError):
    pass


class PanelDataError(PubPlotError):
    pass


class NegativeExtentError(PubPlotError):
    def __init__(self, panel_index: int, width: float, height: float) -> None:
        super().__init__(
            f"panel {panel_index}: plot area is {width:g}x{height:g} pt after margins; "
            "labels are too large for the allotted cell"
        )
        self.panel_index = panel_index
        self.width = width
        self.height = height
