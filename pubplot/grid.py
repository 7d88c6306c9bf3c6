from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Sequence

from pubplot.errors import InvalidGridError, NoPanelsError
from pubplot.model import Rect


@dataclass(frozen=True)
class GridSpec:
    rows: int
    cols: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise InvalidGridError(f"grid must have positive rows and cols, got {self.rows}x{self.cols}")

    @property
    def capacity(self) -> int:
        return self.rows * self.cols

    def position(self, index: int) -> tuple[int, int]:
        """(row, col) of panel ``index``; panels fill row-major from the top-left."""

        if index < 0 or index >= self.capacity:
            raise IndexError(f"panel index {index} outside {self.rows}x{self.cols} grid")
        return divmod(index, self.cols)

    def offset(self, index: int, width: float, height: float) -> tuple[float, float]:
        row, col = self.position(index)
        cell_w = width / self.cols
        cell_h = height / self.rows
        # page space has its origin at the bottom-left, row 0 is the top row
        return (col * cell_w, (self.rows - 1 - row) * cell_h)

    def cell(self, index: int, width: float, height: float) -> Rect:
        x, y = self.offset(index, width, height)
        return Rect(x=x, y=y, width=width / self.cols, height=height / self.rows)


def resolve_grid(panel_count: int) -> GridSpec:
    """Infer a rows x cols layout for ``panel_count`` panels.

    Divisor pairs (r, c) are scored by |r - c|. Ties go to the pair with fewer
    columns, and the winner is returned transposed (rows=c, cols=r), so the
    final grid always has rows <= cols: wider rather than taller.
    """

    if panel_count <= 0:
        raise NoPanelsError("figure has no plot panels")
    options = [(r, panel_count // r) for r in range(1, panel_count + 1) if panel_count % r == 0]
    r, c = min(options, key=lambda rc: (abs(rc[0] - rc[1]), rc[1]))
    return GridSpec(rows=c, cols=r)


def grid_for(panel_count: int, explicit: Sequence[int] | None = None) -> GridSpec:
    if panel_count <= 0:
        raise NoPanelsError("figure has no plot panels")
    if explicit is None:
        if panel_count == 1:
            return GridSpec(rows=1, cols=1)
        return resolve_grid(panel_count)
    grid = parse_grid(explicit)
    if grid.capacity < panel_count:
        raise InvalidGridError(
            f"grid {grid.rows}x{grid.cols} holds {grid.capacity} panels but the figure has {panel_count}"
        )
    return grid


def parse_grid(value: Sequence[int]) -> GridSpec:
    if isinstance(value, (str, bytes)):
        raise InvalidGridError("tiled layout must be an [rows, cols] pair of integers")
    try:
        rows, cols = value
    except (TypeError, ValueError) as exc:
        raise InvalidGridError("tiled layout must be an [rows, cols] pair of integers") from exc
    for item in (rows, cols):
        if isinstance(item, bool) or not isinstance(item, Integral) or item <= 0:
            raise InvalidGridError("tiled layout must be an [rows, cols] pair of positive integers")
    return GridSpec(rows=int(rows), cols=int(cols))
