from __future__ import annotations

from dataclasses import dataclass, fields, replace
from numbers import Real
from pathlib import Path
import tomllib
from typing import Any, Literal, Mapping

from pubplot.errors import InvalidOptionError
from pubplot.grid import parse_grid
from pubplot.model import RGB


Journal = Literal["Elsevier", "Springer", "Nature", "Wiley"]
ColumnWidth = Literal["single", "1.5", "double"]

# Artwork widths in points for each journal and column span.
JOURNAL_WIDTHS: dict[str, dict[str, int]] = {
    "Elsevier": {"single": 252, "1.5": 394, "double": 536},
    "Springer": {"single": 238, "1.5": 365, "double": 493},
    "Nature": {"single": 255, "1.5": 382, "double": 510},
    "Wiley": {"single": 226, "1.5": 352, "double": 480},
}
INTERPRETERS = ("tex", "latex", "none")
TOOL_BAR_MODES = ("none", "auto", "figure")
ON_OFF = ("on", "off")
VERBOSITY_LEVELS = (0, 1, 2, 3, 4)

# CamelCase option names accepted alongside the field names.
OPTION_ALIASES: dict[str, str] = {
    "Journal": "journal",
    "Width": "width",
    "Height": "height",
    "SpacingOffset": "spacing_offset",
    "TiledLayout": "tiled_layout",
    "FontName": "font_name",
    "FontSize": "font_size",
    "AxisFontSize": "axis_font_size",
    "FontColor": "font_color",
    "AxisColor": "axis_color",
    "Interpreter": "interpreter",
    "LineWidth": "line_width",
    "MarkerSize": "marker_size",
    "AxisLineWidth": "axis_line_width",
    "TickLength": "tick_length",
    "BoxColor": "box_color",
    "Grid": "grid",
    "GridLineWidth": "grid_line_width",
    "GridColor": "grid_color",
    "Filename": "filename",
    "ToolBar": "tool_bar",
    "ExportMessage": "export_message",
    "Verbosity": "verbosity",
}


@dataclass(frozen=True)
class PubPlotOptions:
    journal: str = "Elsevier"
    width: str = "single"
    height: float = 235.0
    spacing_offset: float = 1.0
    tiled_layout: tuple[int, int] | None = None

    font_name: str = "Arial"
    font_size: float = 12.0
    axis_font_size: float = 12.0
    font_color: RGB = (0.0, 0.0, 0.0)
    axis_color: RGB = (0.0, 0.0, 0.0)
    interpreter: str = "tex"

    line_width: float = 2.0
    marker_size: float = 8.0
    axis_line_width: float = 1.8
    tick_length: tuple[float, float] = (3.0, 1.5)
    box_color: RGB | None = None

    grid: bool = False
    grid_line_width: float = 1.0
    grid_color: RGB = (0.15, 0.15, 0.15)

    filename: str = ""
    tool_bar: str = "none"
    export_message: str = "on"
    verbosity: int = 2

    def __post_init__(self) -> None:
        self._validate()
        if self.verbosity < 2 and self.export_message == "on":
            object.__setattr__(self, "export_message", "off")

    @property
    def canvas_width(self) -> int:
        return JOURNAL_WIDTHS[self.journal][self.width]

    @property
    def canvas_height(self) -> float:
        return self.height

    @property
    def show_export_message(self) -> bool:
        return self.export_message == "on"

    def with_overrides(self, **changes: Any) -> "PubPlotOptions":
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PubPlotOptions":
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for raw_key, value in values.items():
            key = OPTION_ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise InvalidOptionError(f"unknown option {raw_key!r}")
            kwargs[key] = _coerce(key, value)
        return cls(**kwargs)

    def _validate(self) -> None:
        _require_member("Journal", self.journal, tuple(JOURNAL_WIDTHS))
        _require_member("Width", self.width, ("single", "1.5", "double"))
        _require_member("Interpreter", self.interpreter, INTERPRETERS)
        _require_member("ToolBar", self.tool_bar, TOOL_BAR_MODES)
        _require_member("ExportMessage", self.export_message, ON_OFF)
        if isinstance(self.verbosity, bool) or self.verbosity not in VERBOSITY_LEVELS:
            raise InvalidOptionError(f"Verbosity must be one of {VERBOSITY_LEVELS}, got {self.verbosity!r}")
        for name in (
            "height",
            "spacing_offset",
            "font_size",
            "axis_font_size",
            "line_width",
            "marker_size",
            "axis_line_width",
            "grid_line_width",
        ):
            _require_positive(name, getattr(self, name))
        if (
            not isinstance(self.tick_length, (tuple, list))
            or len(self.tick_length) != 2
            or any(not _is_number(v) or v < 0 for v in self.tick_length)
        ):
            raise InvalidOptionError("TickLength must be two non-negative numbers")
        if not isinstance(self.font_name, str) or not self.font_name.strip():
            raise InvalidOptionError("FontName must be a non-empty string")
        for name in ("font_color", "axis_color", "grid_color"):
            _require_rgb(name, getattr(self, name))
        if self.box_color is not None:
            _require_rgb("box_color", self.box_color)
        if self.tiled_layout is not None:
            parse_grid(self.tiled_layout)


def load_options(path: str | Path, **overrides: Any) -> PubPlotOptions:
    """Read options from a TOML file; keys may sit at top level or under ``[pubplot]``."""

    with Path(path).open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get("pubplot", raw)
    if not isinstance(table, dict):
        raise InvalidOptionError(f"{path}: [pubplot] must be a table")
    merged = dict(table)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return PubPlotOptions.from_mapping(merged)


def _coerce(key: str, value: Any) -> Any:
    if key == "grid":
        return _coerce_on_off(value)
    if key == "box_color":
        if value is None or (isinstance(value, str) and value.lower() == "none"):
            return None
        return _coerce_rgb(key, value)
    if key in ("font_color", "axis_color", "grid_color"):
        return _coerce_rgb(key, value)
    if key == "tick_length":
        if _is_number(value):
            return (float(value), float(value) * 0.5)
        return tuple(value)
    if key == "tiled_layout":
        if value is None or (not isinstance(value, str) and len(value) == 0):
            return None
        return tuple(value) if not isinstance(value, str) else value
    if key == "width" and _is_number(value):
        return {1: "single", 1.5: "1.5", 2: "double"}.get(value, str(value))
    if key in ("width", "interpreter", "tool_bar", "export_message") and isinstance(value, str):
        return value.lower()
    if key == "journal" and isinstance(value, str):
        for name in JOURNAL_WIDTHS:
            if name.lower() == value.lower():
                return name
    return value


def _coerce_on_off(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ON_OFF:
        return value.lower() == "on"
    if _is_number(value) and value in (0, 1):
        return bool(value)
    raise InvalidOptionError(f"Grid must be 'on', 'off', true or false, got {value!r}")


def _coerce_rgb(name: str, value: Any) -> RGB:
    if isinstance(value, str):
        raise InvalidOptionError(f"{name} must be an RGB triplet")
    try:
        r, g, b = (float(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise InvalidOptionError(f"{name} must be an RGB triplet") from exc
    return (r, g, b)


def _require_member(name: str, value: Any, allowed: tuple[Any, ...]) -> None:
    if value not in allowed:
        raise InvalidOptionError(f"{name} must be one of {', '.join(map(str, allowed))}; got {value!r}")


def _require_positive(name: str, value: Any) -> None:
    if not _is_number(value) or value <= 0:
        raise InvalidOptionError(f"{name} must be a positive number, got {value!r}")


def _require_rgb(name: str, value: Any) -> None:
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        raise InvalidOptionError(f"{name} must be an RGB triplet with components in [0, 1]")
    if any(not _is_number(v) or v < 0.0 or v > 1.0 for v in value):
        raise InvalidOptionError(f"{name} must be an RGB triplet with components in [0, 1]")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)
