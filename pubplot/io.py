from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pubplot.errors import PanelDataError
from pubplot.model import Figure, Legend, Panel, Series
from pubplot.scales import data_limits


PANEL_KEYS = (
    "xlim",
    "ylim",
    "zlim",
    "x_ticks",
    "y_ticks",
    "x_tick_labels",
    "y_tick_labels",
    "title",
    "x_label",
    "y_label",
)
Y_LIMIT_PAD = 0.05


def load_figure(path: str | Path) -> Figure:
    """Read a figure description (canvas size, panels and their series) from JSON."""

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PanelDataError(f"cannot parse figure description {path}: {exc}") from exc
    return figure_from_dict(raw)


def figure_from_dict(raw: Mapping[str, Any]) -> Figure:
    panels_raw = raw.get("panels")
    if panels_raw is None:
        panels_raw = [raw["panel"]] if "panel" in raw else []
    panels = tuple(panel_from_dict(item, index=idx) for idx, item in enumerate(panels_raw))
    return Figure(
        width=float(raw.get("width", 560.0)),
        height=float(raw.get("height", 420.0)),
        panels=panels,
    )


def panel_from_dict(raw: Mapping[str, Any], *, index: int = 0) -> Panel:
    unknown = set(raw) - set(PANEL_KEYS) - {"series", "legend"}
    if unknown:
        raise PanelDataError(f"panel {index}: unknown keys {sorted(unknown)}")
    series = tuple(_series_from_dict(item, index=index) for item in raw.get("series", ()))
    kwargs: dict[str, Any] = {k: raw[k] for k in PANEL_KEYS if raw.get(k) is not None}
    if "xlim" not in kwargs or "ylim" not in kwargs:
        limits = data_limits(series, pad_ratio=Y_LIMIT_PAD)
        if limits is None:
            raise PanelDataError(f"panel {index}: axis limits are required when there is no data")
        kwargs.setdefault("xlim", limits[0])
        kwargs.setdefault("ylim", limits[1])
    if "zlim" in kwargs:
        kwargs["zlim"] = tuple(kwargs["zlim"])
    if raw.get("legend") is not None:
        kwargs["legend"] = _legend_from_dict(raw["legend"], index=index)
    return Panel(series=series, **kwargs)


def _series_from_dict(raw: Mapping[str, Any], *, index: int) -> Series:
    if "y" not in raw:
        raise PanelDataError(f"panel {index}: every series needs y values")
    y = [_number(v) for v in raw["y"]]
    x = [_number(v) for v in raw["x"]] if "x" in raw else list(range(len(y)))
    kwargs: dict[str, Any] = {}
    if "mode" in raw:
        kwargs["mode"] = raw["mode"]
    if "color" in raw:
        kwargs["color"] = tuple(float(c) for c in raw["color"])
    return Series(x=x, y=y, **kwargs)


def _number(value: Any) -> float:
    return float("nan") if value is None else float(value)


def _legend_from_dict(raw: Any, *, index: int) -> Legend:
    # either a bare list of labels or {"labels": [...], "location": ...}
    if isinstance(raw, Mapping):
        if "labels" not in raw:
            raise PanelDataError(f"panel {index}: legend needs labels")
        kwargs: dict[str, Any] = {"labels": raw["labels"]}
        if "location" in raw:
            kwargs["location"] = str(raw["location"]).lower()
        return Legend(**kwargs)
    return Legend(labels=raw)
