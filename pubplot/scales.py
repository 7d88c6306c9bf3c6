from __future__ import annotations

from dataclasses import replace
import math
from typing import Sequence

import numpy as np

from pubplot.model import Panel, Series


DEFAULT_TICK_TARGET = 5


def generate_nice_ticks(vmin: float, vmax: float, target: int = DEFAULT_TICK_TARGET) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.floor(vmin / step) * step
    tick_max = np.ceil(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks_within_range(ticks, vmin=vmin, vmax=vmax)


def ticks_within_range(ticks: np.ndarray, *, vmin: float, vmax: float) -> np.ndarray:
    if ticks.size == 0:
        return ticks
    step = float(abs(ticks[1] - ticks[0])) if ticks.size > 1 else max(1e-12, abs(vmax - vmin))
    eps = max(1e-12, step * 1e-6)
    mask = (ticks >= (vmin - eps)) & (ticks <= (vmax + eps))
    out = ticks[mask]
    if out.size == 0:
        return np.asarray([vmin, vmax], dtype=np.float64)
    return out


def format_tick(value: float, *, step: float | None = None) -> str:
    """Label a tick with as many decimals as its axis step needs."""

    if not np.isfinite(value):
        return str(value)
    if step and abs(value) <= abs(step) * 1e-9:
        value = 0.0
    magnitude = abs(value)
    if magnitude and (magnitude >= 1e6 or magnitude < 1e-6):
        return f"{value:.4e}"
    text = f"{value:.{_decimals_from_step(step)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_ticks_for_axis(ticks: Sequence[float] | np.ndarray) -> list[str]:
    ticks = np.asarray(ticks, dtype=np.float64)
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def data_limits(series: Sequence[Series], *, pad_ratio: float = 0.0) -> tuple[tuple[float, float], tuple[float, float]] | None:
    """Tight x/y limits over the finite points of ``series``, or None when there are none."""

    xs: list[np.ndarray] = []
    ys: list[np.ndarray] = []
    for spec in series:
        mask = spec.finite_mask
        if np.any(mask):
            xs.append(spec.x[mask])
            ys.append(spec.y[mask])
    if not xs:
        return None
    x_all = np.concatenate(xs)
    y_all = np.concatenate(ys)
    xlim = _padded(float(np.min(x_all)), float(np.max(x_all)), 0.0)
    ylim = _padded(float(np.min(y_all)), float(np.max(y_all)), pad_ratio)
    return (xlim, ylim)


def with_default_ticks(panel: Panel, *, target: int = DEFAULT_TICK_TARGET) -> Panel:
    """Fill in ticks and tick labels the host left empty; supplied ones are kept."""

    changes: dict[str, object] = {}
    x_ticks = panel.x_ticks
    if not x_ticks:
        x_ticks = tuple(float(v) for v in generate_nice_ticks(panel.xlim[0], panel.xlim[1], target))
        changes["x_ticks"] = x_ticks
    if not panel.x_tick_labels or "x_ticks" in changes:
        changes["x_tick_labels"] = tuple(format_ticks_for_axis(x_ticks))
    y_ticks = panel.y_ticks
    if not y_ticks:
        y_ticks = tuple(float(v) for v in generate_nice_ticks(panel.ylim[0], panel.ylim[1], target))
        changes["y_ticks"] = y_ticks
    if not panel.y_tick_labels or "y_ticks" in changes:
        changes["y_tick_labels"] = tuple(format_ticks_for_axis(y_ticks))
    if not changes:
        return panel
    return replace(panel, **changes)


def _padded(vmin: float, vmax: float, ratio: float) -> tuple[float, float]:
    if vmin == vmax:
        delta = max(1.0, abs(vmin) * 0.05)
        return (vmin - delta, vmax + delta)
    pad = (vmax - vmin) * ratio
    return (vmin - pad, vmax + pad)


# (upper bound on the mantissa, nice mantissa) for rounded steps and for spans
_ROUNDED_STEPS = ((1.5, 1.0), (3.0, 2.0), (7.0, 5.0))
_SPAN_CEILINGS = ((1.0, 1.0), (2.0, 2.0), (5.0, 5.0))


def _nice_number(value: float, *, round_result: bool) -> float:
    exponent = math.floor(math.log10(value))
    scale = 10.0**exponent
    mantissa = value / scale
    if round_result:
        nice = next((n for bound, n in _ROUNDED_STEPS if mantissa < bound), 10.0)
    else:
        nice = next((n for bound, n in _SPAN_CEILINGS if mantissa <= bound), 10.0)
    return nice * scale


def _decimals_from_step(step: float | None) -> int:
    if step is None or not np.isfinite(step) or step <= 0:
        return 6
    digits, _, exponent = f"{step:.10e}".partition("e")
    fraction = digits.rstrip("0").partition(".")[2]
    return min(12, max(0, len(fraction) - int(exponent)))
