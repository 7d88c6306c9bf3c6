from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path
from typing import Protocol

from PIL import ImageFont

from pubplot.model import TextMetric


LOGGER = logging.getLogger(__name__)

SUPPORTED_FONT_FAMILY = "Arial"
FONT_FACES = ("regular", "bold", "italic", "bold-italic")
# Pillow measures in pixels; fonts are loaded this many times larger than the
# requested point size and measurements are scaled back down.
OVERSAMPLE = 8
# Arial first, then metric-compatible substitutes.
FONT_FILE_PATTERNS: dict[str, tuple[str, ...]] = {
    "regular": ("arial", "liberationsans-regular", "arimo-regular", "liberationsans", "arimo"),
    "bold": ("arialbd", "arial bold", "arial-bold", "liberationsans-bold", "arimo-bold"),
    "italic": ("ariali", "arial italic", "arial-italic", "liberationsans-italic", "arimo-italic"),
    "bold-italic": (
        "arialbi",
        "arial bold italic",
        "arial-bolditalic",
        "liberationsans-bolditalic",
        "arimo-bolditalic",
    ),
}
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("C:/Windows/Fonts"),
)


class TextMetricsProvider(Protocol):
    def measure(self, text: str, font_name: str, font_size: float, *, rotate_deg: int = 0) -> TextMetric: ...


class PillowTextMetrics:
    """Measures text with Pillow's FreeType bindings.

    Only the Arial family is supported. Other families, or an Arial install
    that cannot be found, fall back to Pillow's bundled default font after a
    single warning; measuring never fails because of a font lookup.
    """

    def measure(self, text: str, font_name: str, font_size: float, *, rotate_deg: int = 0) -> TextMetric:
        if font_size <= 0:
            raise ValueError("font_size must be > 0")
        turns = normalize_quarter_turns(rotate_deg)
        width, height = _measure(text, font_name, round(float(font_size), 6))
        if turns % 2 == 1:
            return TextMetric(width=height, height=width)
        return TextMetric(width=width, height=height)


class CachingTextMetrics:
    """Memoizes any provider by (text, font, size, rotation)."""

    def __init__(self, provider: TextMetricsProvider) -> None:
        self._provider = provider
        self._cache: dict[tuple[str, str, float, int], TextMetric] = {}

    def measure(self, text: str, font_name: str, font_size: float, *, rotate_deg: int = 0) -> TextMetric:
        key = (text, font_name, float(font_size), int(rotate_deg))
        hit = self._cache.get(key)
        if hit is None:
            hit = self._provider.measure(text, font_name, font_size, rotate_deg=rotate_deg)
            self._cache[key] = hit
        return hit

    def cache_size(self) -> int:
        return len(self._cache)


def split_font_name(font_name: str) -> tuple[str, str]:
    """Split a PostScript style name such as ``Arial-BoldItalic`` into (family, face)."""

    family, _, style = font_name.strip().partition("-")
    style = style.lower()
    bold = "bold" in style
    italic = "italic" in style or "oblique" in style
    if bold and italic:
        face = "bold-italic"
    elif bold:
        face = "bold"
    elif italic:
        face = "italic"
    else:
        face = "regular"
    return family or SUPPORTED_FONT_FAMILY, face


def normalize_quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


@lru_cache(maxsize=4096)
def _measure(text: str, font_name: str, font_size: float) -> tuple[float, float]:
    font = _load_font(font_name, font_size)
    scale = 1.0 / OVERSAMPLE
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        line_h = float(ascent + descent)
    else:
        _, top, _, bottom = font.getbbox("Ag")
        line_h = float(bottom - top)
    if not text:
        return (0.0, line_h * scale)
    left, _, right, _ = font.getbbox(text)
    return (max(0.0, float(right - left)) * scale, line_h * scale)


@lru_cache(maxsize=64)
def _load_font(font_name: str, font_size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size * OVERSAMPLE)))
    family, face = split_font_name(font_name)
    font_path = None
    if family.lower() == SUPPORTED_FONT_FAMILY.lower():
        font_path = _resolve_font_path(face)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            LOGGER.warning("could not load %s (%s); using Pillow default font", font_path, exc)
            return ImageFont.load_default(size=size)
    _warn_fallback(family, face)
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=None)
def _warn_fallback(family: str, face: str) -> None:
    if family.lower() != SUPPORTED_FONT_FAMILY.lower():
        LOGGER.warning(
            "font family %r is not supported (only %s); text metrics use Pillow's default font",
            family,
            SUPPORTED_FONT_FAMILY,
        )
    else:
        LOGGER.warning("no %s %s font file found; text metrics use Pillow's default font", family, face)


@lru_cache(maxsize=8)
def _resolve_font_path(face: str) -> Path | None:
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc", "*.TTF"):
            candidates.extend(base.rglob(ext))
    candidates.sort()

    for pattern in FONT_FILE_PATTERNS[face]:
        p = pattern.replace(" ", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            if stem == p:
                return path
    return None
