from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
import tempfile
from typing import Iterable


LOGGER = logging.getLogger(__name__)

DEFAULT_HOST_FONT = "Helvetica"
FONT_DICT_BEGIN = "%FOPBeginFontDict"
FONT_DICT_END = "%FOPEndFontDict"
FONT_REENCODE_BEGIN = "%FOPBeginFontReencode"
FONT_REENCODE_END = "%FOPEndFontReencode"
BOUNDING_BOX = "%%BoundingBox"
HIRES_BOUNDING_BOX = "%%HiResBoundingBox"


@dataclass(frozen=True)
class FontFamily:
    name: str
    regular: str
    bold: str
    italic: str
    bold_italic: str

    @classmethod
    def from_name(cls, name: str) -> "FontFamily":
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(f"not a PostScript font family name: {name!r}")
        return cls(
            name=name,
            regular=name,
            bold=f"{name}-Bold",
            italic=f"{name}-Italic",
            bold_italic=f"{name}-BoldItalic",
        )

    @property
    def faces(self) -> tuple[str, str, str, str]:
        return (self.regular, self.bold, self.italic, self.bold_italic)

    def face_for(self, host_font_name: str) -> str:
        bold = "Bold" in host_font_name
        italic = "Italic" in host_font_name or "Oblique" in host_font_name
        if bold and italic:
            return self.bold_italic
        if italic:
            return self.italic
        if bold:
            return self.bold
        return self.regular


ARIAL = FontFamily.from_name("Arial")


def bounding_box_line(width: float, height: float) -> str:
    return f"{BOUNDING_BOX}: {0:5d} {0:5d} {int(round(width)):5d} {int(round(height)):5d}"


def hires_bounding_box_line(width: float, height: float) -> str:
    return f"{HIRES_BOUNDING_BOX}: {0.0:.6f} {0.0:.6f} {float(width):.6f} {float(height):.6f}"


def split_eps_lines(text: str) -> list[str]:
    """Split on LF (and CRLF) only; other control bytes are legal inside EPS strings."""

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def reencode_block(face: str) -> list[str]:
    return [
        f"/{face} findfont",
        "dup length dict begin",
        "  {1 index /FID ne {def} {pop pop} ifelse} forall",
        "  /Encoding WinAnsiEncoding def",
        "  currentdict",
        "end",
        f"/{face} exch definefont pop",
    ]


class PostScriptFontRewriter:
    """Line-oriented rewrite of an exported EPS for design tools.

    Font dictionary and re-encode blocks are rebuilt for the target family,
    host font references elsewhere are swapped face for face, and the
    bounding box is pinned to the canvas.
    """

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        family: FontFamily = ARIAL,
        *,
        host_font: str = DEFAULT_HOST_FONT,
    ) -> None:
        if canvas_width <= 0 or canvas_height <= 0:
            raise ValueError("canvas width and height must be > 0")
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.family = family
        self.host_font = host_font
        # the whole font token, e.g. Helvetica-BoldOblique
        self._host_font_re = re.compile(rf"{re.escape(host_font)}[\w-]*")

    def rewrite_lines(self, lines: Iterable[str]) -> list[str]:
        out: list[str] = []
        in_dict = False
        in_reencode = False
        saw_markers = False

        for line in lines:
            if line == FONT_DICT_BEGIN:
                saw_markers = True
                in_dict = True
                out.append(line)
                out.extend(f"%%IncludeResource: font {face}" for face in self.family.faces)
                continue
            if line == FONT_DICT_END:
                in_dict = False
                out.append(line)
                continue
            if line == FONT_REENCODE_BEGIN:
                saw_markers = True
                in_reencode = True
                out.append(line)
                for face in self.family.faces:
                    out.extend(reencode_block(face))
                continue
            if line == FONT_REENCODE_END:
                in_reencode = False
                out.append(line)
                continue

            if in_reencode:
                # replaced by the generated blocks above
                continue
            if in_dict:
                out.append(line)
                continue

            if BOUNDING_BOX in line:
                out.append(bounding_box_line(self.canvas_width, self.canvas_height))
                continue
            if HIRES_BOUNDING_BOX in line:
                out.append(hires_bounding_box_line(self.canvas_width, self.canvas_height))
                continue
            out.append(self.substitute_fonts(line))

        if in_dict or in_reencode:
            LOGGER.warning("font block left open at end of document")
        if not saw_markers:
            LOGGER.debug("no font dictionary markers found; substituting %s references in place", self.host_font)
        return out

    def substitute_fonts(self, line: str) -> str:
        if self.host_font not in line:
            return line
        return self._host_font_re.sub(lambda m: self.family.face_for(m.group(0)), line)

    def rewrite_file(self, path: str | Path) -> Path:
        """Rewrite ``path`` in place; the original is only replaced once the new text is complete."""

        target = Path(path)
        text = target.read_bytes().decode("latin-1")
        newline = "\r\n" if "\r\n" in text else "\n"
        rewritten = self.rewrite_lines(split_eps_lines(text))
        payload = newline.join(rewritten) + newline
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload.encode("latin-1"))
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.info("rewrote %d lines of %s", len(rewritten), target)
        return target


def rewrite_lines(
    lines: Iterable[str],
    canvas_width: float,
    canvas_height: float,
    family: FontFamily = ARIAL,
) -> list[str]:
    return PostScriptFontRewriter(canvas_width, canvas_height, family).rewrite_lines(lines)


def rewrite_file(
    path: str | Path,
    canvas_width: float,
    canvas_height: float,
    family: FontFamily = ARIAL,
) -> Path:
    return PostScriptFontRewriter(canvas_width, canvas_height, family).rewrite_file(path)
