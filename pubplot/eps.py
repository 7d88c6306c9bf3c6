from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np

from pubplot.metrics import split_font_name
from pubplot.model import RGB, Figure, Panel, Rect, TextPrimitive
from pubplot.placement import LEGEND_SAMPLE_EM
from pubplot.postscript import (
    DEFAULT_HOST_FONT,
    FONT_DICT_BEGIN,
    FONT_DICT_END,
    FONT_REENCODE_BEGIN,
    FONT_REENCODE_END,
)


LOGGER = logging.getLogger(__name__)

HOST_FACES = {
    "regular": DEFAULT_HOST_FONT,
    "bold": f"{DEFAULT_HOST_FONT}-Bold",
    "italic": f"{DEFAULT_HOST_FONT}-Oblique",
    "bold-italic": f"{DEFAULT_HOST_FONT}-BoldOblique",
}
HALIGN_FACTOR = {"left": 0.0, "center": 0.5, "right": 1.0}
# Baseline shift as a fraction of font size for each vertical anchor.
VALIGN_SHIFT = {"bottom": 0.21, "middle": -0.35, "top": -0.72}


def render_eps(figure: Figure, *, title: str = "pubplot figure") -> list[str]:
    """Render a laid-out figure as EPS lines using the host's Helvetica faces."""

    faces_used = _faces_used(figure)
    lines = [
        "%!PS-Adobe-3.0 EPSF-3.0",
        "%%Creator: pubplot",
        f"%%Title: {_comment_safe(title)}",
        f"%%BoundingBox: 0 0 {math.ceil(figure.width)} {math.ceil(figure.height)}",
        "%%LanguageLevel: 2",
        "%%Pages: 1",
        "%%DocumentNeededResources: " + " ".join(f"font {face}" for face in faces_used),
        "%%EndComments",
        "%%BeginProlog",
        FONT_DICT_BEGIN,
    ]
    lines.extend(f"%%IncludeResource: font {face}" for face in faces_used)
    lines.append(FONT_DICT_END)
    lines.append(FONT_REENCODE_BEGIN)
    for face in faces_used:
        lines.extend(
            [
                f"/{face} findfont",
                "dup length dict begin",
                "  {1 index /FID ne {def} {pop pop} ifelse} forall",
                "  /Encoding ISOLatin1Encoding def",
                "  currentdict",
                "end",
                f"/{face} exch definefont pop",
            ]
        )
    lines.append(FONT_REENCODE_END)
    lines.extend(["%%EndProlog", "%%Page: 1 1", "1 setlinejoin 0 setlinecap"])
    for index, panel in enumerate(figure.panels):
        lines.append(f"% panel {index}")
        lines.extend(_panel_ops(panel))
    lines.extend(["showpage", "%%Trailer", "%%EOF"])
    return lines


def write_eps(figure: Figure, path: str | Path) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    lines = render_eps(figure, title=out_path.name)
    out_path.write_text("\n".join(lines) + "\n", encoding="latin-1")
    LOGGER.info("exported %d panels to %s", len(figure.panels), out_path)
    return out_path


def _faces_used(figure: Figure) -> list[str]:
    faces = {HOST_FACES["regular"]}
    for panel in figure.panels:
        for text in panel.texts:
            faces.add(_host_face(text))
    return [face for face in HOST_FACES.values() if face in faces]


def _host_face(text: TextPrimitive) -> str:
    _, face = split_font_name(text.font_name)
    if text.bold:
        face = "bold-italic" if face in ("italic", "bold-italic") else "bold"
    return HOST_FACES[face]


def _panel_ops(panel: Panel) -> list[str]:
    if panel.rect is None:
        raise ValueError("panel has no layout rectangle; run the layout first")
    rect = panel.rect
    ops: list[str] = ["gsave"]
    if panel.box_color is not None:
        ops.append(_rgb(panel.box_color))
        ops.append(f"{_f(rect.x)} {_f(rect.y)} {_f(rect.width)} {_f(rect.height)} rectfill")

    x_ticks = [_to_page(v, panel.xlim, rect.x, rect.width) for v in panel.x_ticks]
    y_ticks = [_to_page(v, panel.ylim, rect.y, rect.height) for v in panel.y_ticks]

    if panel.grid:
        ops.append(_rgb(panel.grid_color))
        ops.append(f"{_f(panel.grid_line_width)} setlinewidth")
        for px in x_ticks:
            ops.append(_segment(px, rect.y, px, rect.top))
        for py in y_ticks:
            ops.append(_segment(rect.x, py, rect.right, py))

    ops.extend(_series_ops(panel, rect))

    ops.append(_rgb(panel.axis_color))
    ops.append(f"{_f(panel.axis_line_width)} setlinewidth")
    # box off: only the left and bottom axis lines
    ops.append(
        f"newpath {_f(rect.x)} {_f(rect.top)} moveto {_f(rect.x)} {_f(rect.y)} lineto "
        f"{_f(rect.right)} {_f(rect.y)} lineto stroke"
    )
    tick_len = panel.tick_length[0]
    for px in x_ticks:
        ops.append(_segment(px, rect.y, px, rect.y - tick_len))
    for py in y_ticks:
        ops.append(_segment(rect.x, py, rect.x - tick_len, py))

    ops.extend(_legend_ops(panel))
    for text in panel.texts:
        ops.extend(_text_ops(text))
    ops.append("grestore")
    return ops


def _series_ops(panel: Panel, rect: Rect) -> list[str]:
    if not panel.series:
        return []
    ops = ["gsave", f"newpath {_f(rect.x)} {_f(rect.y)} {_f(rect.width)} {_f(rect.height)} rectclip"]
    for spec in panel.series:
        px = rect.x + (spec.x - panel.xlim[0]) * (rect.width / (panel.xlim[1] - panel.xlim[0]))
        py = rect.y + (spec.y - panel.ylim[0]) * (rect.height / (panel.ylim[1] - panel.ylim[0]))
        mask = spec.finite_mask
        ops.append(_rgb(spec.color))
        ops.append(f"{_f(panel.line_width)} setlinewidth")
        if spec.mode in ("lines", "lines+markers"):
            for start, stop in _finite_runs(mask):
                if stop - start < 2:
                    continue
                path = [f"{_f(px[start])} {_f(py[start])} moveto"]
                path.extend(f"{_f(x)} {_f(y)} lineto" for x, y in zip(px[start + 1 : stop], py[start + 1 : stop]))
                ops.append("newpath " + " ".join(path) + " stroke")
        if spec.mode in ("markers", "lines+markers"):
            radius = panel.marker_size / 2.0
            for x, y in zip(px[mask], py[mask]):
                ops.append(f"newpath {_f(x)} {_f(y)} {_f(radius)} 0 360 arc closepath stroke")
    ops.append("grestore")
    return ops


def _legend_ops(panel: Panel) -> list[str]:
    legend = panel.legend
    if legend is None or legend.rect is None:
        return []
    box = legend.rect
    ops: list[str] = []
    if legend.box:
        ops.append(_rgb(panel.axis_color))
        ops.append(f"{_f(panel.axis_line_width)} setlinewidth")
        ops.append(f"newpath {_f(box.x)} {_f(box.y)} {_f(box.width)} {_f(box.height)} rectstroke")
    rows = [t for t in panel.texts if t.role == "legend"]
    sample_end = box.x + LEGEND_SAMPLE_EM * legend.font_size
    for (index, _), text in zip(legend.entries, rows):
        spec = panel.series[index]
        ops.append(_rgb(spec.color))
        ops.append(f"{_f(panel.line_width)} setlinewidth")
        if spec.mode in ("lines", "lines+markers"):
            ops.append(_segment(box.x, text.y, sample_end, text.y))
        if spec.mode in ("markers", "lines+markers"):
            mid = (box.x + sample_end) / 2.0
            ops.append(f"newpath {_f(mid)} {_f(text.y)} {_f(panel.marker_size / 2.0)} 0 360 arc closepath stroke")
    return ops


def _text_ops(text: TextPrimitive) -> list[str]:
    face = _host_face(text)
    h = HALIGN_FACTOR[text.halign]
    dy = VALIGN_SHIFT[text.valign] * text.font_size
    return [
        "gsave",
        _rgb(text.color),
        f"/{face} {_f(text.font_size)} selectfont",
        f"{_f(text.x)} {_f(text.y)} translate {text.rotation} rotate",
        f"({_ps_string(text.text)}) dup stringwidth pop {_f(h)} mul neg {_f(dy)} moveto show",
        "grestore",
    ]


def _to_page(value: float, limits: tuple[float, float], origin: float, extent: float) -> float:
    return origin + extent / (limits[1] - limits[0]) * (value - limits[0])


def _finite_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    """Half-open (start, stop) index ranges of consecutive True entries."""

    edges = np.flatnonzero(np.diff(np.concatenate(([0], mask.astype(np.int8), [0]))))
    return list(zip(edges[0::2].tolist(), edges[1::2].tolist()))


def _segment(x0: float, y0: float, x1: float, y1: float) -> str:
    return f"newpath {_f(x0)} {_f(y0)} moveto {_f(x1)} {_f(y1)} lineto stroke"


def _rgb(color: RGB) -> str:
    r, g, b = color
    return f"{_f(r)} {_f(g)} {_f(b)} setrgbcolor"


def _f(value: float) -> str:
    out = f"{float(value):.4f}".rstrip("0").rstrip(".")
    return "0" if out in ("-0", "") else out


def _ps_string(text: str) -> str:
    out: list[str] = []
    for ch in text:
        if ch in "\\()":
            out.append("\\" + ch)
            continue
        code = ord(ch)
        if 32 <= code < 127:
            out.append(ch)
        elif code < 256:
            out.append(f"\\{code:03o}")
        else:
            out.append("?")
    return "".join(out)


def _comment_safe(text: str) -> str:
    return "".join(ch if 32 <= ord(ch) < 127 else "?" for ch in text)
