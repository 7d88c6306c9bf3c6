from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest import mock

from pubplot.postscript import (
    ARIAL,
    FONT_DICT_BEGIN,
    FONT_DICT_END,
    FONT_REENCODE_BEGIN,
    FONT_REENCODE_END,
    FontFamily,
    PostScriptFontRewriter,
    rewrite_file,
    rewrite_lines,
    split_eps_lines,
)


SAMPLE = [
    "%!PS-Adobe-3.0 EPSF-3.0",
    "%%BoundingBox: 0 0 100 100",
    "%%HiResBoundingBox: 0.0 0.0 100.0 100.0",
    "%%DocumentNeededResources: font Helvetica font Helvetica-Bold",
    FONT_DICT_BEGIN,
    "%%IncludeResource: font Helvetica",
    FONT_DICT_END,
    FONT_REENCODE_BEGIN,
    "/Helvetica findfont",
    "  /Encoding ISOLatin1Encoding def",
    FONT_REENCODE_END,
    "/Helvetica 12 selectfont",
    "/Helvetica-BoldOblique 12 selectfont",
    "(Helvetica is a font) show",
    "%%EOF",
]


def _outside_font_blocks(lines: list[str]) -> list[str]:
    out: list[str] = []
    inside = False
    for line in lines:
        if line in (FONT_DICT_BEGIN, FONT_REENCODE_BEGIN):
            inside = True
        elif line in (FONT_DICT_END, FONT_REENCODE_END):
            inside = False
        elif not inside:
            out.append(line)
    return out


class FontFamilyTests(unittest.TestCase):
    def test_face_names_follow_postscript_convention(self) -> None:
        self.assertEqual(ARIAL.faces, ("Arial", "Arial-Bold", "Arial-Italic", "Arial-BoldItalic"))

    def test_host_face_mapping(self) -> None:
        self.assertEqual(ARIAL.face_for("Helvetica"), "Arial")
        self.assertEqual(ARIAL.face_for("Helvetica-Bold"), "Arial-Bold")
        self.assertEqual(ARIAL.face_for("Helvetica-Oblique"), "Arial-Italic")
        self.assertEqual(ARIAL.face_for("Helvetica-BoldOblique"), "Arial-BoldItalic")
        self.assertEqual(ARIAL.face_for("Helvetica-BoldItalic"), "Arial-BoldItalic")


class PostScriptFontRewriterTests(unittest.TestCase):
    def test_bounding_box_is_replaced_with_canvas(self) -> None:
        out = rewrite_lines(["%%BoundingBox: 0 0 100 100"], 252, 235)
        self.assertEqual(out, ["%%BoundingBox:     0     0   252   235"])

    def test_hires_bounding_box_is_patched(self) -> None:
        (line,) = rewrite_lines(["%%HiResBoundingBox: 0 0 10.5 10.5"], 252, 235)
        self.assertEqual(line, "%%HiResBoundingBox: 0.000000 0.000000 252.000000 235.000000")

    def test_font_dict_gets_include_resources(self) -> None:
        out = rewrite_lines(SAMPLE, 252, 235)
        start = out.index(FONT_DICT_BEGIN)
        self.assertEqual(
            out[start + 1 : start + 5],
            [
                "%%IncludeResource: font Arial",
                "%%IncludeResource: font Arial-Bold",
                "%%IncludeResource: font Arial-Italic",
                "%%IncludeResource: font Arial-BoldItalic",
            ],
        )
        # the original body passes through
        self.assertEqual(out[start + 5], "%%IncludeResource: font Helvetica")
        self.assertEqual(out[start + 6], FONT_DICT_END)

    def test_reencode_body_is_replaced(self) -> None:
        out = rewrite_lines(SAMPLE, 252, 235)
        start = out.index(FONT_REENCODE_BEGIN)
        end = out.index(FONT_REENCODE_END)
        body = out[start + 1 : end]
        self.assertEqual(len(body), 4 * 7)
        self.assertEqual(body[0], "/Arial findfont")
        self.assertEqual(body[6], "/Arial exch definefont pop")
        self.assertEqual(body[21], "/Arial-BoldItalic findfont")
        self.assertIn("  /Encoding WinAnsiEncoding def", body)
        self.assertNotIn("ISOLatin1Encoding", "\n".join(out))

    def test_no_host_font_left_outside_font_blocks(self) -> None:
        out = rewrite_lines(SAMPLE, 252, 235)
        outside = _outside_font_blocks(out)
        self.assertFalse([line for line in outside if "Helvetica" in line])
        self.assertIn("/Arial 12 selectfont", outside)
        self.assertIn("/Arial-BoldItalic 12 selectfont", outside)
        self.assertIn("%%DocumentNeededResources: font Arial font Arial-Bold", outside)

    def test_substitution_is_per_font_token(self) -> None:
        rewriter = PostScriptFontRewriter(100, 100)
        line = "/Helvetica-Bold 9 selectfont (a) show /Helvetica 9 selectfont"
        self.assertEqual(rewriter.substitute_fonts(line), "/Arial-Bold 9 selectfont (a) show /Arial 9 selectfont")

    def test_document_without_markers_is_still_rewritten(self) -> None:
        lines = ["%%BoundingBox: 1 1 2 2", "/Helvetica-Oblique 8 selectfont"]
        out = rewrite_lines(lines, 100, 50)
        self.assertEqual(out, ["%%BoundingBox:     0     0   100    50", "/Arial-Italic 8 selectfont"])

    def test_family_names_must_be_postscript_names(self) -> None:
        for bad in ("Liberation Sans", "Times New Roman", "", "Arial\t"):
            with self.subTest(name=bad):
                with self.assertRaises(ValueError):
                    FontFamily.from_name(bad)
        self.assertEqual(FontFamily.from_name("LiberationSans").bold, "LiberationSans-Bold")

    def test_default_target_family_is_arial(self) -> None:
        out = rewrite_lines(["/Helvetica-Bold 8 selectfont"], 10, 10)
        self.assertEqual(out, ["/Arial-Bold 8 selectfont"])

    def test_unterminated_block_is_logged(self) -> None:
        with self.assertLogs("pubplot.postscript", level="WARNING"):
            rewrite_lines([FONT_DICT_BEGIN, "x"], 10, 10)

    def test_input_lines_are_not_mutated(self) -> None:
        lines = list(SAMPLE)
        rewrite_lines(lines, 252, 235)
        self.assertEqual(lines, SAMPLE)

    def test_invalid_canvas_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PostScriptFontRewriter(0, 10)


class RewriteFileTests(unittest.TestCase):
    def test_rewrite_file_replaces_content(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "figure.eps"
            path.write_text("\n".join(SAMPLE) + "\n", encoding="latin-1")
            rewrite_file(path, 252, 235)
            text = path.read_text(encoding="latin-1")
            self.assertIn("%%BoundingBox:     0     0   252   235", text)
            self.assertIn("/Arial-BoldItalic 12 selectfont", text)
            self.assertEqual(sorted(p.name for p in Path(tmp).iterdir()), ["figure.eps"])

    def test_control_bytes_inside_strings_survive(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "figure.eps"
            path.write_bytes(b"%%BoundingBox: 0 0 1 1\n(caf\x85 x) show\n(a\x0cb\x0b\x1c) show\n")
            rewrite_file(path, 252, 235)
            data = path.read_bytes()
        self.assertEqual(
            data,
            b"%%BoundingBox:     0     0   252   235\n(caf\x85 x) show\n(a\x0cb\x0b\x1c) show\n",
        )

    def test_crlf_line_endings_are_kept(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "figure.eps"
            path.write_bytes(b"%%BoundingBox: 0 0 1 1\r\n/Helvetica 8 selectfont\r\n(a\rb) show\r\n")
            rewrite_file(path, 10, 20)
            data = path.read_bytes()
        self.assertEqual(
            data,
            b"%%BoundingBox:     0     0    10    20\r\n/Arial 8 selectfont\r\n(a\rb) show\r\n",
        )

    def test_split_eps_lines(self) -> None:
        self.assertEqual(split_eps_lines("a\nb\x85c\n"), ["a", "b\x85c"])
        self.assertEqual(split_eps_lines("a\r\nb"), ["a", "b"])
        self.assertEqual(split_eps_lines(""), [])

    def test_failed_write_leaves_original_untouched(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "figure.eps"
            original = "\n".join(SAMPLE) + "\n"
            path.write_text(original, encoding="latin-1")
            with mock.patch("pubplot.postscript.os.replace", side_effect=OSError("disk full")):
                with self.assertRaises(OSError):
                    rewrite_file(path, 252, 235)
            self.assertEqual(path.read_text(encoding="latin-1"), original)
            self.assertEqual(sorted(p.name for p in Path(tmp).iterdir()), ["figure.eps"])


if __name__ == "__main__":
    unittest.main()
