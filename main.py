from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from pubplot import (
    FontFamily,
    PostScriptFontRewriter,
    PubPlotError,
    PubPlotOptions,
    load_figure,
    load_options,
    pub_plot,
)
from pubplot.metrics import SUPPORTED_FONT_FAMILY
from pubplot.options import JOURNAL_WIDTHS


LOGGER = logging.getLogger("pubplot")

VERBOSITY_LOG_LEVELS = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
    4: logging.DEBUG,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pubplot")
    sub = parser.add_subparsers(dest="command", required=True)

    fmt = sub.add_parser("format", help="Lay out a figure description for publication and export EPS.")
    fmt.add_argument("figure_json", type=Path)
    fmt.add_argument("--options", type=Path, default=None, help="TOML file with pubplot options.")
    fmt.add_argument("--out", type=Path, default=None, help="Output EPS path (overrides Filename).")
    fmt.add_argument("--journal", choices=sorted(JOURNAL_WIDTHS), default=None)
    fmt.add_argument("--width", choices=["single", "1.5", "double"], default=None)
    fmt.add_argument("--height", type=float, default=None, help="Figure height in points.")
    fmt.add_argument("--spacing-offset", type=float, default=None)
    fmt.add_argument(
        "--tiled-layout",
        type=int,
        nargs=2,
        metavar=("ROWS", "COLS"),
        default=None,
    )
    fmt.add_argument("--verbosity", type=int, choices=[0, 1, 2, 3, 4], default=None)

    rw = sub.add_parser("rewrite-eps", help="Rewrite font references and bounding box of an EPS file.")
    rw.add_argument("eps", type=Path)
    rw.add_argument("--canvas-width", type=float, required=True)
    rw.add_argument("--canvas-height", type=float, required=True)
    rw.add_argument("--font-family", choices=[SUPPORTED_FONT_FAMILY], default=SUPPORTED_FONT_FAMILY)
    rw.add_argument("--verbosity", type=int, choices=[0, 1, 2, 3, 4], default=2)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "format":
            return _run_format(args)
        if args.command == "rewrite-eps":
            _configure_logging(args.verbosity)
            rewriter = PostScriptFontRewriter(
                args.canvas_width,
                args.canvas_height,
                FontFamily.from_name(args.font_family),
            )
            path = rewriter.rewrite_file(args.eps)
            print(f"rewrote {path}")
            return 0
    except (PubPlotError, OSError, ValueError) as exc:
        LOGGER.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    raise RuntimeError(f"unsupported command: {args.command}")


def _run_format(args: argparse.Namespace) -> int:
    overrides = {
        "journal": args.journal,
        "width": args.width,
        "height": args.height,
        "spacing_offset": args.spacing_offset,
        "tiled_layout": tuple(args.tiled_layout) if args.tiled_layout else None,
        "verbosity": args.verbosity,
        "filename": str(args.out) if args.out is not None else None,
    }
    if args.options is not None:
        options = load_options(args.options, **overrides)
    else:
        options = PubPlotOptions.from_mapping({k: v for k, v in overrides.items() if v is not None})
    _configure_logging(options.verbosity)

    figure = load_figure(args.figure_json)
    result = pub_plot(figure, options)
    print(
        f"panels={len(result.figure.panels)} grid={result.grid.rows}x{result.grid.cols} "
        f"canvas={result.figure.width:g}x{result.figure.height:g}pt"
    )
    if result.message:
        print(result.message)
    return 0


def _configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=VERBOSITY_LOG_LEVELS.get(verbosity, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    raise SystemExit(main())
