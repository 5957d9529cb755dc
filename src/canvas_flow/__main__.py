from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import render_canvas
from .document import CanvasLoadError
from .layout import LAYOUT_ALGORITHMS
from .logging_config import setup_logging
from .scene import RENDER_STYLES
from .types import LayoutOptions, RenderOptions

logger = logging.getLogger("canvas_flow")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canvas_flow",
        description="Render a .canvas file to SVG.",
    )
    parser.add_argument("input", type=Path, help="Path to a .canvas JSON file")
    parser.add_argument("-o", "--output", type=Path, help="Write SVG here instead of stdout")
    parser.add_argument("--style", choices=RENDER_STYLES, default="vector")
    parser.add_argument("--auto-layout", action="store_true", help="Lay nodes out automatically first")
    parser.add_argument("--algorithm", choices=LAYOUT_ALGORITHMS, default="force")
    parser.add_argument("--margin", type=float, help="Space around the content, in canvas units")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        text = args.input.read_text(encoding="utf-8")
    except OSError as err:
        logger.error("Cannot read %s: %s", args.input, err)
        return 1

    try:
        svg = render_canvas(
            text,
            RenderOptions(style=args.style, margin=args.margin),
            LayoutOptions(algorithm=args.algorithm),
            auto_layout=args.auto_layout,
        )
    except CanvasLoadError as err:
        logger.error("Cannot load %s: %s", args.input, err)
        return 1

    if args.output:
        args.output.write_text(svg, encoding="utf-8")
    else:
        sys.stdout.write(svg + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
