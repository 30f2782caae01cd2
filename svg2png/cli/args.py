"""Argument parsing helpers for the svg2png CLI."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from ..config.loader import SUPPORTED_BROWSERS, SUPPORTED_FORMATS


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be greater than zero")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be greater than zero")
    return parsed


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svg2png",
        description="Convert SVG files to raster images with a headless browser.",
        allow_abbrev=False,
    )
    parser.add_argument("source", help="SVG file or directory containing SVG files.")
    parser.add_argument(
        "destination",
        nargs="?",
        help=(
            "Output directory (directory mode) or output file (single file). "
            "Defaults to the source stem with the raster extension for single files."
        ),
    )
    parser.add_argument("--width", type=_positive_float, help="Output width in pixels.")
    parser.add_argument("--height", type=_positive_float, help="Output height in pixels.")
    parser.add_argument(
        "-c",
        "--concurrency",
        type=_positive_int,
        help="Maximum number of documents rendered at the same time (default: 20).",
    )
    parser.add_argument(
        "--format",
        dest="raster_format",
        choices=SUPPORTED_FORMATS,
        help="Raster format to export.",
    )
    parser.add_argument(
        "--browser",
        choices=SUPPORTED_BROWSERS,
        help="Browser engine used for rendering.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (defaults to conf/svg2png.yaml).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse ``argv`` with the svg2png parser."""

    return build_cli_parser().parse_args(argv)


__all__ = ["build_cli_parser", "parse_cli_args"]
