"""Command line entry point for svg2png."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path
from typing import Optional, Sequence

from .. import logging_manager as log_mgr
from ..api import convert_dir_sync, convert_files_sync
from ..config.loader import ConversionConfig, load_config
from ..environment import load_environment
from ..errors import BatchConversionError, SetupError
from ..jobs import RequestedSize
from .args import parse_cli_args

EXIT_OK = 0
EXIT_BATCH_FAILED = 1
EXIT_SETUP_FAILED = 2


def _apply_overrides(config: ConversionConfig, args) -> ConversionConfig:
    overrides = {}
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.raster_format:
        overrides["raster_format"] = args.raster_format
    if args.browser:
        overrides["browser"] = args.browser
    if args.debug:
        overrides["debug"] = True
    return dataclasses.replace(config, **overrides) if overrides else config


def _single_file_destination(source: Path, destination: Optional[str], config: ConversionConfig) -> Path:
    if destination is None:
        return source.with_suffix(config.output_extension)
    target = Path(destination)
    if target.is_dir():
        return target / (source.stem + config.output_extension)
    return target


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """Execute the CLI with ``argv`` and return the process exit code."""

    load_environment()
    args = parse_cli_args(argv)
    try:
        config = _apply_overrides(load_config(args.config), args)
    except (OSError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_SETUP_FAILED

    logger = log_mgr.setup_logging(log_file=config.log_file)
    log_mgr.configure_logging_level(debug_enabled=config.debug)

    size = RequestedSize(width=args.width, height=args.height)
    source = Path(args.source)
    try:
        if source.is_dir():
            if not args.destination:
                print("A destination directory is required when converting a directory", file=sys.stderr)
                return EXIT_SETUP_FAILED
            written = convert_dir_sync(source, args.destination, size, config=config, logger=logger)
        else:
            destination = _single_file_destination(source, args.destination, config)
            written = convert_files_sync({source: destination}, size, config=config, logger=logger)
    except SetupError as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return EXIT_SETUP_FAILED
    except BatchConversionError as exc:
        print(str(exc), file=sys.stderr)
        for error in exc.errors:
            print(f"  {error.source}: {error}", file=sys.stderr)
        return EXIT_BATCH_FAILED

    for path in written:
        print(path)
    return EXIT_OK


__all__ = ["EXIT_BATCH_FAILED", "EXIT_OK", "EXIT_SETUP_FAILED", "run_cli"]
