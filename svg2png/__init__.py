"""Batch SVG to raster conversion driven by a headless browser."""

from .api import (
    build_file_map,
    convert_dir,
    convert_dir_sync,
    convert_files,
    convert_files_sync,
)
from .errors import (
    BatchConversionError,
    ConversionError,
    ConversionIOError,
    EvaluationError,
    LoadError,
    RenderError,
    SetupError,
)
from .jobs import RequestedSize

__all__ = [
    "BatchConversionError",
    "ConversionError",
    "ConversionIOError",
    "EvaluationError",
    "LoadError",
    "RenderError",
    "RequestedSize",
    "SetupError",
    "build_file_map",
    "convert_dir",
    "convert_dir_sync",
    "convert_files",
    "convert_files_sync",
]
