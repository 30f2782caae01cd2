"""Command line interface for svg2png."""

from .main import run_cli

__all__ = ["run_cli"]
