"""Exception hierarchy shared by the converter."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ConversionError(RuntimeError):
    """Base class for every converter failure."""

    def __init__(self, message: str, *, source: Optional[Path] = None) -> None:
        super().__init__(message)
        self.source = source


class SetupError(ConversionError):
    """Raised when the batch cannot start (engine launch, directory listing)."""


class LoadError(ConversionError):
    """Raised when a document fails to open in a render context."""

    def __init__(self, source: Path, status: str) -> None:
        super().__init__(f"File {source} has been opened with status {status}", source=source)
        self.status = status


class EvaluationError(ConversionError):
    """Raised when a function evaluated inside a document reports an error."""


class ConversionIOError(ConversionError):
    """Raised when reading a source or writing a destination fails."""


class RenderError(ConversionError):
    """Raised for any other failure while rendering or exporting a job."""


class BatchConversionError(ConversionError):
    """Raised by the batch entry points when at least one job failed."""

    def __init__(self, errors: Sequence[ConversionError]) -> None:
        self.errors = list(errors)
        noun = "job" if len(self.errors) == 1 else "jobs"
        super().__init__(f"{len(self.errors)} conversion {noun} failed")


__all__ = [
    "BatchConversionError",
    "ConversionError",
    "ConversionIOError",
    "EvaluationError",
    "LoadError",
    "RenderError",
    "SetupError",
]
