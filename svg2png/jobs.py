"""Value types describing conversion jobs and their outcomes."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .errors import ConversionError


def _coerce_dimension(name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be greater than zero")
    return float(value)


@dataclass(frozen=True, slots=True)
class RequestedSize:
    """Output size asked for by the caller; either side may be omitted."""

    width: Optional[float] = None
    height: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", _coerce_dimension("width", self.width))
        object.__setattr__(self, "height", _coerce_dimension("height", self.height))

    @property
    def is_complete(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def is_empty(self) -> bool:
        return self.width is None and self.height is None

    def to_payload(self) -> dict[str, float]:
        """Return the size as the mapping passed into the document context."""

        payload: dict[str, float] = {}
        if self.width is not None:
            payload["width"] = self.width
        if self.height is not None:
            payload["height"] = self.height
        return payload

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> "RequestedSize":
        if not payload:
            return cls()
        return cls(width=payload.get("width"), height=payload.get("height"))


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Fully resolved output dimensions."""

    width: float
    height: float

    def to_viewport(self) -> dict[str, int]:
        return {"width": max(1, math.ceil(self.width)), "height": max(1, math.ceil(self.height))}

    def to_payload(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Job:
    """A single source to destination conversion."""

    source: Path
    destination: Path
    size: RequestedSize = field(default_factory=RequestedSize)

    def __str__(self) -> str:
        return str(self.source)


@dataclass(frozen=True, slots=True)
class Success:
    job: Job
    destination: Path
    data: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class Failure:
    job: Job
    error: ConversionError


Outcome = Union[Success, Failure]


@dataclass(frozen=True, slots=True)
class AllSucceeded:
    successes: list[Success]

    @property
    def destinations(self) -> list[Path]:
        return [success.destination for success in self.successes]


@dataclass(frozen=True, slots=True)
class AnyFailed:
    failures: list[Failure]

    @property
    def errors(self) -> list[ConversionError]:
        return [failure.error for failure in self.failures]


BatchResult = Union[AllSucceeded, AnyFailed]


__all__ = [
    "AllSucceeded",
    "AnyFailed",
    "BatchResult",
    "Dimensions",
    "Failure",
    "Job",
    "Outcome",
    "RequestedSize",
    "Success",
]
