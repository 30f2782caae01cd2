"""Protocols and result types shared by render engine adapters."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Mapping, Optional, Protocol, TypeVar, Union, runtime_checkable

from ..errors import EvaluationError

T = TypeVar("T")

LOAD_SUCCESS = "success"


@dataclass(frozen=True, slots=True)
class EvalOk(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class EvalFailed:
    error: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise EvaluationError(self.error)


EvalResult = Union[EvalOk[Any], EvalFailed]


def eval_result_from_payload(payload: Any) -> EvalResult:
    """Translate a raw in-document return value into an :data:`EvalResult`.

    Functions evaluated inside a document report failures by returning a
    mapping with an ``error`` key instead of raising.
    """

    if isinstance(payload, Mapping) and payload.get("error"):
        return EvalFailed(str(payload["error"]))
    return EvalOk(payload)


@runtime_checkable
class RenderContext(Protocol):
    """One isolated document plus its output viewport."""

    async def open(self, content: str) -> str:
        """Load ``content`` (a URL or data URI) and return a status string."""

    async def evaluate(self, script: str, arg: Any = None) -> EvalResult:
        """Evaluate ``script`` inside the document with ``arg``."""

    async def get_viewport_size(self) -> Optional[Mapping[str, int]]:
        ...

    async def set_viewport_size(self, size: Mapping[str, int]) -> None:
        ...

    async def export(self, raster_format: str) -> str:
        """Render the viewport and return the image as base64 text."""

    async def dispose(self) -> None:
        ...


RenderContextFactory = Callable[[], Awaitable[RenderContext]]


__all__ = [
    "EvalFailed",
    "EvalOk",
    "EvalResult",
    "LOAD_SUCCESS",
    "RenderContext",
    "RenderContextFactory",
    "eval_result_from_payload",
]
