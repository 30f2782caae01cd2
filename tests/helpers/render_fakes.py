"""In-memory stand-ins for the Playwright render engine used by the tests."""
from __future__ import annotations

import asyncio
import base64
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from svg2png.fileio import SVG_DATA_URI_PREFIX
from svg2png.render.context import LOAD_SUCCESS, EvalResult, eval_result_from_payload
from svg2png.render.scripts import GET_INTRINSIC_SIZE, SET_SIZE

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"

_PERCENT = re.compile(r"%\s*$")


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = re.match(r"\s*([-+]?\d*\.?\d+)", value)
    return float(match.group(1)) if match else None


def _js_number(value: float) -> str:
    """Format ``value`` the way JavaScript string concatenation does."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class FakeDocument:
    """Root element attributes of a loaded SVG document."""

    width: Optional[str] = None
    height: Optional[str] = None
    view_box: Optional[Tuple[float, float]] = None

    def intrinsic_size(self) -> Any:
        width = None if _PERCENT.search(self.width or "") else _parse_float(self.width)
        height = None if _PERCENT.search(self.height or "") else _parse_float(self.height)
        if width and height:
            return {"width": width, "height": height}
        vb_width, vb_height = self.view_box or (0, 0)
        if width and vb_width and vb_height:
            return {"width": width, "height": width * vb_height / vb_width}
        if height and vb_width and vb_height:
            return {"width": height * vb_width / vb_height, "height": height}
        return None

    def set_size(self, sizes: Mapping[str, Any]) -> Any:
        width = sizes.get("width") if sizes else None
        height = sizes.get("height") if sizes else None
        if not width and not height:
            return sizes
        self.width = f"{_js_number(width)}px" if width else None
        self.height = f"{_js_number(height)}px" if height else None
        return sizes


@dataclass
class FakeBehaviour:
    """How the fake engine treats one source document."""

    document: FakeDocument = field(default_factory=lambda: FakeDocument(width="10", height="10"))
    status: str = LOAD_SUCCESS
    eval_error: Optional[str] = None
    export_error: Optional[Exception] = None
    delay: float = 0.0
    image: bytes = PNG_BYTES


class FakeRenderContext:
    def __init__(self, engine: "FakeRenderEngine") -> None:
        self._engine = engine
        self.behaviour = FakeBehaviour()
        self.content: Optional[str] = None
        self.viewport: Dict[str, int] = {"width": 800, "height": 600}
        self.evaluations: List[str] = []
        self.exported = False
        self.disposed = False

    async def open(self, content: str) -> str:
        self.content = content
        svg = base64.b64decode(content[len(SVG_DATA_URI_PREFIX):]).decode("utf-8")
        self.behaviour = self._engine.behaviour_for(svg)
        await asyncio.sleep(self.behaviour.delay)
        return self.behaviour.status

    async def evaluate(self, script: str, arg: Any = None) -> EvalResult:
        await asyncio.sleep(0)
        if self.behaviour.eval_error:
            return eval_result_from_payload({"error": self.behaviour.eval_error})
        if script == SET_SIZE:
            self.evaluations.append("set_size")
            return eval_result_from_payload(self.behaviour.document.set_size(arg))
        if script == GET_INTRINSIC_SIZE:
            self.evaluations.append("get_intrinsic_size")
            return eval_result_from_payload(self.behaviour.document.intrinsic_size())
        raise AssertionError(f"unexpected script: {script!r}")

    async def get_viewport_size(self) -> Dict[str, int]:
        return dict(self.viewport)

    async def set_viewport_size(self, size: Mapping[str, int]) -> None:
        self.viewport = {"width": size["width"], "height": size["height"]}

    async def export(self, raster_format: str) -> str:
        await asyncio.sleep(0)
        if self.behaviour.export_error is not None:
            raise self.behaviour.export_error
        self.exported = True
        return base64.b64encode(self.behaviour.image).decode("ascii")

    async def dispose(self) -> None:
        if not self.disposed:
            self.disposed = True
            self._engine.open_contexts -= 1


class FakeRenderEngine:
    """Track opened contexts so tests can assert on concurrency and cleanup.

    ``behaviours`` maps a marker string found in the SVG source to the
    behaviour the document should exhibit once loaded.
    """

    def __init__(
        self,
        behaviours: Optional[Mapping[str, FakeBehaviour]] = None,
        *,
        start_error: Optional[Exception] = None,
    ) -> None:
        self.behaviours = dict(behaviours or {})
        self.start_error = start_error
        self.started = False
        self.closed = False
        self.open_contexts = 0
        self.peak_contexts = 0
        self.contexts: List[FakeRenderContext] = []

    def behaviour_for(self, svg: str) -> FakeBehaviour:
        for marker, behaviour in self.behaviours.items():
            if marker in svg:
                return behaviour
        return FakeBehaviour(document=FakeDocument(width="10", height="10"))

    async def start(self) -> "FakeRenderEngine":
        if self.start_error is not None:
            raise self.start_error
        self.started = True
        return self

    async def new_context(self) -> FakeRenderContext:
        if not self.started or self.closed:
            raise AssertionError("context requested outside of a running engine")
        await asyncio.sleep(0)
        context = FakeRenderContext(self)
        self.contexts.append(context)
        self.open_contexts += 1
        self.peak_contexts = max(self.peak_contexts, self.open_contexts)
        return context

    async def close(self) -> None:
        self.closed = True


__all__ = [
    "FakeBehaviour",
    "FakeDocument",
    "FakeRenderContext",
    "FakeRenderEngine",
    "PNG_BYTES",
]
