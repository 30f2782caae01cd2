"""Render engine adapters and in-document helpers."""

from .context import (
    LOAD_SUCCESS,
    EvalFailed,
    EvalOk,
    EvalResult,
    RenderContext,
    RenderContextFactory,
)
from .engine import PlaywrightRenderContext, PlaywrightRenderEngine, RenderEngine

__all__ = [
    "EvalFailed",
    "EvalOk",
    "EvalResult",
    "LOAD_SUCCESS",
    "PlaywrightRenderContext",
    "PlaywrightRenderEngine",
    "RenderContext",
    "RenderContextFactory",
    "RenderEngine",
]
