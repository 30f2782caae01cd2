"""Per-job conversion pipeline: load an SVG in a render context and export pixels."""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional

from . import fileio
from . import logging_manager as log_mgr
from .errors import ConversionError, ConversionIOError, EvaluationError, LoadError, RenderError
from .jobs import Dimensions, Failure, Job, Outcome, RequestedSize, Success
from .render.context import LOAD_SUCCESS, RenderContext, RenderContextFactory
from .render.scripts import GET_INTRINSIC_SIZE, SET_SIZE

SourceReader = Callable[[Path], Awaitable[bytes]]
OutputWriter = Callable[[Path, bytes], Awaitable[Any]]


def _dimensions_from_payload(payload: Any) -> Optional[Dimensions]:
    if payload is None:
        return None
    if not isinstance(payload, Mapping):
        raise EvaluationError(f"Unexpected size payload: {payload!r}")
    width = payload.get("width")
    height = payload.get("height")
    if not isinstance(width, (int, float)) or not isinstance(height, (int, float)):
        raise EvaluationError(f"Unexpected size payload: {payload!r}")
    if width <= 0 or height <= 0:
        return None
    return Dimensions(float(width), float(height))


def merge_dimensions(requested: RequestedSize, intrinsic: Optional[Dimensions]) -> Optional[Dimensions]:
    """Combine the requested size with the document's intrinsic size.

    Explicit values win. A missing side is derived from the intrinsic aspect
    ratio. Returns ``None`` when the request is incomplete and the document
    declares no usable size.
    """

    width = requested.width
    height = requested.height
    if width is not None and height is not None:
        return Dimensions(width, height)
    if intrinsic is None:
        return None
    if width is None and height is None:
        return Dimensions(intrinsic.width, intrinsic.height)
    if width is None:
        return Dimensions(height * intrinsic.width / intrinsic.height, height)
    return Dimensions(width, width * intrinsic.height / intrinsic.width)


async def resolve_dimensions(
    context: RenderContext, requested: RequestedSize, *, source: Optional[Path] = None
) -> Dimensions:
    """Size the document root and the viewport, returning the applied dimensions."""

    (await context.evaluate(SET_SIZE, requested.to_payload())).unwrap()
    if requested.is_complete:
        resolved = Dimensions(requested.width, requested.height)
    else:
        payload = (await context.evaluate(GET_INTRINSIC_SIZE)).unwrap()
        resolved = merge_dimensions(requested, _dimensions_from_payload(payload))
        if resolved is None:
            raise EvaluationError(f"No size determinable for {source}", source=source)
    (await context.evaluate(SET_SIZE, resolved.to_payload())).unwrap()
    await context.set_viewport_size(resolved.to_viewport())
    return resolved


async def _acquire(
    context_factory: RenderContextFactory,
    job: Job,
    read_source: SourceReader,
    logger: logging.Logger,
) -> tuple[RenderContext, bytes]:
    context, content = await asyncio.gather(
        context_factory(), read_source(job.source), return_exceptions=True
    )
    if isinstance(content, BaseException):
        if not isinstance(context, BaseException):
            await _dispose(context, logger)
        if isinstance(content, OSError):
            raise ConversionIOError(
                f"Unable to read {job.source}: {content}", source=job.source
            ) from content
        raise content
    if isinstance(context, BaseException):
        raise context
    return context, content


async def _dispose(context: RenderContext, logger: logging.Logger) -> None:
    try:
        await context.dispose()
    except Exception as exc:  # pragma: no cover - engine specific
        logger.warning(
            "Failed to dispose render context",
            extra={"event": "render.dispose_error", "error": str(exc)},
        )


def _decode(encoded: str, job: Job) -> bytes:
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise RenderError(f"{job.source} produced undecodable image data", source=job.source) from exc
    if not data:
        raise RenderError(f"{job.source} produced an empty image", source=job.source)
    return data


def _as_failure(job: Job, exc: Exception) -> Failure:
    if isinstance(exc, ConversionError):
        if exc.source is None:
            exc.source = job.source
        return Failure(job, exc)
    error = RenderError(f"Rendering {job.source} failed: {exc}", source=job.source)
    error.__cause__ = exc
    return Failure(job, error)


async def execute(
    context_factory: RenderContextFactory,
    job: Job,
    *,
    read_source: SourceReader = fileio.read_bytes,
    raster_format: str = "png",
    logger: Optional[logging.Logger] = None,
) -> Outcome:
    """Convert ``job.source`` to raster bytes; never raises for per-job failures."""

    logger = logger or log_mgr.get_logger()
    context: Optional[RenderContext] = None
    try:
        context, content = await _acquire(context_factory, job, read_source, logger)

        status = await context.open(fileio.to_data_uri(content))
        if status != LOAD_SUCCESS:
            logger.debug(
                "Document failed to open",
                extra={"event": "job.load_failed", "status": status},
            )
            raise LoadError(job.source, status)
        logger.debug("Document opened", extra={"event": "job.opened"})

        dimensions = await resolve_dimensions(context, job.size, source=job.source)
        logger.debug(
            "Dimensions resolved",
            extra={"event": "job.sized", "width": dimensions.width, "height": dimensions.height},
        )

        data = _decode(await context.export(raster_format), job)
        return Success(job, job.destination, data)
    except Exception as exc:
        return _as_failure(job, exc)
    finally:
        if context is not None:
            await _dispose(context, logger)


async def convert_job(
    context_factory: RenderContextFactory,
    job: Job,
    *,
    read_source: SourceReader = fileio.read_bytes,
    write_output: OutputWriter = fileio.write_bytes,
    raster_format: str = "png",
    logger: Optional[logging.Logger] = None,
) -> Outcome:
    """Run :func:`execute` for ``job`` and persist the image to its destination."""

    logger = logger or log_mgr.get_logger()
    with log_mgr.log_context(job=str(job.source)):
        start = time.perf_counter()
        outcome = await execute(
            context_factory,
            job,
            read_source=read_source,
            raster_format=raster_format,
            logger=logger,
        )
        if isinstance(outcome, Success):
            try:
                await write_output(outcome.destination, outcome.data)
            except OSError as exc:
                error = ConversionIOError(
                    f"Unable to write {outcome.destination}: {exc}", source=job.source
                )
                error.__cause__ = exc
                outcome = Failure(job, error)
        duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
        if isinstance(outcome, Success):
            logger.debug(
                "%s saved successfully",
                outcome.destination,
                extra={"event": "job.complete", "status": "success", "duration_ms": duration_ms},
            )
        else:
            logger.debug(
                "%s failed: %s",
                job.source,
                outcome.error,
                extra={"event": "job.complete", "status": "failed", "duration_ms": duration_ms},
            )
        return outcome


__all__ = ["convert_job", "execute", "merge_dimensions", "resolve_dimensions"]
