"""Public batch entry points for converting SVG files to raster images."""
from __future__ import annotations

import asyncio
import functools
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from . import fileio
from . import logging_manager as log_mgr
from .config.loader import ConversionConfig, get_config
from .errors import BatchConversionError, SetupError
from .jobs import AnyFailed, Job, RequestedSize
from .pipeline import convert_job
from .pool import WorkPool
from .render.engine import PlaywrightRenderEngine, RenderEngine

PathLike = Union[str, Path]
SizeLike = Union[RequestedSize, Mapping[str, Any], None]


def _requested_size(size: SizeLike) -> RequestedSize:
    if isinstance(size, RequestedSize):
        return size
    return RequestedSize.from_mapping(size)


def _resolve_logger(config: ConversionConfig, logger: Optional[logging.Logger]) -> logging.Logger:
    if logger is not None:
        return logger
    resolved = log_mgr.setup_logging(log_file=config.log_file)
    log_mgr.configure_logging_level(debug_enabled=config.debug)
    return resolved


def build_file_map(
    src_dir: PathLike,
    dst_dir: PathLike,
    config: Optional[ConversionConfig] = None,
) -> dict[Path, Path]:
    """Map every matching file in ``src_dir`` to a same-stem raster file in ``dst_dir``."""

    config = config or get_config()
    source_root = Path(src_dir)
    target_root = Path(dst_dir)
    pattern = config.source_regex
    try:
        names = fileio.list_dir(source_root)
    except OSError as exc:
        raise SetupError(f"Unable to list {source_root}: {exc}", source=source_root) from exc

    file_map: dict[Path, Path] = {}
    for name in names:
        if not pattern.search(name):
            continue
        source = source_root / name
        if not source.is_file():
            continue
        file_map[source] = target_root / (Path(name).stem + config.output_extension)
    return file_map


async def convert_files(
    file_map: Mapping[PathLike, PathLike],
    size: SizeLike = None,
    concurrency: Optional[int] = None,
    *,
    config: Optional[ConversionConfig] = None,
    engine: Optional[RenderEngine] = None,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Convert every ``source -> destination`` pair and return the written paths.

    Raises :class:`BatchConversionError` carrying the per-job errors when any
    conversion failed; files written by the successful jobs are left in place.
    Raises :class:`SetupError` when the render engine cannot be started.
    """

    config = config or get_config()
    logger = _resolve_logger(config, logger)
    requested = _requested_size(size)
    capacity = config.concurrency if concurrency is None else concurrency
    jobs = [Job(Path(source), Path(destination), requested) for source, destination in file_map.items()]
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ValueError("concurrency must be a positive integer")
    if not jobs:
        return []

    engine = engine or PlaywrightRenderEngine(config, logger=logger)
    try:
        try:
            await engine.start()
        except SetupError:
            raise
        except Exception as exc:
            raise SetupError(f"Unable to start the render engine: {exc}") from exc
        logger.debug("Render engine instance created", extra={"event": "batch.engine_ready"})

        runner = functools.partial(
            convert_job,
            engine.new_context,
            raster_format=config.raster_format,
            logger=logger,
        )
        result = await WorkPool(capacity, runner, logger=logger).run(jobs)
    finally:
        await engine.close()

    if isinstance(result, AnyFailed):
        raise BatchConversionError(result.errors)
    return result.destinations


async def convert_dir(
    src_dir: PathLike,
    dst_dir: PathLike,
    size: SizeLike = None,
    concurrency: Optional[int] = None,
    *,
    config: Optional[ConversionConfig] = None,
    engine: Optional[RenderEngine] = None,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Convert every SVG in ``src_dir`` into ``dst_dir`` keeping the file stem."""

    config = config or get_config()
    file_map = await asyncio.to_thread(build_file_map, src_dir, dst_dir, config)
    return await convert_files(
        file_map,
        size,
        concurrency,
        config=config,
        engine=engine,
        logger=logger,
    )


def convert_files_sync(
    file_map: Mapping[PathLike, PathLike],
    size: SizeLike = None,
    concurrency: Optional[int] = None,
    **kwargs: Any,
) -> list[Path]:
    """Blocking wrapper around :func:`convert_files`."""

    return asyncio.run(convert_files(file_map, size, concurrency, **kwargs))


def convert_dir_sync(
    src_dir: PathLike,
    dst_dir: PathLike,
    size: SizeLike = None,
    concurrency: Optional[int] = None,
    **kwargs: Any,
) -> list[Path]:
    """Blocking wrapper around :func:`convert_dir`."""

    return asyncio.run(convert_dir(src_dir, dst_dir, size, concurrency, **kwargs))


__all__ = [
    "build_file_map",
    "convert_dir",
    "convert_dir_sync",
    "convert_files",
    "convert_files_sync",
]
