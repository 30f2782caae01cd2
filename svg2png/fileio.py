"""Filesystem collaborators used by the batch converter.

Blocking filesystem calls run in a worker thread so that a slow disk never
stalls the other render slots sharing the event loop.
"""
from __future__ import annotations

import asyncio
import base64
from pathlib import Path

SVG_DATA_URI_PREFIX = "data:image/svg+xml;base64,"


async def read_bytes(path: Path) -> bytes:
    return await asyncio.to_thread(Path(path).read_bytes)


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def write_bytes(path: Path, data: bytes) -> Path:
    """Write ``data`` to ``path``, creating parent directories, and return ``path``."""

    target = Path(path)
    await asyncio.to_thread(_write, target, data)
    return target


def list_dir(path: Path) -> list[str]:
    """Return the names of the entries in ``path`` sorted alphabetically."""

    return sorted(entry.name for entry in Path(path).iterdir())


def to_data_uri(content: bytes, prefix: str = SVG_DATA_URI_PREFIX) -> str:
    return prefix + base64.b64encode(content).decode("ascii")


__all__ = ["SVG_DATA_URI_PREFIX", "list_dir", "read_bytes", "to_data_uri", "write_bytes"]
