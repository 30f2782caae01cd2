"""Helpers for loading environment variable files for the converter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional, Tuple

from dotenv import load_dotenv

# Files that have already been processed. The CLI loads them once per process;
# later calls return the cached tuple unless ``force`` is set.
_LOADED_FILES: Tuple[Path, ...] | None = None


def _iter_candidate_files(root: Path) -> Iterable[Path]:
    """Yield potential dotenv files in order of precedence."""

    explicit_paths = os.environ.get("SVG2PNG_ENV_FILE")
    if explicit_paths:
        for value in explicit_paths.split(os.pathsep):
            if value.strip():
                yield Path(value).expanduser().resolve()

    for name in (".env", ".env.local"):
        yield (root / name).resolve()


def load_environment(*, root: Optional[Path] = None, force: bool = False) -> Tuple[Path, ...]:
    """Load environment variables from dotenv files under ``root`` (default: cwd)."""

    global _LOADED_FILES
    if _LOADED_FILES is not None and not force:
        return _LOADED_FILES

    loaded: list[Path] = []
    seen: set[Path] = set()
    for path in _iter_candidate_files(root or Path.cwd()):
        if path in seen:
            continue
        seen.add(path)
        if not path.is_file():
            continue
        if load_dotenv(path, override=False):
            loaded.append(path)
    _LOADED_FILES = tuple(loaded)
    return _LOADED_FILES


__all__ = ["load_environment"]
