"""Structured JSON logging for conversion batches.

Records carry the job and slot they were emitted from through a context
variable, so pool workers and the pipeline never thread those values through
every call by hand.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

LOGGER_NAME = "svg2png"
DEFAULT_LOG_LEVEL = logging.WARNING

_logger: Optional[logging.Logger] = None
_job_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "svg2png_job_context", default={}
)

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord(LOGGER_NAME, logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class JSONLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    CONTEXT_FIELDS: tuple[str, ...] = ("job", "slot", "event", "status", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra: Dict[str, object] = {}
        for key, value in record.__dict__.items():
            if key in self.CONTEXT_FIELDS:
                if value is not None:
                    payload[key] = value
            elif key not in _RECORD_ATTRIBUTES:
                extra[key] = value
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy the active job context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _job_context.get().items():
            setattr(record, key, value)
        return True


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    *,
    log_file: Optional[Path | str] = None,
) -> logging.Logger:
    """Configure the package logger once, optionally mirroring output to ``log_file``."""
    global _logger

    if _logger is None:
        logger = logging.getLogger(LOGGER_NAME)
        logger.propagate = False
        logger.addFilter(LogContextFilter())
        formatter = JSONLogFormatter()
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=5))
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        _logger = logger
    configure_logging_level(log_level=log_level)
    return _logger


def get_logger() -> logging.Logger:
    """Return the package logger, configuring it with defaults on first use."""
    return _logger if _logger is not None else setup_logging()


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int] = None) -> int:
    """Switch between the quiet default level and DEBUG output."""
    logger = get_logger()
    if log_level is None:
        log_level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)
    return log_level


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Attach ``values`` (``None`` entries skipped) to records logged inside the block."""

    current = dict(_job_context.get())
    current.update({key: value for key, value in values.items() if value is not None})
    token = _job_context.set(current)
    try:
        yield
    finally:
        _job_context.reset(token)


__all__ = [
    "JSONLogFormatter",
    "LogContextFilter",
    "configure_logging_level",
    "get_logger",
    "log_context",
    "setup_logging",
]
