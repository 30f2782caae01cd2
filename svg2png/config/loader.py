"""Conversion configuration loader and validation utilities."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "conf" / "svg2png.yaml"

SUPPORTED_FORMATS = ("png", "jpeg")
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

_FORMAT_EXTENSIONS = {"png": ".png", "jpeg": ".jpg"}

_DEFAULT_CONFIG = {
    "concurrency": 20,
    "raster_format": "png",
    "source_pattern": r"\.svg$",
    "browser": "chromium",
    "headless": True,
    "transparent_background": True,
    "default_viewport": {"width": 800, "height": 600},
    "navigation_timeout_ms": 30000,
    "debug": False,
    "log_file": None,
}

_ENV_OVERRIDES = {
    "SVG2PNG_CONCURRENCY": "concurrency",
    "SVG2PNG_FORMAT": "raster_format",
    "SVG2PNG_BROWSER": "browser",
}

_DEBUG_ENV_FLAGS = ("SVG2PNG_DEBUG", "DEBUG", "VERBOSE")


def _coerce_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a positive integer, not a boolean")
    if isinstance(value, int):
        candidate = value
    elif isinstance(value, str) and value.strip():
        if not value.strip().isdigit():
            raise ValueError(f"{name} must be a positive integer")
        candidate = int(value.strip())
    else:
        raise ValueError(f"{name} must be a positive integer")
    if candidate <= 0:
        raise ValueError(f"{name} must be greater than zero")
    return candidate


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off", ""}:
            return False
    raise ValueError(f"{name} must be a boolean value")


def _coerce_choice(name: str, value: Any, choices: tuple[str, ...]) -> str:
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()
    raise ValueError(f"{name} must be one of: {', '.join(choices)}")


def _coerce_pattern(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty regular expression")
    try:
        re.compile(value)
    except re.error as exc:
        raise ValueError(f"{name} is not a valid regular expression: {exc}") from exc
    return value


def _coerce_viewport(name: str, value: Any) -> tuple[int, int]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be a mapping with width and height")
    width = _coerce_positive_int(f"{name}.width", value.get("width"))
    height = _coerce_positive_int(f"{name}.height", value.get("height"))
    return width, height


def _coerce_optional_path(name: str, value: Any) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, (str, Path)) and str(value).strip():
        return Path(str(value).strip()).expanduser()
    raise ValueError(f"{name} must be a non-empty path string")


def _normalise_payload(data: Mapping[str, Any] | None) -> MutableMapping[str, Any]:
    payload: MutableMapping[str, Any] = dict(_DEFAULT_CONFIG)
    if not data:
        return payload
    for key, value in data.items():
        if key not in payload:
            continue
        payload[key] = value
    return payload


def _apply_environment(
    payload: MutableMapping[str, Any], environ: Mapping[str, str]
) -> MutableMapping[str, Any]:
    for env_name, key in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            payload[key] = value
    for env_name in _DEBUG_ENV_FLAGS:
        if environ.get(env_name, "").strip().lower() == "true":
            payload["debug"] = True
            break
    return payload


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Validated converter configuration values."""

    concurrency: int
    raster_format: str
    source_pattern: str
    browser: str
    headless: bool
    transparent_background: bool
    default_viewport: tuple[int, int]
    navigation_timeout_ms: int
    debug: bool
    log_file: Optional[Path]

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any] | None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ConversionConfig":
        normalised = _normalise_payload(payload)
        if environ is not None:
            normalised = _apply_environment(normalised, environ)
        return cls(
            concurrency=_coerce_positive_int("concurrency", normalised["concurrency"]),
            raster_format=_coerce_choice(
                "raster_format", normalised["raster_format"], SUPPORTED_FORMATS
            ),
            source_pattern=_coerce_pattern("source_pattern", normalised["source_pattern"]),
            browser=_coerce_choice("browser", normalised["browser"], SUPPORTED_BROWSERS),
            headless=_coerce_bool("headless", normalised["headless"]),
            transparent_background=_coerce_bool(
                "transparent_background", normalised["transparent_background"]
            ),
            default_viewport=_coerce_viewport(
                "default_viewport", normalised["default_viewport"]
            ),
            navigation_timeout_ms=_coerce_positive_int(
                "navigation_timeout_ms", normalised["navigation_timeout_ms"]
            ),
            debug=_coerce_bool("debug", normalised["debug"]),
            log_file=_coerce_optional_path("log_file", normalised["log_file"]),
        )

    @property
    def output_extension(self) -> str:
        """Return the file extension written for ``raster_format``."""

        return _FORMAT_EXTENSIONS[self.raster_format]

    @property
    def source_regex(self) -> re.Pattern[str]:
        return re.compile(self.source_pattern, re.IGNORECASE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "concurrency": self.concurrency,
            "raster_format": self.raster_format,
            "source_pattern": self.source_pattern,
            "browser": self.browser,
            "headless": self.headless,
            "transparent_background": self.transparent_background,
            "default_viewport": {
                "width": self.default_viewport[0],
                "height": self.default_viewport[1],
            },
            "navigation_timeout_ms": self.navigation_timeout_ms,
            "debug": self.debug,
            "log_file": str(self.log_file) if self.log_file else None,
        }


def load_config(
    path: Optional[Path | str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ConversionConfig:
    """Load and validate the converter configuration from disk and the environment."""

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw_data = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        if path:
            raise
        raw_data = {}
    if not isinstance(raw_data, Mapping):
        raise ValueError(f"{config_path} must contain a mapping of settings")
    return ConversionConfig.from_mapping(
        raw_data, environ=os.environ if environ is None else environ
    )


@lru_cache(maxsize=1)
def get_config() -> ConversionConfig:
    """Return the cached converter configuration."""

    return load_config()


__all__ = [
    "ConversionConfig",
    "SUPPORTED_BROWSERS",
    "SUPPORTED_FORMATS",
    "get_config",
    "load_config",
]
