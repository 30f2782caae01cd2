"""Configuration helpers for svg2png."""

from .loader import ConversionConfig, get_config, load_config

__all__ = ["ConversionConfig", "get_config", "load_config"]
