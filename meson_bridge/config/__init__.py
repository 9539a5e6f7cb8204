"""Configuration utilities for the bridge CLI."""

from .loader import (
    ApiConfig,
    ChainConfig,
    ConfigError,
    DEFAULT_API_URL,
    DEFAULT_EXPLORER_URL,
    MesonConfig,
    load_config,
)

__all__ = [
    "ApiConfig",
    "ChainConfig",
    "ConfigError",
    "DEFAULT_API_URL",
    "DEFAULT_EXPLORER_URL",
    "MesonConfig",
    "load_config",
]
