"""Relay paths and the configuration they are loaded from."""

from .config import (
    ChainConfig,
    ChainNotFoundError,
    ConfigError,
    KeepAliveConfig,
    PathNotFoundError,
    RelayerConfig,
)
from .path import Direction, PathEnd, RelayPath

__all__ = [
    "ChainConfig",
    "ChainNotFoundError",
    "ConfigError",
    "Direction",
    "KeepAliveConfig",
    "PathEnd",
    "PathNotFoundError",
    "RelayPath",
    "RelayerConfig",
]
