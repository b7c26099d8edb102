"""
polycache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config, reset_config
from .schemas import (
    CacheBackend,
    CacheConfig,
    ClearStrategy,
    Environment,
    LogLevel,
    PolycacheConfig,
    SerializerName,
    StampedeConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    # Main config
    "PolycacheConfig",
    # Enums
    "Environment",
    "CacheBackend",
    "ClearStrategy",
    "SerializerName",
    "LogLevel",
    # Config sections
    "CacheConfig",
    "StampedeConfig",
]
