"""
polycache — Cache Abstraction Library

One get/set/delete/clear contract over interchangeable storages, with
TTL ceilings, versioned key salting and probabilistic early expiration
(stampede protection).
"""

__version__ = "1.0.0"

from .cache import (
    Cache,
    CacheInterface,
    MappingStorage,
    MemoryStorage,
    StorageBackend,
    create_cache,
    get_cache,
)
from .clock import Clock, FrozenClock, SystemClock
from .errors import (
    BackendUnavailableError,
    CacheError,
    ConfigurationError,
    InvalidConfigurationError,
    InvalidIterableError,
    InvalidKeyError,
    PolycacheError,
    UncacheableValueError,
)

__all__ = [
    "Cache",
    "CacheInterface",
    "StorageBackend",
    "MemoryStorage",
    "MappingStorage",
    "create_cache",
    "get_cache",
    "Clock",
    "SystemClock",
    "FrozenClock",
    "PolycacheError",
    "CacheError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "InvalidKeyError",
    "InvalidIterableError",
    "UncacheableValueError",
    "BackendUnavailableError",
]
