"""
polycache — Cache Module

Provides the Cache facade, its building blocks and pluggable storages.

- facade.py: Cache, the canonical implementation of CacheInterface
- factory.py: Builds caches from configuration
- interface.py: Abstract cache interface
- storage.py: Raw storage capability implemented by backends/
- item.py, salting.py, ttl.py, stampede.py: expiry and key building blocks

Usage:
    from polycache.cache import Cache, MemoryStorage

    cache = Cache(MemoryStorage())
    cache.set("key", "value", ttl=3600)
    value = cache.get("key")
"""

from .backends import MappingStorage, MemoryStorage
from .compat import CachingHelper, LegacyCacheAdapter
from .facade import Cache
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .generation import GenerationCounter
from .interface import CacheInterface
from .item import MISSING, Item
from .salting import CACHE_FORMAT_VERSION, DEFAULT_PREFIX, KeySalter
from .serialization import JsonSerializer, PickleSerializer, Serializer
from .stampede import StampedeProtection
from .storage import StorageBackend
from .ttl import TTLPolicy

__all__ = [
    # Facade and interface
    "Cache",
    "CacheInterface",
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Building blocks
    "Item",
    "MISSING",
    "KeySalter",
    "CACHE_FORMAT_VERSION",
    "DEFAULT_PREFIX",
    "TTLPolicy",
    "StampedeProtection",
    "GenerationCounter",
    "Serializer",
    "PickleSerializer",
    "JsonSerializer",
    # Storages
    "StorageBackend",
    "MemoryStorage",
    "MappingStorage",
    # Compatibility
    "LegacyCacheAdapter",
    "CachingHelper",
]
