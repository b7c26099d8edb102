"""
polycache — Cache Factory

Builds Cache instances from configuration and keeps a registry of named
instances.

Key points:
- Select the storage with CACHE_BACKEND=memory|redis|mapping
  - Defaults to redis when REDIS_URL is set, memory otherwise
  - redis needs the redis client installed and REDIS_URL set
  - mapping needs a caller-supplied mapping (e.g. a session) passed as `session`
- All configuration is typed and validated via Pydantic models

Examples:
    from polycache.cache.factory import create_cache, get_cache

    # Uses env-configured backend (memory by default)
    cache = create_cache()

    # Or explicitly supply a CacheConfig (e.g., for tests)
    from polycache.config import CacheBackend, CacheConfig
    cfg = CacheConfig(backend=CacheBackend.MEMORY, maximum_ttl=600)
    mem_cache = create_cache(cfg, name="test")
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from ..clock import Clock
from ..config import CacheBackend, CacheConfig, SerializerName, get_config
from ..errors import ConfigurationError
from .backends.mapping import MappingStorage
from .backends.memory import MemoryStorage
from .facade import Cache
from .salting import DEFAULT_PREFIX
from .serialization import get_serializer
from .stampede import StampedeProtection
from .storage import StorageBackend

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, Cache] = {}


def _create_redis_storage(config: CacheConfig) -> StorageBackend:
    """Internal helper to construct redis storage with lazy import."""
    if not config.redis_url:
        raise ConfigurationError(
            "REDIS_URL must be set when CACHE_BACKEND=redis",
            details={"env": "REDIS_URL", "backend": "redis"},
        )

    # Lazy import to avoid hard dependency when memory storage is used
    try:
        from .backends.redis import RedisStorage
    except ImportError as e:
        logger.error(
            "Redis backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Redis backend selected but redis client is unavailable. "
            "Install with: pip install 'redis>=5.0.0' or add to dependencies.",
            details={"package": "redis>=5.0.0", "error": str(e), "backend": "redis"},
        ) from e

    return RedisStorage(
        redis_url=config.redis_url,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
    )


def _create_storage(
    config: CacheConfig,
    session: MutableMapping[str, Any] | None,
) -> StorageBackend:
    backend = CacheBackend(config.backend)

    if backend == CacheBackend.MEMORY:
        return MemoryStorage(max_size=config.max_size)
    if backend == CacheBackend.REDIS:
        return _create_redis_storage(config)
    if backend == CacheBackend.MAPPING:
        if session is None:
            raise ConfigurationError(
                "The mapping backend needs a session mapping",
                details={"backend": "mapping"},
            )
        return MappingStorage(session, key_prefix=DEFAULT_PREFIX)

    raise ConfigurationError(
        f"Unknown cache backend: {config.backend}",
        details={
            "backend": str(config.backend),
            "supported": [b.value for b in CacheBackend],
        },
    )


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
    *,
    session: MutableMapping[str, Any] | None = None,
    clock: Clock | None = None,
) -> Cache:
    """
    Create a cache instance based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)
        session: Backing mapping for the mapping backend
        clock: Time source (system clock if not provided)

    Returns:
        Configured Cache instance

    Raises:
        ConfigurationError: If cache configuration is invalid or backend unavailable
    """
    # Return existing instance if already created
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    # Use global config if not provided
    if config is None:
        config = get_config().cache

    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        config.backend,
        extra={"cache_name": name, "backend": str(config.backend)},
    )

    storage = _create_storage(config, session)

    cache = Cache(
        storage,
        clock=clock,
        suffix=config.suffix,
        default_ttl=config.default_ttl,
        maximum_ttl=config.maximum_ttl,
        serializer=get_serializer(SerializerName(config.serializer).value),
        stampede=StampedeProtection(
            enabled=config.stampede.enabled,
            beta=config.stampede.beta,
            delta=config.stampede.delta,
        ),
        clear_strategy=config.clear_strategy,
        swallow_backend_errors=config.swallow_backend_errors,
    )

    # Store instance in registry
    _cache_instances[name] = cache

    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "backend": str(config.backend)},
    )

    return cache


def get_cache(name: str = "default") -> Cache:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it will be created automatically
    using the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def close_all_caches() -> None:
    """
    Close all cache instances and release resources.

    Should be called during graceful shutdown.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Reset the cache factory by clearing all instance references.

    Does NOT call close() on instances - use close_all_caches() for proper cleanup.
    Only use this in testing contexts.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
