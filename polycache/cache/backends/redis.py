"""
polycache — Redis Storage

Redis storage with:
- Native per-key TTL via SET EX
- Batch operations using MGET and non-transactional pipelines
- Atomic generation counter via INCR

Requires: redis>=5.0

Example:
    storage = RedisStorage(redis_url="redis://localhost:6379/0")
    cache = Cache(storage, suffix="my-app", clear_strategy="generation")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from ...errors import BackendUnavailableError
from ..storage import StorageBackend

logger = logging.getLogger(__name__)

try:
    from redis import Redis
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import RedisError
    from redis.exceptions import TimeoutError as RedisTimeoutError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e

T = TypeVar("T")

# Keys per DEL / pipeline round-trip
BATCH_SIZE = 1000


class RedisStorage(StorageBackend):
    """
    Redis storage.

    Notes:
    - Payloads are stored as raw bytes (decode_responses is forced off).
    - A TTL of 0 stores without expiry.
    - raw_clear() issues FLUSHDB: on a shared database this removes keys that
      were not written by polycache. Prefer the generation clear strategy there.
    """

    name = "redis"
    key_delimiter = ":"

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        client: Redis | None = None,
        max_connections: int = 10,
        socket_timeout: int = 5,
    ) -> None:
        """
        Initialize Redis storage.

        Args:
            redis_url: Connection URL, e.g. redis://localhost:6379/0 or rediss:// for TLS
            client: Existing redis-py client to use instead of building one from the URL
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
        """
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")

            # Lazy connection; connects on first command
            client = Redis.from_url(
                url=redis_url,
                decode_responses=False,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
            )

        self._client = client
        self._errors = 0

    def _call(self, operation: str, func: Callable[[], T], key: str | None = None) -> T:
        """Run a client call, translating client failures into BackendUnavailableError."""
        try:
            return func()
        except RedisTimeoutError as e:
            self._errors += 1
            raise BackendUnavailableError(
                self.name, operation, transient=True, details={"key": key, "error": str(e)}
            ) from e
        except RedisConnectionError as e:
            self._errors += 1
            raise BackendUnavailableError(
                self.name, operation, transient=False, details={"key": key, "error": str(e)}
            ) from e
        except RedisError as e:
            self._errors += 1
            raise BackendUnavailableError(
                self.name, operation, transient=True, details={"key": key, "error": str(e)}
            ) from e

    # ------------ Core Interface ------------

    def raw_get(self, key: str) -> bytes | None:
        return self._call("get", lambda: self._client.get(key), key)

    def raw_set(self, key: str, value: bytes, ttl: int = 0) -> bool:
        ex = ttl if ttl > 0 else None
        # redis-py returns True or 'OK' depending on decode_responses
        res = self._call("set", lambda: self._client.set(name=key, value=value, ex=ex), key)
        return bool(res)

    def raw_delete(self, key: str) -> bool:
        self._call("delete", lambda: self._client.delete(key), key)
        return True

    def raw_clear(self) -> bool:
        self._call("flushdb", lambda: self._client.flushdb())
        logger.info("Flushed redis database")
        return True

    # ------------ Batch operations (pipeline) ------------

    def raw_get_many(self, keys: Sequence[str]) -> list[bytes | None]:
        """Fetch in one round-trip using MGET; order is preserved."""
        if not keys:
            return []
        return list(self._call("mget", lambda: self._client.mget(list(keys))))

    def raw_set_many(self, items: Sequence[tuple[str, bytes]], ttl: int = 0) -> bool:
        """Store using a non-transactional pipeline; no rollback on partial failure."""
        if not items:
            return True

        ex = ttl if ttl > 0 else None

        def execute() -> list[Any]:
            pipe = self._client.pipeline(transaction=False)
            for key, value in items:
                pipe.set(key, value, ex=ex)
            return pipe.execute()

        results = self._call("set_many", execute)
        # Results are ["OK" | True | None...] depending on server/config
        return all(r in (True, "OK", b"OK") for r in results)

    def raw_delete_many(self, keys: Sequence[str]) -> bool:
        """Delete in chunks with variadic DEL."""
        for i in range(0, len(keys), BATCH_SIZE):
            chunk = list(keys[i : i + BATCH_SIZE])
            self._call("delete_many", lambda chunk=chunk: self._client.delete(*chunk))
        return True

    def increment(self, key: str) -> int:
        """
        Atomically advance a counter.

        SET NX seeds an absent counter with 1 so the first INCR yields 2,
        matching the bootstrap generation.
        """

        def execute() -> list[Any]:
            pipe = self._client.pipeline(transaction=True)
            pipe.set(key, 1, nx=True)
            pipe.incr(key)
            return pipe.execute()

        results = self._call("incr", execute, key)
        return int(results[-1])

    # ------------ Lifecycle ------------

    def get_stats(self) -> dict[str, Any]:
        """Return storage statistics and basic Redis info."""
        stats: dict[str, Any] = {
            "backend": self.name,
            "errors": self._errors,
            "connected": False,
        }

        try:
            stats["connected"] = bool(self._client.ping())

            info = self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
            stats["redis_mode"] = info.get("redis_mode")
        except RedisError as e:
            # If INFO is restricted or fails, keep minimal stats
            logger.warning("Failed to get Redis INFO (restricted or unavailable): %s", e, extra={"error": str(e)})

        return stats

    def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            self._client.close()
            logger.info("Closed Redis storage")
        except RedisError as e:
            logger.error("Error closing Redis client: %s", e, extra={"error": str(e)}, exc_info=True)
