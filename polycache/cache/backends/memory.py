"""
polycache — Memory Storage

In-process storage with LRU eviction and TTL support.
Thread-safe and suitable for single-process deployments.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Sequence
from typing import Any

from ..storage import StorageBackend

logger = logging.getLogger(__name__)


class MemoryStorage(StorageBackend):
    """
    In-memory storage with LRU eviction.

    Features:
    - LRU eviction when max_size is reached
    - Per-key TTL, enforced lazily on read
    - Thread-safe operations
    - O(1) get/set/delete operations
    """

    name = "memory"
    key_delimiter = ":"

    def __init__(self, max_size: int = 1000):
        """
        Initialize memory storage.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.max_size = max_size

        # Storage: key -> (payload, expiry_time)
        self._store: OrderedDict[str, tuple[bytes, float | None]] = OrderedDict()

        self._evictions = 0
        self._expirations = 0

        self._lock = threading.Lock()

    def _is_expired(self, expiry: float | None) -> bool:
        """Check if entry is expired."""
        if expiry is None:
            return False
        return time.time() >= expiry

    def _get_locked(self, key: str) -> bytes | None:
        entry = self._store.get(key)
        if entry is None:
            return None

        payload, expiry = entry
        if self._is_expired(expiry):
            # Remove expired entry
            del self._store[key]
            self._expirations += 1
            return None

        # Mark as recently used
        self._store.move_to_end(key)
        return payload

    def _set_locked(self, key: str, value: bytes, ttl: int) -> None:
        expiry = time.time() + ttl if ttl > 0 else None

        # Evict if at capacity and key is new
        if key not in self._store and len(self._store) >= self.max_size:
            evicted_key, _ = self._store.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted key from memory storage: %s", evicted_key)

        self._store[key] = (value, expiry)
        self._store.move_to_end(key)

    def raw_get(self, key: str) -> bytes | None:
        with self._lock:
            return self._get_locked(key)

    def raw_set(self, key: str, value: bytes, ttl: int = 0) -> bool:
        with self._lock:
            self._set_locked(key, value, ttl)
        return True

    def raw_delete(self, key: str) -> bool:
        with self._lock:
            self._store.pop(key, None)
        return True

    def raw_clear(self) -> bool:
        with self._lock:
            size = len(self._store)
            self._store.clear()
        logger.info("Cleared %d entries from memory storage", size)
        return True

    def raw_get_many(self, keys: Sequence[str]) -> list[bytes | None]:
        with self._lock:
            return [self._get_locked(key) for key in keys]

    def raw_set_many(self, items: Sequence[tuple[str, bytes]], ttl: int = 0) -> bool:
        with self._lock:
            for key, value in items:
                self._set_locked(key, value, ttl)
        return True

    def raw_delete_many(self, keys: Sequence[str]) -> bool:
        with self._lock:
            for key in keys:
                self._store.pop(key, None)
        return True

    def increment(self, key: str) -> int:
        """Atomic under the storage lock."""
        with self._lock:
            raw = self._get_locked(key)
            try:
                current = int(raw) if raw is not None else 1
            except ValueError:
                current = 1
            value = current + 1
            self._set_locked(key, str(value).encode("ascii"), 0)
            return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "backend": self.name,
                "size": len(self._store),
                "max_size": self.max_size,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

    def close(self) -> None:
        # Memory storage doesn't need cleanup - data persists in-process
        logger.debug("Memory storage closed")
