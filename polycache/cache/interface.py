"""
polycache — Cache Interface

Defines the abstract interface calling code depends on. The Cache facade
implements it over any StorageBackend; the legacy two-method contract is
provided as a shim in compat.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

TTL = int | timedelta | None


class CacheInterface(ABC):
    """
    Abstract base class for caches.

    Keys are strings that must not contain any of `{}()/\\@:`. Values can be
    anything serializable except live resources; storing None deletes the key.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key
            default: Value returned on a miss

        Returns:
            Cached value if found and not expired, `default` otherwise

        Raises:
            InvalidKeyError: If the key is not a legal value
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        """
        Store a value in the cache.

        Args:
            key: Cache key
            value: Value to cache; None deletes the key
            ttl: Time-to-live in seconds or as a timedelta
                (None = use the cache's default, 0 = no expiry)

        Returns:
            True if stored successfully, False otherwise

        Raises:
            InvalidKeyError: If the key is not a legal value
            UncacheableValueError: If the value is a resource or cannot be serialized
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True; a missing key is not an error
        """

    @abstractmethod
    def clear(self) -> bool:
        """
        Remove every entry of this cache.

        Returns:
            True if the cache was cleared
        """

    @abstractmethod
    def has(self, key: str) -> bool:
        """
        Check if a key is present and not expired.

        Only use for cache warming: another process can remove the key
        between has() returning True and a following get().
        """

    def get_many(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """
        Retrieve multiple values from the cache.

        Default implementation calls get() for each key.
        Backends can override for better performance.

        Returns:
            Dictionary mapping every requested key to its value or `default`
        """
        return {key: self.get(key, default) for key in keys}

    def set_many(self, values: Mapping[str, Any] | Iterable[tuple[str, Any]], ttl: TTL = None) -> bool:
        """
        Store multiple values in the cache.

        Default implementation calls set() for each item. Items already
        stored are not rolled back if a later one fails.

        Returns:
            True if every item was stored
        """
        items = values.items() if isinstance(values, Mapping) else values
        success = True
        for key, value in items:
            if not self.set(key, value, ttl):
                success = False
        return success

    def delete_many(self, keys: Iterable[str]) -> bool:
        """
        Delete multiple keys from the cache.

        Default implementation calls delete() for each key.
        """
        for key in keys:
            self.delete(key)
        return True

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics (hits, misses, size, etc.)."""
        return {}

    def close(self) -> None:  # noqa: B027
        """Release resources held by the cache."""
