"""
polycache — Compatibility Helpers

- LegacyCacheAdapter: the older two-method get/set contract over a Cache
- CachingHelper: optional-cache convenience for repositories; every call is
  a no-op when no cache is attached
"""

from __future__ import annotations

from typing import Any

from .interface import TTL, CacheInterface


class LegacyCacheAdapter:
    """
    Two-method cache contract kept for older callers.

    get() returns None on a miss; set() takes a TTL in seconds where 0 means
    no expiry, and storing None deletes the key.
    """

    def __init__(self, cache: CacheInterface):
        self._cache = cache

    def get(self, key: str) -> Any | None:
        return self._cache.get(key)

    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        return self._cache.set(key, value, ttl)


class CachingHelper:
    """
    Caching convenience for repositories and services.

    Example:
        class UserRepository:
            def __init__(self, cache: CacheInterface | None = None):
                self.caching = CachingHelper(cache, default_ttl=300)

            def find(self, user_id: str) -> dict:
                user = self.caching.get_from_cache(f"user.{user_id}")
                if user is None:
                    user = self._load(user_id)
                    self.caching.set_to_cache(f"user.{user_id}", user)
                return user
    """

    def __init__(self, cache: CacheInterface | None = None, default_ttl: int | None = None):
        self._cache = cache
        self._default_ttl = default_ttl

    @property
    def cache(self) -> CacheInterface | None:
        return self._cache

    def set_cache(self, cache: CacheInterface | None) -> None:
        self._cache = cache

    def set_cache_ttl(self, ttl: int | None) -> None:
        self._default_ttl = int(ttl) if ttl is not None else None

    def get_from_cache(self, key: str) -> Any | None:
        if self._cache is None:
            return None

        return self._cache.get(key)

    def set_to_cache(self, key: str, value: Any, ttl: TTL = None) -> None:
        """Store a value, using the helper's default TTL when none is given."""
        if self._cache is None:
            return

        if ttl is None:
            ttl = self._default_ttl

        self._cache.set(key, value, ttl)

    def clear_cache(self) -> None:
        if self._cache is None:
            return

        self._cache.clear()
