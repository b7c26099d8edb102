"""
polycache — Storage Capability

The raw interface every backing store implements. Storages only move
bytes under physical keys; validation, salting, TTL policy, envelopes and
stampede protection all live in the Cache facade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any


class StorageBackend(ABC):
    """
    Abstract base class for backing stores.

    Raw calls that fail because the store cannot be reached raise
    BackendUnavailableError; a missing key is never an error.
    """

    #: Backend name used in logs and stats
    name: str = "abstract"

    #: Delimiter used when salting keys for this store
    key_delimiter: str = ":"

    @abstractmethod
    def raw_get(self, key: str) -> bytes | None:
        """
        Fetch the payload stored under a physical key.

        Returns:
            Stored bytes, or None on a miss
        """

    @abstractmethod
    def raw_set(self, key: str, value: bytes, ttl: int = 0) -> bool:
        """
        Store a payload.

        Args:
            key: Physical key
            value: Encoded payload
            ttl: Seconds to keep the payload (0 = no expiry)

        Returns:
            True if stored
        """

    @abstractmethod
    def raw_delete(self, key: str) -> bool:
        """Remove a physical key. Returns True whether or not the key existed."""

    @abstractmethod
    def raw_clear(self) -> bool:
        """Remove everything in the store."""

    def raw_get_many(self, keys: Sequence[str]) -> list[bytes | None]:
        """
        Fetch several payloads, in the order of `keys`.

        Default implementation calls raw_get() for each key.
        Backends can override for better performance.
        """
        return [self.raw_get(key) for key in keys]

    def raw_set_many(self, items: Sequence[tuple[str, bytes]], ttl: int = 0) -> bool:
        """
        Store several payloads with the same TTL.

        Default implementation calls raw_set() for each item. No rollback
        happens if one of them fails.
        """
        success = True
        for key, value in items:
            if not self.raw_set(key, value, ttl):
                success = False
        return success

    def raw_delete_many(self, keys: Sequence[str]) -> bool:
        """
        Remove several physical keys.

        Default implementation calls raw_delete() for each key.
        """
        for key in keys:
            self.raw_delete(key)
        return True

    def increment(self, key: str) -> int:
        """
        Increment the integer counter stored under `key` and return the new value.

        A missing or unparsable counter starts from 1, so the first increment
        returns 2. Default implementation is a read-modify-write and is not
        atomic; stores with a native counter should override it.
        """
        raw = self.raw_get(key)
        current = parse_counter(raw)
        value = (current if current is not None else 1) + 1
        self.raw_set(key, str(value).encode("ascii"), 0)
        return value

    def get_stats(self) -> dict[str, Any]:
        """Backend-specific statistics."""
        return {"backend": self.name}

    def close(self) -> None:  # noqa: B027
        """Release resources held by the store."""


def parse_counter(raw: bytes | str | int | None) -> int | None:
    """Parse a stored integer counter; None if absent or not an integer."""
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    try:
        return int(raw)
    except ValueError:
        return None
