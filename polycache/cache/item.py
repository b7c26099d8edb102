"""
polycache — Item Envelope

The record every storage holds: the cached data, its absolute expiry,
and the TTL the caller originally asked for. Expiry is enforced here for
stores that do not support it natively.
"""

from __future__ import annotations

import io
import mmap
import selectors
import socket
import sqlite3
import threading
from datetime import UTC, datetime
from typing import Any

from ..errors import UncacheableValueError

# Live handles that cannot survive serialization
_RESOURCE_TYPES: tuple[type, ...] = (
    io.IOBase,
    socket.socket,
    mmap.mmap,
    selectors.BaseSelector,
    sqlite3.Connection,
    sqlite3.Cursor,
    threading.Thread,
    type(threading.Lock()),
    type(threading.RLock()),
)


class _Missing:
    """Sentinel type for a cache miss."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

# Expiry used when now + ttl is past the last representable instant
LATEST_EXPIRY = datetime.max.replace(tzinfo=UTC)


def is_resource(value: Any) -> bool:
    """Check whether a value is a live I/O handle or other unpicklable resource."""
    return isinstance(value, _RESOURCE_TYPES)


class Item:
    """
    Cached data plus its temporal validity.

    If an expiry is provided the data expires at that instant: reading it at
    exactly the expiry time already counts as expired.

    Items are immutable once constructed.
    """

    __slots__ = ("_data", "_expiry", "_ttl")

    def __init__(
        self,
        data: Any,
        expiry: datetime | None = None,
        original_ttl: int | None = None,
    ):
        if is_resource(data):
            raise UncacheableValueError(type(data).__name__)

        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_expiry", expiry)
        object.__setattr__(self, "_ttl", original_ttl)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getstate__(self) -> tuple[Any, datetime | None, int | None]:
        return (self._data, self._expiry, self._ttl)

    def __setstate__(self, state: tuple[Any, datetime | None, int | None]) -> None:
        data, expiry, ttl = state
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_expiry", expiry)
        object.__setattr__(self, "_ttl", ttl)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return (self._data, self._expiry, self._ttl) == (other._data, other._expiry, other._ttl)

    def __hash__(self) -> int:
        return hash((self._expiry, self._ttl))

    def __repr__(self) -> str:
        return f"Item(data={self._data!r}, expiry={self._expiry!r}, original_ttl={self._ttl!r})"

    @property
    def expiry(self) -> datetime | None:
        return self._expiry

    def data(self, now: datetime | None = None) -> Any:
        """
        Return the stored value, or MISSING if it has expired.

        Args:
            now: Time point to check expiry against. When omitted the value
                is returned unconditionally.

        Returns:
            The cached value, or MISSING
        """
        if now is not None and self.is_expired(now):
            return MISSING

        return self._data

    def ttl(self) -> int | None:
        """Return the TTL originally requested by the caller."""
        return self._ttl

    def is_expired(self, now: datetime) -> bool:
        if self._expiry is None:
            return False

        return now >= self._expiry

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for text serializers."""
        return {
            "data": self._data,
            "expiry": self._expiry.isoformat() if self._expiry is not None else None,
            "ttl": self._ttl,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Item:
        """Rebuild an Item from to_dict() output."""
        expiry = payload.get("expiry")
        return cls(
            payload["data"],
            datetime.fromisoformat(expiry) if expiry is not None else None,
            payload.get("ttl"),
        )
