"""
polycache — Item Serialization

Turns Items into the bytes a storage keeps, and back.

- PickleSerializer: language-native, accepts any picklable value (default)
- JsonSerializer: UTF-8 JSON, interoperable with non-Python readers
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any

from ..errors import CacheDecodeError, ConfigurationError, UncacheableValueError
from .item import Item

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Encodes Items for storage."""

    name: str = "abstract"

    @abstractmethod
    def dumps(self, item: Item) -> bytes:
        """
        Encode an Item.

        Raises:
            UncacheableValueError: If the item's data cannot be encoded
        """

    @abstractmethod
    def loads(self, payload: bytes | str) -> Item:
        """
        Decode a stored payload.

        Raises:
            CacheDecodeError: If the payload is not a valid encoded Item
        """


class PickleSerializer(Serializer):
    """Pickle-based serializer."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dumps(self, item: Item) -> bytes:
        try:
            return pickle.dumps(item, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise UncacheableValueError(type(item.data()).__name__, str(e)) from e

    def loads(self, payload: bytes | str) -> Item:
        if isinstance(payload, str):
            payload = payload.encode("latin-1")
        try:
            item = pickle.loads(payload)
        except Exception as e:
            raise CacheDecodeError(
                f"Failed to unpickle cached payload: {e}",
                details={"serializer": self.name, "error": str(e)},
            ) from e

        if not isinstance(item, Item):
            raise CacheDecodeError(
                "Cached payload is not an Item",
                details={"serializer": self.name, "payload_type": type(item).__name__},
            )
        return item


class JsonSerializer(Serializer):
    """JSON serializer; values must be JSON-serializable."""

    name = "json"

    @staticmethod
    def _to_json(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    def dumps(self, item: Item) -> bytes:
        try:
            return self._to_json(item.to_dict()).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise UncacheableValueError(type(item.data()).__name__, str(e)) from e

    def loads(self, payload: bytes | str) -> Item:
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CacheDecodeError(
                    f"Cached payload is not UTF-8: {e}",
                    details={"serializer": self.name, "error": str(e)},
                ) from e
        try:
            decoded = json.loads(payload)
            return Item.from_dict(decoded)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CacheDecodeError(
                f"Failed to decode JSON from cache: {e}",
                details={"serializer": self.name, "data_preview": payload[:100], "error": str(e)},
            ) from e


_SERIALIZERS: dict[str, type[Serializer]] = {
    PickleSerializer.name: PickleSerializer,
    JsonSerializer.name: JsonSerializer,
}


def get_serializer(name: str) -> Serializer:
    """Look up a serializer by name ("pickle" or "json")."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown serializer: {name}",
            details={"serializer": name, "supported": sorted(_SERIALIZERS)},
        ) from None
