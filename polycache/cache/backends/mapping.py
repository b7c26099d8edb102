"""
polycache — Mapping Storage

Stores payloads in any caller-supplied MutableMapping, typically a
web framework's per-user session. The mapping has no notion of expiry;
entries are only expired logically by their Item envelope.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from ..storage import StorageBackend

logger = logging.getLogger(__name__)


class MappingStorage(StorageBackend):
    """
    Storage over an external mapping.

    Only keys carrying this storage's key prefix are touched by raw_clear(),
    so a session shared with other data keeps its other entries.
    """

    name = "mapping"
    key_delimiter = ":"

    def __init__(self, mapping: MutableMapping[str, Any] | None = None, key_prefix: str = ""):
        """
        Args:
            mapping: Backing mapping (a new dict when omitted)
            key_prefix: Physical key prefix owned by polycache; raw_clear()
                removes only keys starting with it
        """
        self._mapping: MutableMapping[str, Any] = mapping if mapping is not None else {}
        self.key_prefix = key_prefix

    def raw_get(self, key: str) -> bytes | None:
        value = self._mapping.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            # Some session stores hand bytes back as text
            return value.encode("latin-1")
        return value

    def raw_set(self, key: str, value: bytes, ttl: int = 0) -> bool:
        # ttl is ignored; the Item envelope carries the expiry
        self._mapping[key] = value
        return True

    def raw_delete(self, key: str) -> bool:
        self._mapping.pop(key, None)
        return True

    def raw_clear(self) -> bool:
        owned = [key for key in list(self._mapping) if key.startswith(self.key_prefix)]
        for key in owned:
            del self._mapping[key]
        logger.info("Cleared %d entries from mapping storage", len(owned))
        return True

    def get_stats(self) -> dict[str, Any]:
        return {"backend": self.name, "size": len(self._mapping)}
