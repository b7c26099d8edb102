"""
polycache — Input Validation

Keys must not contain characters reserved for key salting and for the
wire protocols of the backing stores: {}()/\\@:
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..errors import InvalidIterableError, InvalidKeyError

RESERVED_CHARACTERS = "{}()/\\@:"

_INVALID_KEY_RE = re.compile(r"[{}()/\\@:]")


def validate_key(key: Any) -> str:
    """
    Ensure a logical cache key is legal.

    Raises:
        InvalidKeyError: If the key is not a non-empty string or contains reserved characters
    """
    if not isinstance(key, str):
        raise InvalidKeyError(key, f"keys must be strings, got {type(key).__name__}")

    if not key:
        raise InvalidKeyError(key, "keys must not be empty")

    if _INVALID_KEY_RE.search(key):
        raise InvalidKeyError(
            key,
            f"keys MUST NOT contain any of the following characters: `{RESERVED_CHARACTERS}`",
        )

    return key


def validate_keys(keys: Any) -> list[str]:
    """
    Materialize and validate an iterable of keys.

    Every key is checked before the caller issues any storage call.

    Raises:
        InvalidIterableError: If `keys` is not an iterable (strings and bytes are rejected)
        InvalidKeyError: If any key is illegal
    """
    if isinstance(keys, str | bytes | bytearray) or not isinstance(keys, Iterable):
        raise InvalidIterableError(keys)

    return [validate_key(key) for key in keys]


def validate_pairs(values: Any) -> list[tuple[str, Any]]:
    """
    Materialize and validate key/value pairs for a batch write.

    Accepts a mapping or an iterable of (key, value) pairs.

    Raises:
        InvalidIterableError: If `values` is neither
        InvalidKeyError: If any key is illegal
    """
    if isinstance(values, Mapping):
        pairs = list(values.items())
    elif isinstance(values, str | bytes | bytearray) or not isinstance(values, Iterable):
        raise InvalidIterableError(values)
    else:
        pairs = []
        for pair in values:
            if not isinstance(pair, tuple | list) or len(pair) != 2:
                raise InvalidIterableError(values)
            pairs.append((pair[0], pair[1]))

    return [(validate_key(key), value) for key, value in pairs]
