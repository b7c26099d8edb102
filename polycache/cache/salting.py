"""
polycache — Key Salting

Builds the physical storage key from a logical key:

    prefix DELIMITER key [DELIMITER generation] [DELIMITER suffix]

The prefix carries the cache format version, so entries written by an
older envelope format are never read back by a newer one.
"""

from __future__ import annotations

# Bump when the stored envelope format changes
CACHE_FORMAT_VERSION = "1.0.0"

DEFAULT_PREFIX = f"polycache-{CACHE_FORMAT_VERSION}"
DEFAULT_DELIMITER = ":"


class KeySalter:
    """Deterministic logical-to-physical key mapping."""

    def __init__(self, prefix: str | None = DEFAULT_PREFIX, delimiter: str = DEFAULT_DELIMITER):
        self.prefix = prefix
        self.delimiter = delimiter

    def salt(
        self,
        key: str,
        suffix: str | None = None,
        generation: int | None = None,
    ) -> str:
        """
        Salt a cache key.

        Args:
            key: Logical (already validated) cache key
            suffix: Optional per-deployment namespace appended last
            generation: Optional generation counter appended after the key

        Returns:
            Physical storage key
        """
        if self.prefix:
            key = f"{self.prefix}{self.delimiter}{key}"

        if generation is not None:
            key = f"{key}{self.delimiter}{generation}"

        if suffix:
            key = f"{key}{self.delimiter}{suffix}"

        return key

    def __repr__(self) -> str:
        return f"KeySalter(prefix={self.prefix!r}, delimiter={self.delimiter!r})"
