"""
polycache — TTL Policy

Clamps a caller-requested TTL against a configured maximum.
"""

from __future__ import annotations

import math
from datetime import timedelta

from ..errors import InvalidConfigurationError


def normalize_ttl(ttl: int | float | timedelta | None) -> int:
    """
    Convert a TTL given as seconds, timedelta or None into whole seconds (None -> 0).

    Fractions round away from zero: a positive sub-second TTL still expires
    after 1s instead of becoming 0 ("never expire").
    """
    if ttl is None:
        return 0
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
    if seconds > 0:
        return math.ceil(seconds)
    return math.floor(seconds)


class TTLPolicy:
    """
    Maximum-TTL policy for a cache instance.

    A maximum of 0 means unbounded. When a maximum is configured it also
    replaces a requested TTL of 0 ("never expire").
    """

    def __init__(self, maximum_ttl: int = 0):
        self.maximum_ttl = 0
        self.set_maximum_ttl(maximum_ttl)

    def set_maximum_ttl(self, seconds: int | timedelta) -> None:
        """Set the maximum TTL in seconds (0 disables the ceiling)."""
        if isinstance(seconds, timedelta):
            seconds = normalize_ttl(seconds)
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise InvalidConfigurationError("maximum TTL", seconds, "A non-negative integer")

        self.maximum_ttl = seconds

    def determine_ttl(self, requested: int | timedelta | None) -> int:
        """
        Resolve the TTL to use for a write.

        Args:
            requested: Requested TTL (seconds, timedelta, or None for no expiry)

        Returns:
            TTL in seconds after applying the maximum
        """
        ttl = normalize_ttl(requested)

        # no maximum, use what was asked for
        if not self.maximum_ttl:
            return ttl

        if ttl > self.maximum_ttl:
            return self.maximum_ttl

        # a ceiling always wins over "never expire"
        if ttl == 0:
            return self.maximum_ttl

        return ttl
