"""
polycache — Generation Counter

A logical epoch stored next to the data it invalidates. Every physical
key carries the current generation; bumping it makes all previously
written keys unreachable without deleting anything. Abandoned entries
expire on their own or are evicted by the store.
"""

from __future__ import annotations

import logging

from .storage import StorageBackend, parse_counter

logger = logging.getLogger(__name__)

INITIAL_GENERATION = 1


class GenerationCounter:
    """Generation state for one cache instance, persisted in its storage."""

    def __init__(self, storage: StorageBackend, key: str):
        self._storage = storage
        self.key = key
        self._current = INITIAL_GENERATION

    @property
    def current(self) -> int:
        return self._current

    def load(self) -> int:
        """
        Read the generation from the store.

        An absent counter is the bootstrap case and reads as 1; it is not
        written until the first bump.
        """
        raw = self._storage.raw_get(self.key)
        value = parse_counter(raw)

        if value is None:
            if raw is not None:
                logger.warning(
                    "Ignoring unparsable cache generation counter",
                    extra={"generation_key": self.key},
                )
            value = INITIAL_GENERATION

        self._current = value
        return value

    def bump(self) -> int:
        """Advance to the next generation and persist it."""
        previous = self._current
        self._current = self._storage.increment(self.key)

        logger.info(
            "Advanced cache generation from %d to %d",
            previous,
            self._current,
            extra={"generation_key": self.key, "generation": self._current},
        )
        return self._current
