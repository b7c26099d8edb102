"""
polycache — Generation Counter Tests
"""

import logging

import pytest

from polycache.cache.backends.memory import MemoryStorage
from polycache.cache.generation import INITIAL_GENERATION, GenerationCounter
from polycache.cache.storage import parse_counter


class TestGenerationCounter:
    """Test suite for GenerationCounter."""

    @pytest.fixture
    def counter(self, storage: MemoryStorage) -> GenerationCounter:
        return GenerationCounter(storage, "polycache-1.0.0-generation")

    def test_absent_counter_reads_as_initial(self, counter: GenerationCounter, storage: MemoryStorage) -> None:
        assert counter.load() == INITIAL_GENERATION
        assert counter.current == 1

        # Bootstrap does not write anything
        assert storage.raw_get(counter.key) is None

    def test_bump(self, counter: GenerationCounter, storage: MemoryStorage) -> None:
        counter.load()

        assert counter.bump() == 2
        assert counter.bump() == 3
        assert storage.raw_get(counter.key) == b"3"

    def test_load_picks_up_other_instances(self, storage: MemoryStorage) -> None:
        first = GenerationCounter(storage, "gen")
        second = GenerationCounter(storage, "gen")

        first.bump()

        assert second.load() == 2

    def test_unparsable_counter(
        self, counter: GenerationCounter, storage: MemoryStorage, caplog: pytest.LogCaptureFixture
    ) -> None:
        storage.raw_set(counter.key, b"not-a-number")

        with caplog.at_level(logging.WARNING, logger="polycache"):
            assert counter.load() == INITIAL_GENERATION

        assert "unparsable" in caplog.text


class TestParseCounter:
    """Test suite for parse_counter."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(None, None), (b"7", 7), ("12", 12), (3, 3), (b"garbage", None), ("", None)],
    )
    def test_parse(self, raw: object, expected: int | None) -> None:
        assert parse_counter(raw) == expected  # type: ignore[arg-type]
