"""
polycache — Memory Storage Tests

Test suite for the in-memory storage backend.
Tests LRU eviction, native TTL, counters and batch methods.
"""

import threading
import time
from unittest.mock import patch

import pytest

from polycache.cache.backends.memory import MemoryStorage


class TestMemoryStorage:
    """Test suite for MemoryStorage."""

    @pytest.fixture
    def storage(self) -> MemoryStorage:
        """Create fresh memory storage for each test."""
        return MemoryStorage(max_size=10)

    def test_initialization(self) -> None:
        storage = MemoryStorage(max_size=100)

        assert storage.max_size == 100
        assert storage.key_delimiter == ":"

        stats = storage.get_stats()
        assert stats["backend"] == "memory"
        assert stats["size"] == 0
        assert stats["evictions"] == 0

    def test_invalid_max_size(self) -> None:
        with pytest.raises(ValueError):
            MemoryStorage(max_size=0)

    def test_set_and_get(self, storage: MemoryStorage) -> None:
        assert storage.raw_set("key1", b"value1") is True
        assert storage.raw_get("key1") == b"value1"
        assert storage.raw_get("missing") is None

    def test_delete(self, storage: MemoryStorage) -> None:
        storage.raw_set("key1", b"value1")

        assert storage.raw_delete("key1") is True
        assert storage.raw_get("key1") is None

        # Deleting a missing key still reports success
        assert storage.raw_delete("key1") is True

    def test_clear(self, storage: MemoryStorage) -> None:
        for i in range(5):
            storage.raw_set(f"key{i}", b"v")

        assert len(storage) == 5
        assert storage.raw_clear() is True
        assert len(storage) == 0

    def test_native_ttl(self, storage: MemoryStorage) -> None:
        """Entries are dropped once their TTL elapses."""
        now = time.time()
        with patch("polycache.cache.backends.memory.time.time", return_value=now):
            storage.raw_set("key1", b"value1", ttl=10)
            storage.raw_set("forever", b"value2", ttl=0)

        with patch("polycache.cache.backends.memory.time.time", return_value=now + 9):
            assert storage.raw_get("key1") == b"value1"

        with patch("polycache.cache.backends.memory.time.time", return_value=now + 10):
            assert storage.raw_get("key1") is None
            assert storage.raw_get("forever") == b"value2"

        assert storage.get_stats()["expirations"] == 1

    def test_lru_eviction(self, storage: MemoryStorage) -> None:
        """The least recently used key is evicted at capacity."""
        for i in range(10):
            storage.raw_set(f"key{i}", b"v")

        # Access key0 to make it recently used
        storage.raw_get("key0")

        storage.raw_set("key10", b"v")

        stats = storage.get_stats()
        assert stats["size"] == 10
        assert stats["evictions"] == 1

        assert storage.raw_get("key1") is None
        assert storage.raw_get("key0") == b"v"
        assert storage.raw_get("key10") == b"v"

    def test_overwrite_does_not_evict(self, storage: MemoryStorage) -> None:
        for i in range(10):
            storage.raw_set(f"key{i}", b"v")

        storage.raw_set("key5", b"new")

        assert storage.get_stats()["evictions"] == 0
        assert storage.raw_get("key5") == b"new"

    def test_batch_operations(self, storage: MemoryStorage) -> None:
        assert storage.raw_set_many([("a", b"1"), ("b", b"2")], ttl=0) is True
        assert storage.raw_get_many(["a", "missing", "b"]) == [b"1", None, b"2"]

        assert storage.raw_delete_many(["a", "b", "missing"]) is True
        assert storage.raw_get_many(["a", "b"]) == [None, None]

    def test_increment(self, storage: MemoryStorage) -> None:
        """An absent counter starts at 1, so the first increment returns 2."""
        assert storage.increment("counter") == 2
        assert storage.increment("counter") == 3
        assert storage.raw_get("counter") == b"3"

    def test_increment_garbage_counter(self, storage: MemoryStorage) -> None:
        storage.raw_set("counter", b"garbage")

        assert storage.increment("counter") == 2

    def test_concurrent_increments(self) -> None:
        storage = MemoryStorage()

        def worker() -> None:
            for _ in range(100):
                storage.increment("counter")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert storage.raw_get("counter") == b"801"
