"""
polycache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
import random
import socket
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from polycache.cache import Cache, MemoryStorage, StampedeProtection
from polycache.clock import FrozenClock

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


# Redis availability checker
def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except OSError:
        return False


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation); skips when no server is reachable."""
    if not is_redis_available():
        pytest.skip("Redis server not available")
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def clock() -> FrozenClock:
    """A clock frozen at a fixed instant."""
    return FrozenClock(EPOCH)


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory storage."""
    return MemoryStorage(max_size=100)


@pytest.fixture
def cache(storage: MemoryStorage, clock: FrozenClock) -> Cache:
    """Cache over memory storage with a frozen clock and seeded randomness."""
    return Cache(
        storage,
        clock=clock,
        stampede=StampedeProtection(random_source=random.Random(1234)),
    )


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for memory cache backend."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_MAX_SIZE", "100")
    monkeypatch.setenv("CACHE_DEFAULT_TTL", "0")
    monkeypatch.setenv("CACHE_SUFFIX", "test")


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "falsy_zero": 0,
        "falsy_empty": "",
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_registries() -> Generator[None, None, None]:
    """Reset cache factory and loaded config after each test to prevent state leakage."""
    yield
    from polycache.cache.factory import reset_cache_factory
    from polycache.config import reset_config

    reset_cache_factory()
    reset_config()
