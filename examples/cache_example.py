"""
Cache Usage Example

Demonstrates how to use polycache.

This example shows:
- Creating a cache over memory storage
- TTL ceilings and timedelta TTLs
- Stampede protection
- Generation-based clearing
- Building caches from environment configuration
"""

import logging
from datetime import timedelta

from polycache.cache import Cache, CachingHelper, MemoryStorage, create_cache
from polycache.clock import FrozenClock
from polycache.errors import InvalidKeyError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def example_basic_usage():
    """Example: get/set/delete over memory storage."""
    logger.info("=" * 60)
    logger.info("Example 1: Basic Usage")
    logger.info("=" * 60)

    with Cache(MemoryStorage(max_size=100), suffix="example") as cache:
        cache.set("user.123", {"name": "Alice"}, ttl=300)
        logger.info(f"user.123 -> {cache.get('user.123')}")

        # Storing None deletes the key
        cache.set("user.123", None)
        logger.info(f"after delete -> {cache.get('user.123', 'missing')}")

        try:
            cache.set("user:123", "value")
        except InvalidKeyError as e:
            logger.info(f"Rejected key: {e.message}")

        logger.info(f"Stats: {cache.get_stats()}")


def example_ttl_ceiling():
    """Example: a maximum TTL caps every write."""
    logger.info("\n" + "=" * 60)
    logger.info("Example 2: TTL Ceiling")
    logger.info("=" * 60)

    clock = FrozenClock()
    cache = Cache(MemoryStorage(), clock=clock, maximum_ttl=60)

    cache.set("report", "expensive result", ttl=timedelta(hours=1))
    cache.set("forever", "also capped", ttl=0)

    clock.advance(60)
    logger.info(f"After 60s: report={cache.get('report')}, forever={cache.get('forever')}")


def example_stampede_protection():
    """Example: some readers recompute shortly before expiry."""
    logger.info("\n" + "=" * 60)
    logger.info("Example 3: Stampede Protection")
    logger.info("=" * 60)

    clock = FrozenClock()
    cache = Cache(MemoryStorage(), clock=clock)
    cache.enable_stampede_protection()
    cache.set_stampede_beta(5)

    cache.set("homepage", "<html>...</html>", ttl=60)
    clock.advance(57)

    misses = sum(1 for _ in range(1000) if cache.get("homepage") is None)
    logger.info(f"Early expirations out of 1000 reads at 57s: {misses}")


def example_generation_clear():
    """Example: clear() without deleting anything."""
    logger.info("\n" + "=" * 60)
    logger.info("Example 4: Generation Clear")
    logger.info("=" * 60)

    storage = MemoryStorage()
    cache = Cache(storage, suffix="app", clear_strategy="generation")

    cache.set("config", {"feature": True})
    cache.clear()

    logger.info(f"Generation: {cache.generation}, config={cache.get('config')}")
    logger.info(f"Physical entries still stored: {len(storage)}")


def example_from_environment():
    """Example: build a cache from CACHE_* environment variables."""
    logger.info("\n" + "=" * 60)
    logger.info("Example 5: Factory")
    logger.info("=" * 60)

    cache = create_cache(name="example")
    helper = CachingHelper(cache, default_ttl=30)

    helper.set_to_cache("greeting", "hello")
    logger.info(f"greeting -> {helper.get_from_cache('greeting')}")


def main():
    """Run all examples."""
    example_basic_usage()
    example_ttl_ceiling()
    example_stampede_protection()
    example_generation_clear()
    example_from_environment()


if __name__ == "__main__":
    main()
