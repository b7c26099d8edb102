"""
polycache — Redis Storage Tests

Runs against a mocked redis-py client; the live-server suite lives in
tests/integration/test_redis_storage.py.
"""

from unittest.mock import MagicMock, call, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from polycache.cache.backends.redis import BATCH_SIZE, RedisStorage
from polycache.errors import BackendUnavailableError, ErrorCode


class TestRedisStorage:
    """Test suite for RedisStorage."""

    @pytest.fixture
    def client(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def storage(self, client: MagicMock) -> RedisStorage:
        return RedisStorage(client=client)

    def test_requires_url_or_client(self) -> None:
        with pytest.raises(ValueError):
            RedisStorage()

    def test_builds_client_from_url(self) -> None:
        with patch("polycache.cache.backends.redis.Redis.from_url") as from_url:
            RedisStorage("redis://localhost:6379/3", max_connections=4, socket_timeout=2)

        from_url.assert_called_once_with(
            url="redis://localhost:6379/3",
            decode_responses=False,
            max_connections=4,
            socket_timeout=2,
        )

    def test_get(self, storage: RedisStorage, client: MagicMock) -> None:
        client.get.return_value = b"payload"

        assert storage.raw_get("key1") == b"payload"
        client.get.assert_called_once_with("key1")

    def test_set_with_ttl(self, storage: RedisStorage, client: MagicMock) -> None:
        client.set.return_value = True

        assert storage.raw_set("key1", b"payload", ttl=30) is True
        client.set.assert_called_once_with(name="key1", value=b"payload", ex=30)

    def test_set_without_ttl(self, storage: RedisStorage, client: MagicMock) -> None:
        client.set.return_value = True

        storage.raw_set("key1", b"payload", ttl=0)

        client.set.assert_called_once_with(name="key1", value=b"payload", ex=None)

    def test_delete_and_clear(self, storage: RedisStorage, client: MagicMock) -> None:
        client.delete.return_value = 0

        assert storage.raw_delete("missing") is True
        assert storage.raw_clear() is True
        client.flushdb.assert_called_once_with()

    def test_get_many_uses_mget(self, storage: RedisStorage, client: MagicMock) -> None:
        client.mget.return_value = [b"1", None]

        assert storage.raw_get_many(["a", "b"]) == [b"1", None]
        client.mget.assert_called_once_with(["a", "b"])
        assert storage.raw_get_many([]) == []

    def test_set_many_uses_pipeline(self, storage: RedisStorage, client: MagicMock) -> None:
        pipe = client.pipeline.return_value
        pipe.execute.return_value = [True, True]

        assert storage.raw_set_many([("a", b"1"), ("b", b"2")], ttl=10) is True

        client.pipeline.assert_called_once_with(transaction=False)
        pipe.set.assert_has_calls([call("a", b"1", ex=10), call("b", b"2", ex=10)])

    def test_set_many_partial_failure(self, storage: RedisStorage, client: MagicMock) -> None:
        client.pipeline.return_value.execute.return_value = [True, None]

        assert storage.raw_set_many([("a", b"1"), ("b", b"2")]) is False

    def test_delete_many_chunks(self, storage: RedisStorage, client: MagicMock) -> None:
        keys = [f"k{i}" for i in range(BATCH_SIZE + 5)]

        assert storage.raw_delete_many(keys) is True

        assert client.delete.call_count == 2
        assert len(client.delete.call_args_list[0].args) == BATCH_SIZE
        assert len(client.delete.call_args_list[1].args) == 5

    def test_increment_seeds_and_incrs(self, storage: RedisStorage, client: MagicMock) -> None:
        pipe = client.pipeline.return_value
        pipe.execute.return_value = [True, 2]

        assert storage.increment("gen") == 2

        client.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_called_once_with("gen", 1, nx=True)
        pipe.incr.assert_called_once_with("gen")

    @pytest.mark.parametrize(
        ("exc", "transient"),
        [
            (RedisTimeoutError("timed out"), True),
            (RedisConnectionError("refused"), False),
            (ResponseError("WRONGTYPE"), True),
        ],
    )
    def test_error_translation(
        self, storage: RedisStorage, client: MagicMock, exc: Exception, transient: bool
    ) -> None:
        client.get.side_effect = exc

        with pytest.raises(BackendUnavailableError) as exc_info:
            storage.raw_get("key1")

        error = exc_info.value
        assert error.transient is transient
        assert error.backend == "redis"
        assert error.operation == "get"
        assert error.code == ErrorCode.BACKEND_UNAVAILABLE
        assert error.__cause__ is exc

    def test_stats(self, storage: RedisStorage, client: MagicMock) -> None:
        client.ping.return_value = True
        client.info.return_value = {"redis_version": "7.2.4", "redis_mode": "standalone"}

        stats = storage.get_stats()

        assert stats["backend"] == "redis"
        assert stats["connected"] is True
        assert stats["redis_version"] == "7.2.4"

    def test_stats_when_unreachable(self, storage: RedisStorage, client: MagicMock) -> None:
        client.ping.side_effect = RedisConnectionError("refused")

        stats = storage.get_stats()

        assert stats["connected"] is False

    def test_close(self, storage: RedisStorage, client: MagicMock) -> None:
        storage.close()

        client.close.assert_called_once_with()
