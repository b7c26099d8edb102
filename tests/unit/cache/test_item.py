"""
polycache — Item Envelope Tests
"""

import io
import pickle
import socket
import threading
from datetime import UTC, datetime, timedelta

import pytest

from polycache.cache.item import MISSING, Item, is_resource
from polycache.errors import UncacheableValueError

T = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class TestItem:
    """Test suite for Item."""

    def test_data_without_time_point_ignores_expiry(self) -> None:
        """Without a time point the value is returned even long after expiry."""
        item = Item("value", T, 60)

        assert item.data() == "value"

    def test_no_expiry_never_expires(self) -> None:
        item = Item("value")

        assert item.data(T + timedelta(days=3650)) == "value"
        assert item.is_expired(T) is False

    def test_expiry_boundary_is_inclusive(self) -> None:
        """Reading at the exact expiry instant is already a miss."""
        item = Item("value", T, 60)

        assert item.data(T) is MISSING
        assert item.data(T - timedelta(seconds=1)) == "value"
        assert item.data(T + timedelta(seconds=1)) is MISSING

    def test_ttl_returns_original_ttl(self) -> None:
        assert Item("value", T, 60).ttl() == 60
        assert Item("value").ttl() is None

    def test_falsy_values_are_not_misses(self) -> None:
        for value in (0, "", [], False):
            assert Item(value, T, 60).data(T - timedelta(seconds=1)) == value

    def test_resources_are_rejected(self) -> None:
        """Live handles cannot be wrapped."""
        with pytest.raises(UncacheableValueError):
            Item(io.StringIO("data"))

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            with pytest.raises(UncacheableValueError):
                Item(sock)
        finally:
            sock.close()

        with pytest.raises(UncacheableValueError):
            Item(threading.Lock())

    def test_is_resource(self, tmp_path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("content")

        with open(path) as handle:
            assert is_resource(handle) is True

        assert is_resource({"plain": "dict"}) is False
        assert is_resource(b"bytes") is False

    def test_items_are_immutable(self) -> None:
        item = Item("value", T, 60)

        with pytest.raises(AttributeError):
            item._data = "other"  # type: ignore[misc]

        with pytest.raises(AttributeError):
            del item._ttl

    def test_pickle_round_trip(self) -> None:
        item = Item({"nested": [1, 2, 3]}, T, 60)

        restored = pickle.loads(pickle.dumps(item))

        assert restored == item
        assert restored.expiry == T
        assert restored.ttl() == 60

    def test_dict_round_trip(self) -> None:
        item = Item({"a": 1}, T, 30)

        payload = item.to_dict()
        assert payload == {"data": {"a": 1}, "expiry": T.isoformat(), "ttl": 30}
        assert Item.from_dict(payload) == item

        assert Item.from_dict(Item("x").to_dict()) == Item("x")

    def test_missing_sentinel(self) -> None:
        """MISSING is falsy, a singleton and survives pickling."""
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert pickle.loads(pickle.dumps(MISSING)) is MISSING
