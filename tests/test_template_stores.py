# tests/test_template_stores.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest
import redis

from biometric_api.adapters.repositories.memory_template_store import MemoryTemplateStore
from biometric_api.adapters.repositories.redis_template_store import RedisTemplateStore
from biometric_api.domain.errors import StoreFailure
from tests.fakes import FakeRedis

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _redis_store() -> RedisTemplateStore:
    s = RedisTemplateStore.__new__(RedisTemplateStore)
    s._r = FakeRedis()
    s._prefix = "test"
    return s


@pytest.fixture(params=["memory", "redis"])
def store(request):
    return MemoryTemplateStore() if request.param == "memory" else _redis_store()


def test_insert_and_read_back(store) -> None:
    a = store.insert("t-a", NOW)
    b = store.insert("t-b", NOW)
    assert (a, b) == (1, 2)
    rec = store.get_by_id(b)
    assert rec.template_data == "t-b" and rec.created_at == NOW
    assert [r.id for r in store.list_all()] == [1, 2]


def test_get_missing_returns_none(store) -> None:
    assert store.get_by_id(99) is None


def test_delete_by_id(store) -> None:
    store.insert("x", NOW)
    store.insert("y", NOW)
    assert store.delete_by_id(1) is True
    assert [r.id for r in store.list_all()] == [2]


def test_delete_missing_leaves_store_unchanged(store) -> None:
    store.insert("x", NOW)
    assert store.delete_by_id(42) is False
    assert [r.template_data for r in store.list_all()] == ["x"]


def test_delete_all_keeps_ids_monotonic(store) -> None:
    store.insert("x", NOW)
    store.insert("y", NOW)
    store.delete_all()
    assert store.list_all() == []
    assert store.insert("z", NOW) == 3


def test_redis_layout() -> None:
    s = _redis_store()
    s.insert("abc", NOW)
    r = s._r
    assert r.hgetall("test:record:1") == {"template": "abc", "created_at": NOW.isoformat()}
    assert r.zrange("test:records", 0, -1) == ["1"]


def test_redis_errors_surface_as_store_failure() -> None:
    class DownRedis(FakeRedis):
        def zrange(self, key, start, end):
            raise redis.ConnectionError("connection refused")

    s = _redis_store()
    s._r = DownRedis()
    with pytest.raises(StoreFailure, match="connection refused"):
        s.list_all()


def test_redis_purge_leaves_nothing_when_insert_lands_mid_purge() -> None:
    s = _redis_store()

    class RacingRedis(FakeRedis):
        raced = False

        def zrange(self, key, start, end):
            ids = super().zrange(key, start, end)
            if not self.raced:
                # another request commits between the purge's read and EXEC
                self.raced = True
                s.insert("late", NOW)
            return ids

    s._r = RacingRedis()
    s.insert("early", NOW)
    s.delete_all()

    assert s.list_all() == []
    assert s.get_by_id(1) is None
    assert s.get_by_id(2) is None
    assert s._r.hashes == {}
