# /biometric_api/adapters/repositories/redis_template_store.py
from __future__ import annotations

import logging
from datetime import datetime

import redis

from biometric_api.domain.errors import StoreFailure
from biometric_api.domain.models import BiometricRecord

LOG = logging.getLogger("adapter.store.redis")


class RedisTemplateStore:
    """
    Templates as Redis hashes.

    <prefix>:record:<id>  hash {template, created_at}
    <prefix>:records      sorted set of ids (score = id)
    <prefix>:next_id      INCR counter; never reset, so ids stay monotonic
    Writes go through MULTI/EXEC so a record is visible only once fully stored.
    """

    def __init__(self, redis_url: str, prefix: str = "biometric") -> None:
        self._r = redis.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = prefix

    def _key(self, record_id: int) -> str:
        return f"{self._prefix}:record:{record_id}"

    @property
    def _index(self) -> str:
        return f"{self._prefix}:records"

    @property
    def _counter(self) -> str:
        return f"{self._prefix}:next_id"

    @staticmethod
    def _to_record(record_id: int, data: dict) -> BiometricRecord:
        return BiometricRecord(
            id=record_id,
            template_data=data["template"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )

    def insert(self, template_data: str, created_at: datetime) -> int:
        try:
            record_id = int(self._r.incr(self._counter))
            pipe = self._r.pipeline(transaction=True)
            pipe.hset(
                self._key(record_id),
                mapping={"template": template_data, "created_at": created_at.isoformat()},
            )
            pipe.zadd(self._index, {str(record_id): record_id})
            pipe.execute()
        except redis.RedisError as e:
            raise StoreFailure(str(e)) from e
        LOG.info("store.insert", extra={"extra": {"biometric_id": record_id}})
        return record_id

    def list_all(self) -> list[BiometricRecord]:
        try:
            ids = [int(i) for i in self._r.zrange(self._index, 0, -1)]
            if not ids:
                return []
            pipe = self._r.pipeline(transaction=False)
            for record_id in ids:
                pipe.hgetall(self._key(record_id))
            rows = pipe.execute()
        except redis.RedisError as e:
            raise StoreFailure(str(e)) from e
        # a concurrent delete can leave an id whose hash is already gone
        return [self._to_record(i, row) for i, row in zip(ids, rows) if row]

    def get_by_id(self, record_id: int) -> BiometricRecord | None:
        try:
            data = self._r.hgetall(self._key(record_id))
        except redis.RedisError as e:
            raise StoreFailure(str(e)) from e
        if not data:
            return None
        return self._to_record(record_id, data)

    def delete_all(self) -> None:
        # WATCH the index: an insert committed between the read and EXEC
        # aborts the transaction and transaction() retries with fresh ids.
        def _purge(pipe: redis.client.Pipeline) -> int:
            ids = pipe.zrange(self._index, 0, -1)
            pipe.multi()
            for record_id in ids:
                pipe.delete(self._key(int(record_id)))
            pipe.delete(self._index)
            return len(ids)

        try:
            deleted = self._r.transaction(_purge, self._index, value_from_callable=True)
        except redis.RedisError as e:
            raise StoreFailure(str(e)) from e
        LOG.warning("store.delete_all", extra={"extra": {"deleted": deleted}})

    def delete_by_id(self, record_id: int) -> bool:
        try:
            pipe = self._r.pipeline(transaction=True)
            pipe.delete(self._key(record_id))
            pipe.zrem(self._index, str(record_id))
            removed, _ = pipe.execute()
        except redis.RedisError as e:
            raise StoreFailure(str(e)) from e
        if not removed:
            return False
        LOG.info("store.delete", extra={"extra": {"biometric_id": record_id}})
        return True
