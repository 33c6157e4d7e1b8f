# /biometric_api/adapters/repositories/memory_template_store.py
from __future__ import annotations

import logging
import threading
from datetime import datetime

from biometric_api.domain.models import BiometricRecord

LOG = logging.getLogger("adapter.store.memory")


class MemoryTemplateStore:
    """Process-local store; same contract and id policy as the Redis store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, BiometricRecord] = {}
        self._last_id = 0

    def insert(self, template_data: str, created_at: datetime) -> int:
        with self._lock:
            self._last_id += 1
            record = BiometricRecord(self._last_id, template_data, created_at)
            self._records[record.id] = record
        LOG.info("store.insert", extra={"extra": {"biometric_id": record.id}})
        return record.id

    def list_all(self) -> list[BiometricRecord]:
        with self._lock:
            return [self._records[k] for k in sorted(self._records)]

    def get_by_id(self, record_id: int) -> BiometricRecord | None:
        with self._lock:
            return self._records.get(record_id)

    def delete_all(self) -> None:
        with self._lock:
            count = len(self._records)
            self._records.clear()
        LOG.warning("store.delete_all", extra={"extra": {"deleted": count}})

    def delete_by_id(self, record_id: int) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None
