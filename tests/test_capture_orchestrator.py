# tests/test_capture_orchestrator.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from biometric_api.adapters.repositories.memory_template_store import MemoryTemplateStore
from biometric_api.domain.capture_orchestrator import CaptureOrchestrator
from biometric_api.domain.capture_protocol import CaptureProtocol
from biometric_api.domain.device_session import DeviceSession
from biometric_api.domain.errors import DeviceBusyError, StoreFailure
from tests.fakes import ERR_CAPTURE, FakeDriver

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _orchestrator(drv: FakeDriver, store: MemoryTemplateStore) -> CaptureOrchestrator:
    session = DeviceSession(drv)
    session.initialize()
    return CaptureOrchestrator(CaptureProtocol(session), store, clock=lambda: NOW)


def _seed(store: MemoryTemplateStore, n: int) -> None:
    for i in range(n):
        store.insert(f"old-{i}", NOW)


def test_success_on_empty_store_assigns_id_1() -> None:
    store = MemoryTemplateStore()
    res = _orchestrator(FakeDriver(), store).capture_and_save()
    assert res.success and res.biometric_id == 1 and res.template_data == "abc123"
    records = store.list_all()
    assert [(r.id, r.template_data, r.created_at) for r in records] == [(1, "abc123", NOW)]


def test_success_adds_one_and_keeps_existing() -> None:
    store = MemoryTemplateStore()
    _seed(store, 3)
    res = _orchestrator(FakeDriver(), store).capture_and_save()
    assert res.biometric_id == 4
    assert [r.id for r in store.list_all()] == [1, 2, 3, 4]
    assert store.get_by_id(4).template_data == "abc123"


@pytest.mark.parametrize("prior", [0, 1, 3, 25])
def test_image_failure_purges_store(prior: int) -> None:
    store = MemoryTemplateStore()
    _seed(store, prior)
    drv = FakeDriver()
    drv.capture_code = ERR_CAPTURE
    res = _orchestrator(drv, store).capture_and_save()
    assert res.success is False
    assert "capture error" in res.message
    assert res.biometric_id is None
    assert store.list_all() == []


def test_extract_failure_also_purges() -> None:
    store = MemoryTemplateStore()
    _seed(store, 2)
    drv = FakeDriver()
    drv.extract_code = ERR_CAPTURE
    assert _orchestrator(drv, store).capture_and_save().success is False
    assert store.list_all() == []


def test_ids_stay_monotonic_after_purge() -> None:
    store = MemoryTemplateStore()
    drv = FakeDriver()
    orch = _orchestrator(drv, store)
    assert orch.capture_and_save().biometric_id == 1
    drv.capture_code = ERR_CAPTURE
    orch.capture_and_save()
    drv.capture_code = 0
    assert orch.capture_and_save().biometric_id == 2


def test_lock_timeout_propagates_without_purge() -> None:
    class BusyCapture:
        def capture(self):
            raise DeviceBusyError(0.1)

    store = MemoryTemplateStore()
    _seed(store, 2)
    orch = CaptureOrchestrator(BusyCapture(), store)  # type: ignore[arg-type]
    with pytest.raises(DeviceBusyError):
        orch.capture_and_save()
    assert len(store.list_all()) == 2


def test_purge_runs_after_device_lock_is_released() -> None:
    drv = FakeDriver()
    drv.capture_code = ERR_CAPTURE
    session = DeviceSession(drv, lock_timeout=0.01)
    session.initialize()
    lock_free_during_purge: list[bool] = []

    class LockCheckingStore(MemoryTemplateStore):
        def delete_all(self) -> None:
            try:
                session.with_device(lambda h: None)
                lock_free_during_purge.append(True)
            except DeviceBusyError:
                lock_free_during_purge.append(False)
            super().delete_all()

    store = LockCheckingStore()
    _seed(store, 2)
    res = CaptureOrchestrator(CaptureProtocol(session), store).capture_and_save()

    assert res.success is False
    assert lock_free_during_purge == [True]
    assert store.list_all() == []


def test_insert_failure_after_capture_propagates_without_purge() -> None:
    class FailingInsertStore(MemoryTemplateStore):
        def insert(self, template_data, created_at):
            raise StoreFailure("write refused")

    store = FailingInsertStore()
    MemoryTemplateStore.insert(store, "kept", NOW)
    with pytest.raises(StoreFailure, match="write refused"):
        _orchestrator(FakeDriver(), store).capture_and_save()
    assert [r.template_data for r in store.list_all()] == ["kept"]
