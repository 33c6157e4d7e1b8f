# tests/test_drivers.py
from __future__ import annotations

import pytest

from biometric_api.adapters.driver.cidbio_driver import CIDBioDriver
from biometric_api.adapters.driver.factory import build_driver
from biometric_api.adapters.driver.mock_driver import ERROR_NOT_IDENTIFIED, MockDriver
from biometric_api.adapters.repositories.memory_template_store import MemoryTemplateStore
from biometric_api.adapters.system.container import build_service, build_store
from biometric_api.config import Settings
from biometric_api.domain.capture_protocol import CaptureProtocol
from biometric_api.domain.device_session import DeviceSession
from biometric_api.domain.errors import DeviceInitError
from biometric_api.domain.identify_protocol import IdentifyProtocol


def test_factory_selects_driver() -> None:
    assert isinstance(build_driver(Settings(DRIVER="mock")), MockDriver)
    assert isinstance(build_driver(Settings(DRIVER="cidbio")), CIDBioDriver)
    with pytest.raises(ValueError):
        build_driver(Settings(DRIVER="nope"))


def test_container_builds_memory_backed_service() -> None:
    cfg = Settings(DRIVER="mock", STORE_BACKEND="memory")
    assert isinstance(build_store(cfg), MemoryTemplateStore)
    svc = build_service(cfg)
    assert isinstance(svc.store, MemoryTemplateStore)


def test_missing_native_library_fails_initialization() -> None:
    session = DeviceSession(CIDBioDriver("/nonexistent/libcidbio.so"))
    with pytest.raises(DeviceInitError, match="could not load library"):
        session.initialize()
    assert not session.initialized


def test_cidbio_error_message_falls_back_to_known_codes() -> None:
    drv = CIDBioDriver("/nonexistent/libcidbio.so")
    assert drv.error_message(-2) == "no device found"
    assert "12345" in drv.error_message(-12345)


def test_mock_driver_end_to_end() -> None:
    drv = MockDriver(seed=1)
    with DeviceSession(drv) as session:
        assert session.status().connected
        assert CaptureProtocol(session).capture().success

        miss = IdentifyProtocol(session).identify()
        assert not miss.success and miss.quality is not None

        drv.save_template(3, "tpl")
        hit = IdentifyProtocol(session).identify()
        assert hit.success and hit.matched_id == 3


def test_mock_driver_can_fail_on_demand() -> None:
    drv = MockDriver(fail_rate=1.0)
    code, *_ = drv.capture_image()
    assert code < 0
    assert drv.capture_and_identify()[0] == ERROR_NOT_IDENTIFIED
