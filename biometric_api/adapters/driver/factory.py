# /biometric_api/adapters/driver/factory.py
from __future__ import annotations

from biometric_api.adapters.driver.cidbio_driver import CIDBioDriver
from biometric_api.adapters.driver.mock_driver import MockDriver
from biometric_api.config import Settings
from biometric_api.ports.device_driver import DeviceDriverPort


def build_driver(cfg: Settings) -> DeviceDriverPort:
    if cfg.DRIVER == "mock":
        return MockDriver(fail_rate=cfg.MOCK_FAIL_RATE)
    if cfg.DRIVER == "cidbio":
        return CIDBioDriver(cfg.CIDBIO_LIBRARY_PATH)
    raise ValueError(f"unknown DRIVER: {cfg.DRIVER!r}")
