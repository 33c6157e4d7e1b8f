# /biometric_api/adapters/system/container.py
from __future__ import annotations

import logging

from biometric_api.adapters.driver.factory import build_driver
from biometric_api.adapters.repositories.memory_template_store import MemoryTemplateStore
from biometric_api.adapters.repositories.redis_template_store import RedisTemplateStore
from biometric_api.config import Settings, settings
from biometric_api.domain.biometric_service import BiometricService
from biometric_api.domain.device_session import DeviceSession
from biometric_api.ports.template_store import TemplateStorePort

LOG = logging.getLogger("adapter.container")

# One device session per process; built on first use.
_service: BiometricService | None = None


def build_store(cfg: Settings) -> TemplateStorePort:
    if cfg.STORE_BACKEND == "memory":
        return MemoryTemplateStore()
    if cfg.STORE_BACKEND == "redis":
        return RedisTemplateStore(cfg.REDIS_URL, prefix=cfg.REDIS_PREFIX)
    raise ValueError(f"unknown STORE_BACKEND: {cfg.STORE_BACKEND!r}")


def build_service(cfg: Settings = settings) -> BiometricService:
    session = DeviceSession(build_driver(cfg), lock_timeout=cfg.lock_timeout)
    LOG.info(
        "service.built",
        extra={"extra": {"driver": cfg.DRIVER, "store": cfg.STORE_BACKEND}},
    )
    return BiometricService(session, build_store(cfg))


def get_service() -> BiometricService:
    global _service
    if _service is None:
        _service = build_service()
    return _service
