# /biometric_api/domain/biometric_service.py
from __future__ import annotations

import asyncio
import logging

from biometric_api.domain.capture_orchestrator import CaptureOrchestrator
from biometric_api.domain.capture_protocol import CaptureProtocol
from biometric_api.domain.device_session import DeviceSession
from biometric_api.domain.enroll_protocol import EnrollProtocol
from biometric_api.domain.errors import TemplateNotFoundError
from biometric_api.domain.identify_protocol import IdentifyProtocol
from biometric_api.domain.models import (
    BiometricRecord,
    CaptureAndSaveResult,
    DeviceStatus,
    IdentifyOutcome,
)
from biometric_api.ports.template_store import TemplateStorePort

LOG = logging.getLogger("biometric_service")


class BiometricService:
    """Application service exposing device and store operations to callers.

    Device and store calls are blocking, so each one is offloaded with
    asyncio.to_thread. Device calls then queue on the session lock.
    """

    def __init__(self, session: DeviceSession, store: TemplateStorePort) -> None:
        self.session = session
        self.store = store
        self._capture = CaptureProtocol(session)
        self._identify = IdentifyProtocol(session)
        self._enroll = EnrollProtocol(session)
        self._orchestrator = CaptureOrchestrator(self._capture, store)

    # --- lifecycle ---

    async def startup(self) -> None:
        await asyncio.to_thread(self.session.initialize)

    async def shutdown(self) -> None:
        await asyncio.to_thread(self.session.terminate)

    # --- device ---

    async def get_status(self) -> DeviceStatus:
        return await asyncio.to_thread(self.session.status)

    async def capture(self) -> CaptureAndSaveResult:
        LOG.info("capture.requested")
        return await asyncio.to_thread(self._orchestrator.capture_and_save)

    async def identify(self) -> IdentifyOutcome:
        LOG.info("identify.requested")
        return await asyncio.to_thread(self._identify.identify)

    async def enroll_on_device(self, template_id: int) -> bool:
        return await asyncio.to_thread(self._enroll.enroll_capture, template_id)

    async def add_template_to_device(self, template_id: int, template_data: str) -> bool:
        return await asyncio.to_thread(self._enroll.add_template, template_id, template_data)

    async def delete_all_from_device(self) -> bool:
        return await asyncio.to_thread(self._enroll.delete_all_on_device)

    # --- local store ---

    async def list_templates(self) -> list[BiometricRecord]:
        return await asyncio.to_thread(self.store.list_all)

    async def get_template(self, record_id: int) -> BiometricRecord:
        record = await asyncio.to_thread(self.store.get_by_id, record_id)
        if record is None:
            raise TemplateNotFoundError(record_id)
        return record

    async def delete_all_templates(self) -> None:
        LOG.info("templates.delete_all")
        await asyncio.to_thread(self.store.delete_all)

    async def delete_template(self, record_id: int) -> None:
        deleted = await asyncio.to_thread(self.store.delete_by_id, record_id)
        if not deleted:
            LOG.warning("templates.delete.not_found", extra={"extra": {"biometric_id": record_id}})
            raise TemplateNotFoundError(record_id)
        LOG.info("templates.deleted", extra={"extra": {"biometric_id": record_id}})
