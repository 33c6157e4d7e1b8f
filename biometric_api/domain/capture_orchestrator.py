# /biometric_api/domain/capture_orchestrator.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from biometric_api.domain.capture_protocol import CaptureProtocol
from biometric_api.domain.models import CaptureAndSaveResult
from biometric_api.ports.template_store import TemplateStorePort

LOG = logging.getLogger("domain.capture_orchestrator")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CaptureOrchestrator:
    """
    Capture, then keep the local store consistent with the outcome.

    A successful capture inserts exactly one record. A failed capture purges
    every record in the store: the store is treated as possibly stale and reset
    to empty, with no row-level repair. The purge runs after the device lock
    for the attempt has been released.
    """

    def __init__(
        self,
        capture: CaptureProtocol,
        store: TemplateStorePort,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._capture = capture
        self._store = store
        self._clock = clock

    def capture_and_save(self) -> CaptureAndSaveResult:
        outcome = self._capture.capture()

        if outcome.success and outcome.template_data is not None:
            record_id = self._store.insert(outcome.template_data, self._clock())
            LOG.info("capture.saved", extra={"extra": {"biometric_id": record_id}})
            return CaptureAndSaveResult(
                success=True,
                message="biometric captured",
                biometric_id=record_id,
                template_data=outcome.template_data,
            )

        error = outcome.error_message or "capture returned no template"
        LOG.warning("capture.failed.purging_store", extra={"extra": {"error": error}})
        self._store.delete_all()
        return CaptureAndSaveResult(
            success=False,
            message=f"failed to capture biometric: {error}",
        )
