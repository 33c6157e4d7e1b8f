# /biometric_api/domain/identify_protocol.py
from __future__ import annotations

import logging

from biometric_api.domain.device_session import DeviceHandle, DeviceSession
from biometric_api.domain.error_translator import Failure
from biometric_api.domain.errors import DeviceNotInitializedError, DriverFailure
from biometric_api.domain.models import IdentifyOutcome

LOG = logging.getLogger("domain.identify")


class IdentifyProtocol:
    """
    Capture-and-match against enrollments held on the device itself.

    Device enrollment ids live in their own namespace; they are not
    BiometricRecord ids from the local template store.
    """

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    @staticmethod
    def _run(handle: DeviceHandle) -> IdentifyOutcome:
        code, matched_id, score, quality = handle.driver.capture_and_identify()
        outcome = handle.check(code)
        if isinstance(outcome, Failure):
            # quality still tells the caller whether the finger was placed badly
            LOG.warning(
                "identify.failed",
                extra={"extra": {"code": code, "error": outcome.message, "quality": quality}},
            )
            return IdentifyOutcome(
                success=False,
                message=f"identification failed: {outcome.message}",
                quality=quality,
            )

        LOG.info(
            "identify.ok",
            extra={"extra": {"matched_id": matched_id, "score": score, "quality": quality}},
        )
        return IdentifyOutcome(
            success=True,
            message="biometric identified",
            matched_id=matched_id,
            score=score,
            quality=quality,
        )

    def identify(self) -> IdentifyOutcome:
        try:
            return self._session.with_device(self._run)
        except (DriverFailure, DeviceNotInitializedError) as e:
            LOG.warning("identify.error", extra={"extra": {"error": str(e)}})
            return IdentifyOutcome(success=False, message=f"error during identification: {e}")
