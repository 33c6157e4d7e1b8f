# /biometric_api/domain/enroll_protocol.py
from __future__ import annotations

import logging
from collections.abc import Callable

from biometric_api.domain.device_session import DeviceHandle, DeviceSession
from biometric_api.domain.error_translator import Failure
from biometric_api.domain.errors import DeviceNotInitializedError, DriverFailure

LOG = logging.getLogger("domain.enroll")


class EnrollProtocol:
    """Device-resident enrollment. Never touches the local template store."""

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def _call(self, event: str, fn: Callable[[DeviceHandle], int], **ctx: object) -> bool:
        def _op(handle: DeviceHandle) -> bool:
            code = fn(handle)
            outcome = handle.check(code)
            if isinstance(outcome, Failure):
                LOG.warning(
                    f"{event}.failed",
                    extra={"extra": {**ctx, "code": code, "error": outcome.message}},
                )
                return False
            LOG.info(f"{event}.ok", extra={"extra": ctx})
            return True

        try:
            return self._session.with_device(_op)
        except (DriverFailure, DeviceNotInitializedError) as e:
            LOG.warning(f"{event}.error", extra={"extra": {**ctx, "error": str(e)}})
            return False

    def enroll_capture(self, template_id: int) -> bool:
        return self._call(
            "enroll.capture",
            lambda h: h.driver.capture_and_enroll(template_id),
            template_id=template_id,
        )

    def add_template(self, template_id: int, template_data: str) -> bool:
        """Push an already-extracted template under `template_id`, skipping a fresh capture."""
        return self._call(
            "enroll.add_template",
            lambda h: h.driver.save_template(template_id, template_data),
            template_id=template_id,
        )

    def delete_all_on_device(self) -> bool:
        return self._call("enroll.delete_all", lambda h: h.driver.delete_all_templates())
