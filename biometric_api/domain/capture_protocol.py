# /biometric_api/domain/capture_protocol.py
from __future__ import annotations

import logging

from biometric_api.domain.device_session import DeviceHandle, DeviceSession
from biometric_api.domain.error_translator import Failure
from biometric_api.domain.errors import DeviceNotInitializedError, DriverFailure
from biometric_api.domain.models import CaptureOutcome

LOG = logging.getLogger("domain.capture")


class CaptureProtocol:
    """Acquire an image and extract a template in one serialized device window."""

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    @staticmethod
    def _run(handle: DeviceHandle) -> CaptureOutcome:
        code, image, width, height = handle.driver.capture_image()
        outcome = handle.check(code)
        if isinstance(outcome, Failure):
            msg = f"failed to capture image: {outcome.message}"
            LOG.warning("capture.image.failed", extra={"extra": {"code": code, "error": msg}})
            return CaptureOutcome(success=False, error_message=msg)

        # the SDK reads width*height bytes from the buffer
        if not image or len(image) < width * height:
            msg = "failed to capture image: device returned no image"
            LOG.warning(
                "capture.image.empty",
                extra={"extra": {"bytes": len(image or b""), "width": width, "height": height}},
            )
            return CaptureOutcome(success=False, error_message=msg)

        code, template, quality = handle.driver.extract_template(image, width, height)
        outcome = handle.check(code)
        if isinstance(outcome, Failure):
            msg = f"failed to extract template: {outcome.message}"
            LOG.warning("capture.extract.failed", extra={"extra": {"code": code, "error": msg}})
            return CaptureOutcome(success=False, error_message=msg, quality=quality)

        LOG.info(
            "capture.ok",
            extra={"extra": {"width": width, "height": height, "quality": quality}},
        )
        return CaptureOutcome(
            success=True,
            template_data=template,
            image_width=width,
            image_height=height,
            quality=quality,
        )

    def capture(self) -> CaptureOutcome:
        """Blocks behind the device lock; DeviceBusyError propagates on lock timeout."""
        try:
            return self._session.with_device(self._run)
        except (DriverFailure, DeviceNotInitializedError) as e:
            LOG.warning("capture.error", extra={"extra": {"error": str(e)}})
            return CaptureOutcome(success=False, error_message=f"error during biometric capture: {e}")
