# /biometric_api/ports/device_driver.py
from __future__ import annotations

from typing import Protocol

# Native status codes are ordered: anything below SUCCESS is a failure,
# values at or above it are success (positive values are SDK warnings).
SUCCESS = 0


class DeviceDriverPort(Protocol):
    """Opaque vendor driver. Every call returns a native status code first."""

    def init(self) -> int: ...

    def terminate(self) -> None: ...

    def get_device_info(self) -> tuple[int, str | None, str | None, str | None]:
        """Return (code, version, serial, model)."""

    def capture_image(self) -> tuple[int, bytes | None, int, int]:
        """Return (code, image_bytes, width, height)."""

    def extract_template(self, image: bytes, width: int, height: int) -> tuple[int, str | None, int]:
        """Return (code, template_string, quality)."""

    def capture_and_identify(self) -> tuple[int, int | None, int | None, int | None]:
        """Return (code, id, score, quality)."""

    def capture_and_enroll(self, template_id: int) -> int: ...

    def save_template(self, template_id: int, template: str) -> int: ...

    def delete_all_templates(self) -> int: ...

    def error_message(self, code: int) -> str: ...
