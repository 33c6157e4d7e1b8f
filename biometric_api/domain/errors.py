# /biometric_api/domain/errors.py
from __future__ import annotations


class BiometricError(Exception):
    """Base for every failure this service reports to callers."""


class DriverFailure(BiometricError):
    """A native call returned a code below SUCCESS, or the binding itself raised."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class DeviceInitError(DriverFailure):
    """Initialization failed; fatal at startup."""


class DeviceNotInitializedError(BiometricError):
    def __init__(self) -> None:
        super().__init__("device session is not initialized")


class DeviceBusyError(BiometricError):
    def __init__(self, timeout: float | None) -> None:
        super().__init__(f"device busy: lock not acquired within {timeout}s")
        self.timeout = timeout


class TemplateNotFoundError(BiometricError):
    def __init__(self, record_id: int) -> None:
        super().__init__(f"biometric template {record_id} not found")
        self.record_id = record_id


class StoreFailure(BiometricError):
    """Persistence error; message is the backend's, verbatim."""
