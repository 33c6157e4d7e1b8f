# /biometric_api/domain/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ==== Device-side DTOs ====


@dataclass(slots=True, frozen=True)
class DeviceStatus:
    connected: bool
    message: str
    model: str | None = None
    serial: str | None = None
    firmware: str | None = None


@dataclass(slots=True, frozen=True)
class CaptureOutcome:
    success: bool
    error_message: str | None = None
    template_data: str | None = None
    image_width: int | None = None
    image_height: int | None = None
    quality: int | None = None


@dataclass(slots=True, frozen=True)
class IdentifyOutcome:
    """Result of a match against device-resident enrollments (not the local store)."""

    success: bool
    message: str
    matched_id: int | None = None
    score: int | None = None
    quality: int | None = None


# ==== Store-side DTOs ====


@dataclass(slots=True, frozen=True)
class BiometricRecord:
    id: int
    template_data: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class CaptureAndSaveResult:
    success: bool
    message: str
    biometric_id: int | None = None
    template_data: str | None = None
