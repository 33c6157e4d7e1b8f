# /biometric_api/ports/template_store.py
from __future__ import annotations

from datetime import datetime
from typing import Protocol

from biometric_api.domain.models import BiometricRecord


class TemplateStorePort(Protocol):
    """Durable keyed storage of captured templates.

    Implementations raise StoreFailure for persistence errors.
    """

    def insert(self, template_data: str, created_at: datetime) -> int:
        """Persist a record and return its id (unique, monotonic)."""

    def list_all(self) -> list[BiometricRecord]:
        """Return all records ordered by id."""

    def get_by_id(self, record_id: int) -> BiometricRecord | None: ...

    def delete_all(self) -> None: ...

    def delete_by_id(self, record_id: int) -> bool:
        """Return False if the record was absent."""
