# /biometric_api/config.py
from __future__ import annotations

import os
import sys

from pydantic import BaseModel


def _default_library() -> str:
    return "libcidbio.dll" if sys.platform.startswith("win") else "libcidbio.so"


class Settings(BaseModel):
    # Device / driver
    DRIVER: str = os.getenv("DRIVER", "cidbio").lower()  # "cidbio" | "mock"
    CIDBIO_LIBRARY_PATH: str = os.getenv("CIDBIO_LIBRARY_PATH", _default_library())
    DEVICE_LOCK_TIMEOUT_SECONDS: float = float(os.getenv("DEVICE_LOCK_TIMEOUT_SECONDS", "30.0"))
    MOCK_FAIL_RATE: float = float(os.getenv("MOCK_FAIL_RATE", "0.0"))

    # Template store
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "redis").lower()  # "redis" | "memory"
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_PREFIX: str = os.getenv("REDIS_PREFIX", "biometric")

    # HTTP
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def lock_timeout(self) -> float | None:
        """Lock wait in seconds, or None to wait indefinitely."""
        t = self.DEVICE_LOCK_TIMEOUT_SECONDS
        return t if t > 0 else None


settings = Settings()
