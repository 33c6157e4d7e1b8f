# /biometric_api/adapters/driver/mock_driver.py
from __future__ import annotations

import base64
import logging
import random
import uuid

from biometric_api.adapters.driver.cidbio_driver import KNOWN_CODES
from biometric_api.ports.device_driver import SUCCESS

LOG = logging.getLogger("adapter.driver.mock")

ERROR_CAPTURE = -5
ERROR_NO_TEMPLATE_WITH_ID = -14
ERROR_NOT_IDENTIFIED = -18

_WIDTH, _HEIGHT = 260, 300


class MockDriver:
    """Simulated reader for development; keeps enrollments in memory like the real device."""

    def __init__(self, fail_rate: float = 0.0, seed: int | None = None) -> None:
        self._fail_rate = fail_rate
        self._rng = random.Random(seed)
        self._enrolled: dict[int, str] = {}
        self._last_template: str | None = None

    def _fails(self) -> bool:
        return self._rng.random() < self._fail_rate

    def init(self) -> int:
        LOG.info("mock.init")
        return SUCCESS

    def terminate(self) -> None:
        LOG.info("mock.terminate")

    def get_device_info(self) -> tuple[int, str | None, str | None, str | None]:
        return SUCCESS, "1.0.0-mock", "MOCK-0001", "iDBio (simulated)"

    def capture_image(self) -> tuple[int, bytes | None, int, int]:
        if self._fails():
            return ERROR_CAPTURE, None, 0, 0
        return SUCCESS, self._rng.randbytes(_WIDTH * _HEIGHT), _WIDTH, _HEIGHT

    def extract_template(self, image: bytes, width: int, height: int) -> tuple[int, str | None, int]:
        template = base64.b64encode(f"MOCK-{uuid.uuid4()}".encode()).decode()
        self._last_template = template
        return SUCCESS, template, self._rng.randint(60, 100)

    def capture_and_identify(self) -> tuple[int, int | None, int | None, int | None]:
        quality = self._rng.randint(40, 100)
        if not self._enrolled or self._fails():
            return ERROR_NOT_IDENTIFIED, None, None, quality
        matched = self._rng.choice(sorted(self._enrolled))
        return SUCCESS, matched, self._rng.randint(500, 20000), quality

    def capture_and_enroll(self, template_id: int) -> int:
        if self._fails():
            return ERROR_CAPTURE
        self._enrolled[template_id] = f"MOCK-{uuid.uuid4()}"
        return SUCCESS

    def save_template(self, template_id: int, template: str) -> int:
        self._enrolled[template_id] = template
        return SUCCESS

    def delete_all_templates(self) -> int:
        self._enrolled.clear()
        return SUCCESS

    def error_message(self, code: int) -> str:
        return KNOWN_CODES.get(code, f"unknown error code {code}")
