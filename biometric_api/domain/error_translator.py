# /biometric_api/domain/error_translator.py
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from biometric_api.ports.device_driver import SUCCESS

LOG = logging.getLogger("domain.error_translator")


@dataclass(slots=True, frozen=True)
class Success:
    code: int = SUCCESS


@dataclass(slots=True, frozen=True)
class Failure:
    message: str
    code: int | None


Outcome = Success | Failure


def _is_code(code: object) -> bool:
    return isinstance(code, int) and not isinstance(code, bool)


class ErrorTranslator:
    """Maps native status codes to Success / Failure(message).

    Messages come from the driver's own code-to-string lookup. The translator
    never raises: a lookup that fails or returns nothing yields a generic message.
    """

    def __init__(self, lookup: Callable[[int], str]) -> None:
        self._lookup = lookup

    @staticmethod
    def is_success(code: object) -> bool:
        return _is_code(code) and code >= SUCCESS

    def message_for(self, code: int) -> str:
        try:
            text = self._lookup(code)
        except Exception as e:
            LOG.warning("translate.lookup_failed", extra={"extra": {"code": code, "error": str(e)}})
            text = None
        return text or f"unknown device error (code {code})"

    def translate(self, code: object) -> Outcome:
        if not _is_code(code):
            LOG.warning("translate.bad_code", extra={"extra": {"code": repr(code)}})
            return Failure(f"unknown device error (code {code!r})", None)
        if code >= SUCCESS:
            return Success(code)
        return Failure(self.message_for(code), code)
