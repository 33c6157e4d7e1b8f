# tests/test_error_translator.py
from __future__ import annotations

from biometric_api.domain.error_translator import ErrorTranslator, Failure, Success


def test_success_and_warning_codes_are_success() -> None:
    t = ErrorTranslator(lambda c: "unused")
    assert t.translate(0) == Success(0)
    assert isinstance(t.translate(2), Success)


def test_failure_uses_driver_lookup() -> None:
    t = ErrorTranslator({-5: "capture error"}.get)
    out = t.translate(-5)
    assert out == Failure("capture error", -5)


def test_unknown_code_gets_generic_message() -> None:
    t = ErrorTranslator(lambda c: "")
    out = t.translate(-999)
    assert isinstance(out, Failure)
    assert "-999" in out.message


def test_lookup_that_raises_never_escapes() -> None:
    def boom(code: int) -> str:
        raise RuntimeError("sdk not loaded")

    out = ErrorTranslator(boom).translate(-1)
    assert isinstance(out, Failure) and out.message


def test_non_integer_code_is_a_generic_failure() -> None:
    t = ErrorTranslator(lambda c: "never consulted")
    for bad in (None, "0", 1.5, True):
        out = t.translate(bad)
        assert isinstance(out, Failure)
        assert out.code is None and "unknown device error" in out.message
    assert ErrorTranslator.is_success(None) is False
