# /biometric_api/domain/device_session.py
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

from biometric_api.domain.error_translator import ErrorTranslator, Failure, Outcome
from biometric_api.domain.errors import (
    BiometricError,
    DeviceBusyError,
    DeviceInitError,
    DeviceNotInitializedError,
    DriverFailure,
)
from biometric_api.domain.models import DeviceStatus
from biometric_api.ports.device_driver import DeviceDriverPort

LOG = logging.getLogger("domain.device_session")

T = TypeVar("T")


class DeviceHandle:
    """Access to the live device. Valid only for the with_device call that issued it."""

    __slots__ = ("_driver", "_translator", "_alive")

    def __init__(self, driver: DeviceDriverPort, translator: ErrorTranslator) -> None:
        self._driver = driver
        self._translator = translator
        self._alive = True

    @property
    def driver(self) -> DeviceDriverPort:
        if not self._alive:
            raise DeviceNotInitializedError()
        return self._driver

    def check(self, code: int) -> Outcome:
        return self._translator.translate(code)

    def _invalidate(self) -> None:
        self._alive = False


class DeviceSession:
    """
    Owns the single native device handle.

    All hardware access goes through with_device(), which holds an exclusive
    lock for the whole operation. The native SDK is not reentrant, so a second
    caller blocks until the first one is done (or its wait times out).
    """

    def __init__(
        self,
        driver: DeviceDriverPort,
        *,
        lock_timeout: float | None = None,
        translator: ErrorTranslator | None = None,
    ) -> None:
        self._driver = driver
        self.translator = translator or ErrorTranslator(driver.error_message)
        self._lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self._handle: DeviceHandle | None = None

    @property
    def initialized(self) -> bool:
        return self._handle is not None

    # --- lifecycle ---

    def initialize(self) -> None:
        """Idempotent. Raises DeviceInitError and stays uninitialized on failure."""
        with self._lock:
            if self._handle is not None:
                return

            LOG.info("device.init.start")
            try:
                code = self._driver.init()
            except DriverFailure as e:
                LOG.error("device.init.failed", extra={"extra": {"error": e.message}})
                raise DeviceInitError(e.message, e.code) from e
            except Exception as e:
                LOG.exception("device.init.raised")
                raise DeviceInitError(f"driver init raised {type(e).__name__}: {e}") from e

            outcome = self.translator.translate(code)
            if isinstance(outcome, Failure):
                LOG.error(
                    "device.init.failed",
                    extra={"extra": {"code": outcome.code, "error": outcome.message}},
                )
                raise DeviceInitError(f"failed to initialize SDK: {outcome.message}", outcome.code)

            self._handle = DeviceHandle(self._driver, self.translator)
            LOG.info("device.init.ok")

    def terminate(self) -> None:
        """Release the handle once. Waits for any in-flight operation to finish."""
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            self._handle = None
            handle._invalidate()
            LOG.info("device.terminate")
            try:
                self._driver.terminate()
            except Exception:
                LOG.exception("device.terminate.raised")

    def __enter__(self) -> DeviceSession:
        self.initialize()
        return self

    def __exit__(self, *exc: object) -> None:
        self.terminate()

    # --- access ---

    def with_device(self, op: Callable[[DeviceHandle], T], *, timeout: float | None = None) -> T:
        """
        Run `op` with exclusive access to the handle.

        Raises DeviceBusyError when the lock is not acquired in time,
        DeviceNotInitializedError without a live handle, and DriverFailure
        when the driver binding raises anything untyped.
        """
        wait = self._lock_timeout if timeout is None else timeout
        if not self._lock.acquire(timeout=-1 if wait is None else wait):
            LOG.warning("device.lock.timeout", extra={"extra": {"timeout": wait}})
            raise DeviceBusyError(wait)
        try:
            if self._handle is None:
                raise DeviceNotInitializedError()
            # per-call view; dead once the lock is released
            view = DeviceHandle(self._driver, self.translator)
            try:
                return op(view)
            except BiometricError:
                raise
            except Exception as e:
                LOG.exception("device.op.raised")
                raise DriverFailure(f"{type(e).__name__}: {e}") from e
            finally:
                view._invalidate()
        finally:
            self._lock.release()

    def status(self) -> DeviceStatus:
        """Query model/serial/firmware. Never raises; absence is reported as disconnected."""

        def _query(handle: DeviceHandle) -> tuple[Outcome, str | None, str | None, str | None]:
            code, version, serial, model = handle.driver.get_device_info()
            return handle.check(code), version, serial, model

        try:
            outcome, version, serial, model = self.with_device(_query)
        except BiometricError as e:
            LOG.warning("device.status.unavailable", extra={"extra": {"error": str(e)}})
            return DeviceStatus(
                connected=False,
                message=f"device not connected or communication error: {e}",
            )

        if isinstance(outcome, Failure):
            LOG.warning("device.status.failed", extra={"extra": {"error": outcome.message}})
            return DeviceStatus(
                connected=False,
                message=f"device not connected or communication error: {outcome.message}",
            )

        LOG.info(
            "device.status.ok",
            extra={"extra": {"model": model, "serial": serial, "firmware": version}},
        )
        return DeviceStatus(
            connected=True,
            message="device connected and operational",
            model=model,
            serial=serial,
            firmware=version,
        )
