# /biometric_api/adapters/driver/cidbio_driver.py
from __future__ import annotations

import ctypes
import logging
import os
from pathlib import Path

from biometric_api.domain.errors import DriverFailure
from biometric_api.ports.device_driver import SUCCESS

LOG = logging.getLogger("adapter.driver.cidbio")

# Fallback texts for when CIDBio_GetErrorMessage gives nothing back.
KNOWN_CODES: dict[int, str] = {
    SUCCESS: "success",
    -1: "unknown error",
    -2: "no device found",
    -3: "null argument",
    -4: "invalid argument",
    -5: "capture error",
    -6: "capture timeout",
    -7: "USB communication error",
    -8: "I/O error on host",
    -9: "template already enrolled",
    -10: "merging error",
    -11: "matching error",
    -14: "no template with this id",
    -18: "fingerprint not identified",
    -19: "device busy",
    -20: "capture canceled",
    -21: "no finger detected",
}

_c_str_p = ctypes.POINTER(ctypes.c_char_p)


def _decode(raw: bytes | None) -> str | None:
    return raw.decode("utf-8", errors="replace") if raw is not None else None


class CIDBioDriver:
    """
    ctypes binding for the iDBio `libcidbio` C API.

    The library is loaded on the first init() call. Strings and byte arrays
    returned through out-parameters are owned by the SDK and released with
    CIDBio_FreeString / CIDBio_FreeByteArray after copying.
    """

    def __init__(self, lib_path: str) -> None:
        self._lib_path = lib_path
        self._lib: ctypes.CDLL | None = None

    # --- loading ---

    def _check_library_file(self) -> None:
        path = Path(self._lib_path)
        if not path.is_absolute():
            path = Path(os.getcwd()) / path
        LOG.info(
            "driver.library.lookup",
            extra={"extra": {"path": str(path), "found": path.exists()}},
        )

    def _load(self) -> ctypes.CDLL:
        if self._lib is not None:
            return self._lib

        self._check_library_file()
        try:
            lib = ctypes.CDLL(self._lib_path)
        except OSError as e:
            LOG.error("driver.library.load_failed", extra={"extra": {"path": self._lib_path}})
            raise DriverFailure(f"could not load library '{self._lib_path}': {e}") from e

        self._setup_functions(lib)
        self._lib = lib
        LOG.info("driver.library.loaded", extra={"extra": {"path": self._lib_path}})
        return lib

    @staticmethod
    def _setup_functions(lib: ctypes.CDLL) -> None:
        c_int, c_uint, c_ll = ctypes.c_int, ctypes.c_uint, ctypes.c_longlong

        # int CIDBio_Init(void); int CIDBio_Terminate(void);
        lib.CIDBio_Init.restype = c_int
        lib.CIDBio_Init.argtypes = []
        lib.CIDBio_Terminate.restype = c_int
        lib.CIDBio_Terminate.argtypes = []

        # int CIDBio_GetDeviceInfo(char** version, char** serial, char** model);
        lib.CIDBio_GetDeviceInfo.restype = c_int
        lib.CIDBio_GetDeviceInfo.argtypes = [_c_str_p, _c_str_p, _c_str_p]

        # int CIDBio_CaptureImage(unsigned char** buf, unsigned int* width, unsigned int* height);
        lib.CIDBio_CaptureImage.restype = c_int
        lib.CIDBio_CaptureImage.argtypes = [
            ctypes.POINTER(ctypes.POINTER(ctypes.c_ubyte)),
            ctypes.POINTER(c_uint),
            ctypes.POINTER(c_uint),
        ]

        # int CIDBio_ExtractTemplateFromImage(unsigned int w, unsigned int h,
        #                                     const unsigned char* img, char** t, int* quality);
        lib.CIDBio_ExtractTemplateFromImage.restype = c_int
        lib.CIDBio_ExtractTemplateFromImage.argtypes = [
            c_uint,
            c_uint,
            ctypes.POINTER(ctypes.c_ubyte),
            _c_str_p,
            ctypes.POINTER(c_int),
        ]

        # int CIDBio_CaptureAndIdentify(long long* id, int* score, int* quality);
        lib.CIDBio_CaptureAndIdentify.restype = c_int
        lib.CIDBio_CaptureAndIdentify.argtypes = [
            ctypes.POINTER(c_ll),
            ctypes.POINTER(c_int),
            ctypes.POINTER(c_int),
        ]

        # int CIDBio_CaptureAndEnroll(long long id);
        lib.CIDBio_CaptureAndEnroll.restype = c_int
        lib.CIDBio_CaptureAndEnroll.argtypes = [c_ll]

        # int CIDBio_SaveTemplate(long long id, const char* t);
        lib.CIDBio_SaveTemplate.restype = c_int
        lib.CIDBio_SaveTemplate.argtypes = [c_ll, ctypes.c_char_p]

        # int CIDBio_DeleteAllTemplates(void);
        lib.CIDBio_DeleteAllTemplates.restype = c_int
        lib.CIDBio_DeleteAllTemplates.argtypes = []

        # int CIDBio_GetErrorMessage(int error, char** msg);
        lib.CIDBio_GetErrorMessage.restype = c_int
        lib.CIDBio_GetErrorMessage.argtypes = [c_int, _c_str_p]

        lib.CIDBio_FreeByteArray.restype = c_int
        lib.CIDBio_FreeByteArray.argtypes = [ctypes.POINTER(ctypes.c_ubyte)]
        lib.CIDBio_FreeString.restype = c_int
        lib.CIDBio_FreeString.argtypes = [ctypes.c_char_p]

    def _take_string(self, ptr: ctypes.c_char_p) -> str | None:
        if ptr.value is None:
            return None
        value = _decode(ptr.value)
        self._load().CIDBio_FreeString(ptr)
        return value

    # --- driver port ---

    def init(self) -> int:
        return int(self._load().CIDBio_Init())

    def terminate(self) -> None:
        if self._lib is not None:
            self._lib.CIDBio_Terminate()

    def get_device_info(self) -> tuple[int, str | None, str | None, str | None]:
        lib = self._load()
        version, serial, model = ctypes.c_char_p(), ctypes.c_char_p(), ctypes.c_char_p()
        code = lib.CIDBio_GetDeviceInfo(ctypes.byref(version), ctypes.byref(serial), ctypes.byref(model))
        return (
            int(code),
            self._take_string(version),
            self._take_string(serial),
            self._take_string(model),
        )

    def capture_image(self) -> tuple[int, bytes | None, int, int]:
        lib = self._load()
        buf = ctypes.POINTER(ctypes.c_ubyte)()
        width, height = ctypes.c_uint(0), ctypes.c_uint(0)
        code = int(lib.CIDBio_CaptureImage(ctypes.byref(buf), ctypes.byref(width), ctypes.byref(height)))
        if not buf:
            return code, None, width.value, height.value
        image = ctypes.string_at(buf, width.value * height.value)
        lib.CIDBio_FreeByteArray(buf)
        return code, image, width.value, height.value

    def extract_template(self, image: bytes, width: int, height: int) -> tuple[int, str | None, int]:
        lib = self._load()
        img = (ctypes.c_ubyte * len(image)).from_buffer_copy(image)
        template = ctypes.c_char_p()
        quality = ctypes.c_int(0)
        code = lib.CIDBio_ExtractTemplateFromImage(
            width,
            height,
            ctypes.cast(img, ctypes.POINTER(ctypes.c_ubyte)),
            ctypes.byref(template),
            ctypes.byref(quality),
        )
        return int(code), self._take_string(template), quality.value

    def capture_and_identify(self) -> tuple[int, int | None, int | None, int | None]:
        lib = self._load()
        # -1 marks "not written by the SDK"
        tid, score, quality = ctypes.c_longlong(-1), ctypes.c_int(-1), ctypes.c_int(-1)
        code = int(lib.CIDBio_CaptureAndIdentify(ctypes.byref(tid), ctypes.byref(score), ctypes.byref(quality)))
        return (
            code,
            tid.value if tid.value >= 0 else None,
            score.value if score.value >= 0 else None,
            quality.value if quality.value >= 0 else None,
        )

    def capture_and_enroll(self, template_id: int) -> int:
        return int(self._load().CIDBio_CaptureAndEnroll(template_id))

    def save_template(self, template_id: int, template: str) -> int:
        return int(self._load().CIDBio_SaveTemplate(template_id, template.encode("utf-8")))

    def delete_all_templates(self) -> int:
        return int(self._load().CIDBio_DeleteAllTemplates())

    def error_message(self, code: int) -> str:
        text = None
        if self._lib is not None:
            msg = ctypes.c_char_p()
            if self._lib.CIDBio_GetErrorMessage(code, ctypes.byref(msg)) >= SUCCESS:
                text = self._take_string(msg)
        return text or KNOWN_CODES.get(code, f"unknown error code {code}")
