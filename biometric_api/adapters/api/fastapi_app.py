# /biometric_api/adapters/api/fastapi_app.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from biometric_api.adapters.system.container import get_service
from biometric_api.adapters.system.logging_cfg import configure_logger
from biometric_api.config import settings
from biometric_api.domain.biometric_service import BiometricService
from biometric_api.domain.errors import BiometricError, DeviceBusyError, TemplateNotFoundError
from biometric_api.domain.models import BiometricRecord

LOG = logging.getLogger("adapter.api")

# ==== Schemas ====


class DeviceStatusModel(BaseModel):
    connected: bool
    model: Optional[str] = None
    serial: Optional[str] = None
    firmware: Optional[str] = None
    message: str


class CaptureResponseModel(BaseModel):
    success: bool
    message: str
    biometric_id: Optional[int] = None
    template: Optional[str] = None


class TemplateModel(BaseModel):
    id: int
    template: str
    created_at: datetime

    @classmethod
    def of(cls, r: BiometricRecord) -> "TemplateModel":
        return cls(id=r.id, template=r.template_data, created_at=r.created_at)


class IdentifyResponseModel(BaseModel):
    success: bool
    message: str
    matched_id: Optional[int] = None
    score: Optional[int] = None
    quality: Optional[int] = None


class DeviceTemplateModel(BaseModel):
    template: str


class MessageModel(BaseModel):
    message: str


def _server_error(message: str, error: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": message, "error": error or message})


def _service(request: Request) -> BiometricService:
    return request.app.state.service


# ==== Routes ====

router = APIRouter(prefix="/api/biometric")


@router.get("/status", response_model=DeviceStatusModel)
async def get_status(svc: BiometricService = Depends(_service)) -> DeviceStatusModel:
    s = await svc.get_status()
    return DeviceStatusModel(
        connected=s.connected, model=s.model, serial=s.serial, firmware=s.firmware, message=s.message
    )


@router.post("/capture", response_model=CaptureResponseModel)
async def capture(svc: BiometricService = Depends(_service)):
    result = await svc.capture()
    body = CaptureResponseModel(
        success=result.success,
        message=result.message,
        biometric_id=result.biometric_id,
        template=result.template_data,
    )
    if not result.success:
        return JSONResponse(status_code=500, content=body.model_dump())
    return body


@router.get("/templates", response_model=list[TemplateModel])
async def list_templates(svc: BiometricService = Depends(_service)) -> list[TemplateModel]:
    return [TemplateModel.of(r) for r in await svc.list_templates()]


@router.get("/templates/{record_id}", response_model=TemplateModel)
async def get_template(record_id: int, svc: BiometricService = Depends(_service)) -> TemplateModel:
    return TemplateModel.of(await svc.get_template(record_id))


@router.post("/identify", response_model=IdentifyResponseModel)
async def identify(svc: BiometricService = Depends(_service)) -> IdentifyResponseModel:
    o = await svc.identify()
    return IdentifyResponseModel(
        success=o.success, message=o.message, matched_id=o.matched_id, score=o.score, quality=o.quality
    )


@router.delete("/templates", response_model=MessageModel)
async def delete_all_templates(svc: BiometricService = Depends(_service)) -> MessageModel:
    await svc.delete_all_templates()
    return MessageModel(message="all biometric templates deleted")


@router.delete("/templates/{record_id}", response_model=MessageModel)
async def delete_template(record_id: int, svc: BiometricService = Depends(_service)) -> MessageModel:
    await svc.delete_template(record_id)
    return MessageModel(message=f"biometric template {record_id} deleted")


# --- device-resident enrollment ---


@router.post("/device/enroll/{template_id}", response_model=MessageModel)
async def enroll_on_device(template_id: int, svc: BiometricService = Depends(_service)):
    if not await svc.enroll_on_device(template_id):
        return _server_error(f"failed to enroll biometric {template_id} on device")
    return MessageModel(message=f"biometric {template_id} enrolled on device")


@router.post("/device/templates/{template_id}", response_model=MessageModel)
async def add_template_to_device(
    template_id: int, payload: DeviceTemplateModel, svc: BiometricService = Depends(_service)
):
    if not await svc.add_template_to_device(template_id, payload.template):
        return _server_error(f"failed to add template {template_id} to device")
    return MessageModel(message=f"template {template_id} added to device")


@router.delete("/device/templates", response_model=MessageModel)
async def delete_all_from_device(svc: BiometricService = Depends(_service)):
    if not await svc.delete_all_from_device():
        return _server_error("failed to delete templates from device")
    return MessageModel(message="all templates deleted from device")


# ==== App ====


def create_app(service: BiometricService | None = None) -> FastAPI:
    configure_logger(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = service or get_service()
        app.state.service = svc
        await svc.startup()  # DeviceInitError here aborts startup
        LOG.info("api.started")
        try:
            yield
        finally:
            await svc.shutdown()
            LOG.info("api.stopped")

    app = FastAPI(title="biometric-api", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TemplateNotFoundError)
    async def _not_found(request: Request, exc: TemplateNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"message": str(exc)})

    @app.exception_handler(DeviceBusyError)
    async def _busy(request: Request, exc: DeviceBusyError) -> JSONResponse:
        LOG.warning("api.device_busy", extra={"extra": {"path": request.url.path}})
        return JSONResponse(status_code=503, content={"message": "device busy", "error": str(exc)})

    @app.exception_handler(BiometricError)
    async def _failure(request: Request, exc: BiometricError) -> JSONResponse:
        LOG.error(
            "api.error",
            extra={"extra": {"path": request.url.path, "error": type(exc).__name__, "detail": str(exc)}},
        )
        return _server_error(f"error handling {request.url.path}", str(exc))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
