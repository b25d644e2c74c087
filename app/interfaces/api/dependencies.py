"""FastAPI dependency utilities and notification service wiring."""

from __future__ import annotations

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session, sessionmaker

from app.application.use_cases.notifications import (
    BackgroundDispatcher,
    DeliveryOrchestrator,
    DeliveryRecordStore,
    RecipientResolver,
    RecipientSettingsReader,
)
from app.config import Settings
from app.infrastructure.channels import PushGateway, build_channels
from app.infrastructure.notifications import RealtimePushGateway


def build_orchestrator(
    settings: Settings,
    session_factory: sessionmaker[Session],
    push_gateway: PushGateway,
) -> DeliveryOrchestrator:
    """Assemble the orchestrator with channels configured from ``settings``."""

    return DeliveryOrchestrator(
        channels=build_channels(settings, push_gateway),
        resolver=RecipientResolver(session_factory),
        settings_reader=RecipientSettingsReader(session_factory),
        records=DeliveryRecordStore(session_factory),
        base_url=settings.app_base_url,
        max_workers=settings.dispatch_max_workers,
        timeout_seconds=settings.dispatch_timeout_seconds,
    )


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification service is not running",
        )
    return service


def get_orchestrator(request: Request) -> DeliveryOrchestrator:
    return _service(request, "orchestrator")


def get_background_dispatcher(request: Request) -> BackgroundDispatcher:
    return _service(request, "dispatcher")


def get_record_store(request: Request) -> DeliveryRecordStore:
    return _service(request, "record_store")


def get_push_gateway(request: Request) -> RealtimePushGateway:
    return _service(request, "push_gateway")


__all__ = [
    "build_orchestrator",
    "get_orchestrator",
    "get_background_dispatcher",
    "get_record_store",
    "get_push_gateway",
]
