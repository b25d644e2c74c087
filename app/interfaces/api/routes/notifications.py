"""Endpoints and websocket handler for purchase-request notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.notifications import (
    BackgroundDispatcher,
    DeliveryOrchestrator,
    DeliveryRecordStore,
)
from app.domain.entities import Requester
from app.infrastructure.notifications import notification_manager
from app.infrastructure.repositories import UserRepository
from app.interfaces.api.dependencies import (
    get_background_dispatcher,
    get_orchestrator,
    get_record_store,
)
from app.interfaces.api.schemas import (
    ChannelStatusRead,
    DeliveryAttemptRead,
    EventAccepted,
    OverdueWarningEvent,
    RequestCreatedEvent,
    RequesterPayload,
    StatusChangedEvent,
    SystemMessageEvent,
    UrgentRequestEvent,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _requester(payload: RequesterPayload) -> Requester:
    return Requester(id=payload.id, display_name=payload.display_name, email=payload.email)


def _accept(
    dispatcher: BackgroundDispatcher,
    event: str,
    fn: Callable[..., Any],
    *args: Any,
    **kwargs: Any,
) -> EventAccepted:
    try:
        dispatcher.submit(fn, *args, **kwargs)
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    logger.info("Accepted %s notification", event)
    return EventAccepted(event=event)


@router.get("/deliveries", response_model=list[DeliveryAttemptRead])
def list_deliveries(
    related_entity_type: str | None = Query(default=None),
    related_entity_id: str | None = Query(default=None),
    delivery_status: Literal["pending", "sent", "failed"] | None = Query(
        default=None, alias="status"
    ),
    channel: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    records: DeliveryRecordStore = Depends(get_record_store),
) -> list[DeliveryAttemptRead]:
    """Return the audit trail of delivery attempts, newest first."""

    attempts = records.list(
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        status=delivery_status,
        channel=channel,
        limit=limit,
    )
    return [DeliveryAttemptRead.model_validate(attempt) for attempt in attempts]


@router.get("/channels/status", response_model=list[ChannelStatusRead])
def channel_status(
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
) -> list[ChannelStatusRead]:
    """Report whether every channel is configured, simulated and reachable."""

    results = []
    for adapter in orchestrator.channels.values():
        result = adapter.check_status()
        results.append(
            ChannelStatusRead(
                channel=result.channel.value,
                success=result.success,
                simulation=result.simulation,
                detail=result.detail,
                info=dict(result.info),
            )
        )
    return results


@router.post(
    "/events/request-created",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def request_created(
    payload: RequestCreatedEvent,
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
    dispatcher: BackgroundDispatcher = Depends(get_background_dispatcher),
) -> EventAccepted:
    return _accept(
        dispatcher,
        "request-created",
        orchestrator.notify_request_created,
        payload.request_id,
        _requester(payload.requester),
        payload.part_name,
        payload.importance,
    )


@router.post(
    "/events/urgent-request",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def urgent_request(
    payload: UrgentRequestEvent,
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
    dispatcher: BackgroundDispatcher = Depends(get_background_dispatcher),
) -> EventAccepted:
    return _accept(
        dispatcher,
        "urgent-request",
        orchestrator.notify_urgent_request,
        payload.request_id,
        _requester(payload.requester),
        payload.requester_phone,
        payload.part_name,
        payload.urgent_reason,
    )


@router.post(
    "/events/status-changed",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def status_changed(
    payload: StatusChangedEvent,
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
    dispatcher: BackgroundDispatcher = Depends(get_background_dispatcher),
) -> EventAccepted:
    return _accept(
        dispatcher,
        "status-changed",
        orchestrator.notify_status_change,
        payload.request_id,
        payload.new_status,
        payload.part_name,
        payload.requester_name,
        quantity=payload.quantity,
        branch_name=payload.branch_name,
        expected_date=payload.expected_date,
        target_role=payload.target_role,
    )


@router.post(
    "/events/overdue-warning",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def overdue_warning(
    payload: OverdueWarningEvent,
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
    dispatcher: BackgroundDispatcher = Depends(get_background_dispatcher),
) -> EventAccepted:
    return _accept(
        dispatcher,
        "overdue-warning",
        orchestrator.notify_overdue_request,
        payload.request_id,
        payload.part_name,
        payload.request_date,
        payload.overdue_days,
        payload.current_status,
        target_role=payload.target_role,
    )


@router.post(
    "/events/system-message",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def system_message(
    payload: SystemMessageEvent,
    orchestrator: DeliveryOrchestrator = Depends(get_orchestrator),
    dispatcher: BackgroundDispatcher = Depends(get_background_dispatcher),
) -> EventAccepted:
    return _accept(
        dispatcher,
        "system-message",
        orchestrator.notify_system_message,
        payload.title,
        payload.message,
        payload.level,
    )


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that shows push notifications to a connected user."""

    raw_user_id = websocket.query_params.get("user_id")
    if not raw_user_id or not raw_user_id.isdigit():
        await websocket.close(code=1008)
        return
    user_id = int(raw_user_id)

    state = websocket.app.state
    gateway = getattr(state, "push_gateway", None)
    session_factory = getattr(state, "session_factory", None)
    if gateway is None or session_factory is None:
        await websocket.close(code=1011)
        return

    try:
        with session_factory() as session:
            user = UserRepository(session).get(user_id)
    except SQLAlchemyError:
        logger.exception("Could not load user %s for websocket", user_id)
        await websocket.close(code=1011)
        return
    if user is None:
        await websocket.close(code=1008)
        return

    permission = websocket.query_params.get("permission")
    if permission:
        try:
            gateway.set_permission(user_id, permission)
        except ValueError:
            await websocket.close(code=1008)
            return

    await notification_manager.connect(user_id, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": {"permission": gateway.permission_state(user_id)}}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "permission":
                try:
                    gateway.set_permission(user_id, str(message.get("state", "")))
                except ValueError:
                    await websocket.send_json(
                        {"type": "error", "data": {"detail": "Unknown permission state"}}
                    )
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user_id, websocket)
    except Exception:
        notification_manager.disconnect(user_id, websocket)
        raise
