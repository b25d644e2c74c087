"""Integration tests for the notification API endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.application.use_cases.notifications import (
    BackgroundDispatcher,
    DeliveryOrchestrator,
    DeliveryRecordStore,
    RecipientResolver,
    RecipientSettingsReader,
)
from app.infrastructure.notifications import RealtimePushGateway, notification_manager

from tests.conftest import stub_channels


@pytest.fixture()
def services(session_factory, fixed_now):
    records = DeliveryRecordStore(session_factory)
    orchestrator = DeliveryOrchestrator(
        channels=stub_channels(),
        resolver=RecipientResolver(session_factory),
        settings_reader=RecipientSettingsReader(session_factory),
        records=records,
        clock=lambda: fixed_now,
    )
    dispatcher = BackgroundDispatcher(max_workers=1)
    dispatcher.start()
    yield {
        "session_factory": session_factory,
        "record_store": records,
        "push_gateway": RealtimePushGateway(notification_manager),
        "orchestrator": orchestrator,
        "dispatcher": dispatcher,
    }
    dispatcher.shutdown()
    orchestrator.close()


@pytest.fixture()
def client(services):
    """Return a client whose services are wired by hand instead of the lifespan."""

    from main import create_app

    app = create_app()
    for name, service in services.items():
        setattr(app.state, name, service)
    return TestClient(app)


def test_event_is_accepted_then_recorded(client: TestClient, services, add_user) -> None:
    """Accepted events are delivered in the background and appear in the audit trail."""

    add_user("Kim", "operations", email="kim@example.com")

    response = client.post(
        "/notifications/events/request-created",
        json={
            "request_id": "PR-100",
            "requester": {"id": 9, "display_name": "Han", "email": "han@example.com"},
            "part_name": "Brake pad",
            "importance": "high",
        },
    )

    assert response.status_code == 202
    assert response.json() == {"accepted": True, "event": "request-created"}

    services["dispatcher"].shutdown(wait=True)

    deliveries = client.get(
        "/notifications/deliveries",
        params={"related_entity_id": "PR-100", "status": "sent"},
    )
    assert deliveries.status_code == 200
    body = deliveries.json()
    assert {item["channel"] for item in body} == {"push", "chat_bot", "email"}
    assert all(item["template_id"] == "purchase_request_created" for item in body)
    assert body[0]["variables"]["importance"] == "⚡ High"


def test_rejected_when_dispatcher_stopped(client: TestClient, services) -> None:
    services["dispatcher"].shutdown()

    response = client.post(
        "/notifications/events/system-message",
        json={"title": "Maintenance", "message": "Tonight", "level": "warning"},
    )

    assert response.status_code == 503


def test_invalid_payload_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/notifications/events/status-changed",
        json={"request_id": "PR-1", "new_status": "po_completed", "part_name": "", "quantity": -1},
    )

    assert response.status_code == 422


def test_missing_services_answer_503() -> None:
    from main import create_app

    response = TestClient(create_app()).get("/notifications/deliveries")

    assert response.status_code == 503


def test_channel_status_lists_every_channel(client: TestClient) -> None:
    response = client.get("/notifications/channels/status")

    assert response.status_code == 200
    assert [item["channel"] for item in response.json()] == [
        "push",
        "chat_bot",
        "email",
        "paid_gateway",
    ]


def test_websocket_handshake_and_permission(client: TestClient, services, add_user) -> None:
    user = add_user("Kim")
    gateway = services["push_gateway"]

    with client.websocket_connect(f"/notifications/ws?user_id={user.id}&permission=default") as ws:
        assert ws.receive_json() == {"type": "init", "data": {"permission": "default"}}

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_json({"type": "permission", "state": "maybe"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "permission", "state": "granted"})
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

    assert gateway.permission_state(user.id) == "granted"


def test_websocket_rejects_unknown_user(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/notifications/ws?user_id=404") as ws:
            ws.receive_json()

    assert exc_info.value.code == 1008
