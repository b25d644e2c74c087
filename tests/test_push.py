"""Tests for the push channel and the websocket backed push gateway."""

from __future__ import annotations

import time

import anyio
import pytest
from anyio.from_thread import start_blocking_portal

from app.domain.entities import Correlation, NotificationType, Recipient, RenderedMessage
from app.domain.errors import PermissionDenied
from app.infrastructure.channels import PushChannel, PushGateway, PushHandle, PushOptions, build_push_content
from app.infrastructure.channels.push import AUTO_CLOSE_MS
from app.infrastructure.notifications import RealtimePushGateway

RECIPIENT = Recipient(id=11, name="Kim", role="operations")
CORRELATION = Correlation("purchase_request", "PR-4")


def _message(event_type: NotificationType, **variables: str) -> RenderedMessage:
    return RenderedMessage(
        template_id="any", event_type=event_type, text="text", variables=variables
    )


class FakeGateway(PushGateway):
    def __init__(self, state: str = "granted", *, answer: str | None = None, handle: bool = True):
        self.state = state
        self.answer = answer
        self.handle = handle
        self.displayed: list[tuple[int, str, str, PushOptions]] = []
        self.permission_requests: list[int] = []

    def permission_state(self, user_id: int) -> str:
        return self.state

    def request_permission(self, user_id: int) -> str:
        self.permission_requests.append(user_id)
        if self.answer is not None:
            self.state = self.answer
        return self.state

    def display(self, user_id, title, body, options):
        self.displayed.append((user_id, title, body, options))
        if not self.handle:
            return None
        return PushHandle(id="push_1", tag=options.tag, delivered_connections=1)


def test_urgent_push_requires_interaction() -> None:
    content = build_push_content(
        _message(
            NotificationType.URGENT_REQUEST,
            requestorName="Lee",
            partName="Brake pad",
            urgentReason="Line stopped",
            requestId="PR-4",
        )
    )

    assert content.title == "🚨 Urgent request"
    assert content.options.require_interaction is True
    assert content.options.auto_close_ms is None
    assert content.options.tag == "urgent-request"
    assert content.options.data["url"] == "/purchase-requests/PR-4"


def test_status_change_push_closes_automatically() -> None:
    content = build_push_content(
        _message(NotificationType.WAREHOUSE_RECEIVED, partName="Filter", statusLabel="Received at warehouse")
    )

    assert content.options.require_interaction is False
    assert content.options.auto_close_ms == AUTO_CLOSE_MS
    assert content.body == '"Filter" - Received at warehouse'


def test_send_displays_notification() -> None:
    gateway = FakeGateway()
    message = _message(NotificationType.OVERDUE_REQUEST, partName="Hose", overdueDays="3")

    outcome = PushChannel(gateway).send(RECIPIENT, message, CORRELATION)

    assert outcome.success
    assert outcome.message_id == "push_1"
    user_id, title, body, options = gateway.displayed[0]
    assert user_id == RECIPIENT.id
    assert title == "⚠️ Overdue request"
    assert options.require_interaction is True


def test_denied_permission_is_not_ready() -> None:
    channel = PushChannel(FakeGateway("denied"))

    with pytest.raises(PermissionDenied):
        channel.ensure_ready(RECIPIENT)

    outcome = channel.send(RECIPIENT, _message(NotificationType.SYSTEM_MAINTENANCE), CORRELATION)
    assert outcome.error_code == "PERMISSION_DENIED"


def test_default_permission_is_requested_first() -> None:
    gateway = FakeGateway("default", answer="granted")

    PushChannel(gateway).ensure_ready(RECIPIENT)

    assert gateway.permission_requests == [RECIPIENT.id]


def test_missing_handle_is_a_display_failure() -> None:
    outcome = PushChannel(FakeGateway(handle=False)).send(
        RECIPIENT, _message(NotificationType.SYSTEM_MAINTENANCE, title="Notice", message="Hi"), CORRELATION
    )

    assert not outcome.success
    assert outcome.error_code == "DISPLAY_FAILED"


class FakeManager:
    def __init__(self, connections: int = 1) -> None:
        self.connections = connections
        self.messages: list[tuple[int, dict]] = []

    async def send_to_user(self, user_id: int, message: dict) -> int:
        self.messages.append((user_id, message))
        return self.connections

    def connection_count(self, user_id: int) -> int:
        return self.connections


def test_realtime_gateway_tracks_permissions() -> None:
    gateway = RealtimePushGateway(FakeManager())

    assert gateway.permission_state(1) == "default"
    gateway.set_permission(1, "granted")
    assert gateway.permission_state(1) == "granted"

    with pytest.raises(ValueError):
        gateway.set_permission(1, "maybe")


def test_realtime_gateway_without_portal_displays_nothing() -> None:
    gateway = RealtimePushGateway(FakeManager())

    assert gateway.display(1, "Title", "Body", PushOptions(tag="t")) is None


def test_realtime_gateway_sends_through_portal() -> None:
    manager = FakeManager(connections=2)
    gateway = RealtimePushGateway(manager)

    with start_blocking_portal() as portal:
        gateway.bind_portal(portal)
        handle = gateway.display(7, "Title", "Body", PushOptions(tag="status-change"))
        gateway.bind_portal(None)

    assert handle is not None
    assert handle.delivered_connections == 2
    user_id, message = manager.messages[0]
    assert user_id == 7
    assert message["type"] == "push"
    assert message["data"]["title"] == "Title"
    assert message["data"]["tag"] == "status-change"
    assert message["data"]["auto_close_ms"] == AUTO_CLOSE_MS


class SlowManager(FakeManager):
    async def send_to_user(self, user_id: int, message: dict) -> int:
        await anyio.sleep(0.5)
        return await super().send_to_user(user_id, message)


def test_permission_request_does_not_wait_for_the_socket() -> None:
    manager = SlowManager()
    gateway = RealtimePushGateway(manager, send_timeout_seconds=0.1)

    with start_blocking_portal() as portal:
        gateway.bind_portal(portal)
        started = time.monotonic()
        state = gateway.request_permission(3)
        elapsed = time.monotonic() - started

    assert state == "default"
    assert elapsed < 0.1
    assert manager.messages == [(3, {"type": "push.permission-request", "data": {}})]
