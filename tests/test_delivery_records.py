"""Tests for delivery attempt persistence and recipient resolution."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.application.use_cases.notifications import DeliveryRecordStore, RecipientResolver
from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    NotificationType,
    Recipient,
    RenderedMessage,
)
from app.domain.errors import RecipientLookupError

MESSAGE = RenderedMessage(
    template_id="warehouse_received",
    event_type=NotificationType.WAREHOUSE_RECEIVED,
    text="Filter arrived",
    variables={"partName": "Filter", "requestId": "PR-1"},
)
CORRELATION = Correlation("purchase_request", "PR-1")
RECIPIENT = Recipient(id=7, name="Kim", role="logistics", email="kim@example.com", phone="010-1234-5678")


@pytest.fixture()
def store(session_factory) -> DeliveryRecordStore:
    return DeliveryRecordStore(session_factory)


def _pending(store: DeliveryRecordStore, channel: Channel = Channel.EMAIL):
    return store.create_pending(
        channel=channel,
        recipient=RECIPIENT,
        contact=RECIPIENT.contact("email" if channel is Channel.EMAIL else "phone"),
        message=MESSAGE,
        correlation=CORRELATION,
    )


def test_create_pending_stores_snapshot(store: DeliveryRecordStore) -> None:
    attempt = _pending(store)

    assert attempt.id is not None
    assert attempt.status == "pending"
    assert attempt.channel == "email"
    assert attempt.recipient_email == "kim@example.com"
    assert attempt.recipient_phone is None
    assert attempt.variables == {"partName": "Filter", "requestId": "PR-1"}
    assert attempt.created_at is not None


def test_complete_success_sets_message_id_and_sent_at(store: DeliveryRecordStore) -> None:
    attempt = _pending(store, Channel.PAID_GATEWAY)

    assert store.complete(attempt.id, DeliveryOutcome.sent("msg_1")) is True

    stored = store.get(attempt.id)
    assert stored.status == "sent"
    assert stored.message_id == "msg_1"
    assert stored.sent_at is not None
    assert stored.recipient_phone == "010-1234-5678"


def test_attempt_transitions_only_once(store: DeliveryRecordStore) -> None:
    attempt = _pending(store)

    assert store.fail_pending(attempt.id, "TIMEOUT", "No result") is True
    assert store.complete(attempt.id, DeliveryOutcome.sent("late")) is False

    stored = store.get(attempt.id)
    assert stored.status == "failed"
    assert stored.error_code == "TIMEOUT"
    assert stored.message_id is None
    assert stored.sent_at is None


def test_list_filters_by_correlation_and_status(store: DeliveryRecordStore) -> None:
    sent = _pending(store)
    store.complete(sent.id, DeliveryOutcome.sent("m-1"))
    failed = _pending(store, Channel.PAID_GATEWAY)
    store.complete(failed.id, DeliveryOutcome.failed("GATEWAY_REJECTED", "blocked"))

    assert {attempt.id for attempt in store.list(related_entity_id="PR-1")} == {sent.id, failed.id}
    assert [attempt.id for attempt in store.list(status="failed")] == [failed.id]
    assert [attempt.id for attempt in store.list(channel="email")] == [sent.id]
    assert store.list(related_entity_id="PR-2") == []
    assert len(store.list(limit=1)) == 1


def test_resolver_returns_active_users_in_id_order(session_factory, add_user) -> None:
    first = add_user("Kim", "operations", phone="010-1111-2222")
    add_user("Lee", "logistics", is_active=False)
    third = add_user("Park", "logistics")
    fourth = add_user("Choi", "admin", email="choi@example.com")

    resolver = RecipientResolver(session_factory)

    assert [r.id for r in resolver.resolve_all_active()] == [first.id, third.id, fourth.id]
    assert [r.id for r in resolver.resolve_by_role("logistics")] == [third.id]
    assert [r.id for r in resolver.resolve_by_role("all")] == [first.id, third.id, fourth.id]
    assert resolver.resolve_by_role("operations")[0].phone == "010-1111-2222"


def test_resolver_wraps_database_errors() -> None:
    def broken_session():
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    resolver = RecipientResolver(broken_session)

    with pytest.raises(RecipientLookupError):
        resolver.resolve_all_active()
