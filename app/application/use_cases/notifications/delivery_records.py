"""Audit trail of delivery attempts."""

from __future__ import annotations

from collections.abc import Sequence

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryAttempt,
    DeliveryOutcome,
    Recipient,
    RenderedMessage,
)
from app.infrastructure.repositories import DeliveryAttemptRepository
from app.utils import now_in_app_timezone

from .recipients import SessionFactory


class DeliveryRecordStore:
    """Append and update :class:`DeliveryAttempt` records.

    Every call uses its own short-lived session, so delivery workers writing
    different attempts never share database state.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def create_pending(
        self,
        *,
        channel: Channel,
        recipient: Recipient,
        contact: str | None,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryAttempt:
        attempt = DeliveryAttempt(
            id=None,
            event_type=message.event_type.value,
            channel=Channel(channel).value,
            template_id=message.template_id,
            recipient_id=recipient.id,
            recipient_name=recipient.name,
            recipient_email=contact if channel is Channel.EMAIL else None,
            recipient_phone=contact if channel is Channel.PAID_GATEWAY else None,
            variables=dict(message.variables),
            related_entity_type=correlation.related_entity_type,
            related_entity_id=correlation.related_entity_id,
            created_at=now_in_app_timezone(),
        )
        with self._session_factory() as session:
            return DeliveryAttemptRepository(session).create(attempt)

    def complete(self, attempt_id: int, outcome: DeliveryOutcome) -> bool:
        """Record ``outcome`` on a pending attempt; ``False`` if already terminal."""

        with self._session_factory() as session:
            repository = DeliveryAttemptRepository(session)
            if outcome.success:
                return repository.mark_sent(attempt_id, message_id=outcome.message_id)
            return repository.mark_failed(
                attempt_id,
                error_code=outcome.error_code,
                error_message=outcome.error_message,
            )

    def fail_pending(self, attempt_id: int, error_code: str, error_message: str) -> bool:
        with self._session_factory() as session:
            return DeliveryAttemptRepository(session).mark_failed(
                attempt_id, error_code=error_code, error_message=error_message
            )

    def get(self, attempt_id: int) -> DeliveryAttempt | None:
        with self._session_factory() as session:
            return DeliveryAttemptRepository(session).get(attempt_id)

    def list(
        self,
        *,
        related_entity_type: str | None = None,
        related_entity_id: str | None = None,
        status: str | None = None,
        channel: str | None = None,
        limit: int | None = 100,
    ) -> Sequence[DeliveryAttempt]:
        with self._session_factory() as session:
            return DeliveryAttemptRepository(session).list(
                related_entity_type=related_entity_type,
                related_entity_id=related_entity_id,
                status=status,
                channel=channel,
                limit=limit,
            )


__all__ = ["DeliveryRecordStore"]
