"""Persistence helpers for delivery attempt records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_PENDING,
    DELIVERY_STATUS_SENT,
    DeliveryAttempt,
)
from app.infrastructure.models import DeliveryAttemptModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class DeliveryAttemptRepository:
    """Provide create/update/list operations for :class:`DeliveryAttempt` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, attempt_id: int) -> DeliveryAttempt | None:
        model = self.session.get(DeliveryAttemptModel, attempt_id)
        return self._to_entity(model) if model else None

    def list(
        self,
        *,
        related_entity_type: str | None = None,
        related_entity_id: str | None = None,
        status: str | None = None,
        channel: str | None = None,
        limit: int | None = 100,
    ) -> Sequence[DeliveryAttempt]:
        query = self.session.query(DeliveryAttemptModel)
        if related_entity_type is not None:
            query = query.filter(DeliveryAttemptModel.related_entity_type == related_entity_type)
        if related_entity_id is not None:
            query = query.filter(DeliveryAttemptModel.related_entity_id == related_entity_id)
        if status is not None:
            query = query.filter(DeliveryAttemptModel.status == status)
        if channel is not None:
            query = query.filter(DeliveryAttemptModel.channel == channel)
        query = query.order_by(
            DeliveryAttemptModel.created_at.desc(), DeliveryAttemptModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        if attempt.status != DELIVERY_STATUS_PENDING:
            raise ValueError("Delivery attempts must be created in pending state")
        model = DeliveryAttemptModel()
        self._apply_entity_to_model(model, attempt)
        model.created_at = ensure_app_naive_datetime(
            attempt.created_at or now_in_app_timezone()
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_sent(
        self, attempt_id: int, *, message_id: str | None, sent_at: datetime | None = None
    ) -> bool:
        """Move a pending attempt to ``sent``; return ``False`` if it was not pending."""

        return self._transition(
            attempt_id,
            {
                DeliveryAttemptModel.status: DELIVERY_STATUS_SENT,
                DeliveryAttemptModel.message_id: message_id,
                DeliveryAttemptModel.sent_at: ensure_app_naive_datetime(
                    sent_at or now_in_app_timezone()
                ),
            },
        )

    def mark_failed(
        self, attempt_id: int, *, error_code: str | None, error_message: str | None
    ) -> bool:
        """Move a pending attempt to ``failed``; return ``False`` if it was not pending."""

        return self._transition(
            attempt_id,
            {
                DeliveryAttemptModel.status: DELIVERY_STATUS_FAILED,
                DeliveryAttemptModel.error_code: error_code,
                DeliveryAttemptModel.error_message: error_message,
            },
        )

    def _transition(self, attempt_id: int, values: dict) -> bool:
        updated = (
            self.session.query(DeliveryAttemptModel)
            .filter(DeliveryAttemptModel.id == attempt_id)
            .filter(DeliveryAttemptModel.status == DELIVERY_STATUS_PENDING)
            .update(values, synchronize_session=False)
        )
        self.session.commit()
        return updated == 1

    @staticmethod
    def _apply_entity_to_model(model: DeliveryAttemptModel, attempt: DeliveryAttempt) -> None:
        model.event_type = attempt.event_type
        model.channel = attempt.channel
        model.template_id = attempt.template_id
        model.recipient_id = attempt.recipient_id
        model.recipient_name = attempt.recipient_name
        model.recipient_email = attempt.recipient_email
        model.recipient_phone = attempt.recipient_phone
        model.variables = dict(attempt.variables or {})
        model.status = attempt.status
        model.message_id = attempt.message_id
        model.sent_at = ensure_app_naive_datetime(attempt.sent_at)
        model.error_code = attempt.error_code
        model.error_message = attempt.error_message
        model.related_entity_type = attempt.related_entity_type
        model.related_entity_id = attempt.related_entity_id

    @staticmethod
    def _to_entity(model: DeliveryAttemptModel) -> DeliveryAttempt:
        return DeliveryAttempt(
            id=model.id,
            event_type=model.event_type,
            channel=model.channel,
            template_id=model.template_id,
            recipient_id=model.recipient_id,
            recipient_name=model.recipient_name,
            recipient_email=model.recipient_email,
            recipient_phone=model.recipient_phone,
            variables=dict(model.variables or {}),
            status=model.status,
            message_id=model.message_id,
            sent_at=ensure_app_timezone(model.sent_at),
            error_code=model.error_code,
            error_message=model.error_message,
            related_entity_type=model.related_entity_type,
            related_entity_id=model.related_entity_id,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DeliveryAttemptRepository"]
