"""Domain entities describing a single channel delivery and its outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DELIVERY_STATUS_PENDING = "pending"
DELIVERY_STATUS_SENT = "sent"
DELIVERY_STATUS_FAILED = "failed"

DELIVERY_TERMINAL_STATUSES = (DELIVERY_STATUS_SENT, DELIVERY_STATUS_FAILED)


@dataclass
class DeliveryAttempt:
    """Audit record of one channel's try at reaching one recipient for one event."""

    id: int | None
    event_type: str
    channel: str
    template_id: str
    recipient_id: int | None
    recipient_name: str
    related_entity_type: str
    related_entity_id: str
    status: str = DELIVERY_STATUS_PENDING
    recipient_email: str | None = None
    recipient_phone: str | None = None
    variables: dict[str, str] = field(default_factory=dict)
    message_id: str | None = None
    sent_at: datetime | None = None
    error_code: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in DELIVERY_TERMINAL_STATUSES


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result returned by a channel adapter; adapters never raise instead."""

    success: bool
    message_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    simulated: bool = False

    @classmethod
    def sent(cls, message_id: str | None = None, *, simulated: bool = False) -> "DeliveryOutcome":
        return cls(success=True, message_id=message_id, simulated=simulated)

    @classmethod
    def failed(
        cls,
        error_code: str,
        error_message: str | None = None,
        *,
        simulated: bool = False,
    ) -> "DeliveryOutcome":
        return cls(
            success=False,
            error_code=error_code,
            error_message=error_message,
            simulated=simulated,
        )


__all__ = [
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DELIVERY_STATUS_PENDING",
    "DELIVERY_STATUS_SENT",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_TERMINAL_STATUSES",
]
