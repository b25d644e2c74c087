"""Pydantic models describing notification events and delivery records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

RoleName = Literal["operations", "logistics", "admin", "all"]


class RequesterPayload(BaseModel):
    """Account that triggered the event, as known to the calling client."""

    id: int | None = None
    display_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None


class RequestCreatedEvent(BaseModel):
    request_id: str = Field(..., min_length=1)
    requester: RequesterPayload
    part_name: str = Field(..., min_length=1)
    importance: Literal["urgent", "high", "normal"] = "normal"


class UrgentRequestEvent(BaseModel):
    request_id: str = Field(..., min_length=1)
    requester: RequesterPayload
    requester_phone: str = ""
    part_name: str = Field(..., min_length=1)
    urgent_reason: str = Field(..., min_length=1)


class StatusChangedEvent(BaseModel):
    request_id: str = Field(..., min_length=1)
    new_status: str = Field(..., min_length=1)
    part_name: str = Field(..., min_length=1)
    requester_name: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    branch_name: str | None = None
    expected_date: datetime | None = None
    target_role: RoleName | None = None


class OverdueWarningEvent(BaseModel):
    request_id: str = Field(..., min_length=1)
    part_name: str = Field(..., min_length=1)
    request_date: datetime
    overdue_days: int = Field(..., ge=0)
    current_status: str = Field(..., min_length=1)
    target_role: RoleName | None = None


class SystemMessageEvent(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    level: Literal["info", "warning", "error"] = "info"


class EventAccepted(BaseModel):
    """Acknowledgement returned before the event has been delivered."""

    accepted: bool = True
    event: str


class DeliveryAttemptRead(BaseModel):
    """Audit record of one delivery attempt on one channel."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    channel: str
    template_id: str
    recipient_id: int | None
    recipient_name: str
    recipient_email: str | None = None
    recipient_phone: str | None = None
    variables: dict[str, str] = Field(default_factory=dict)
    status: str
    message_id: str | None = None
    sent_at: datetime | None = None
    error_code: str | None = None
    error_message: str | None = None
    related_entity_type: str
    related_entity_id: str
    created_at: datetime | None = None


class ChannelStatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: str
    success: bool
    simulation: bool
    detail: str | None = None
    info: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "RequesterPayload",
    "RequestCreatedEvent",
    "UrgentRequestEvent",
    "StatusChangedEvent",
    "OverdueWarningEvent",
    "SystemMessageEvent",
    "EventAccepted",
    "DeliveryAttemptRead",
    "ChannelStatusRead",
]
