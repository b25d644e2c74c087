"""In-app push channel built on top of a permission-aware push gateway."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    NotificationType,
    Recipient,
    RenderedMessage,
)
from app.domain.errors import PermissionDenied

from .base import ChannelAdapter, ChannelDescriptor, ChannelStatus

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"
PERMISSION_DEFAULT = "default"

AUTO_CLOSE_MS = 5000
DEFAULT_ICON = "/favicon.ico"


@dataclass(frozen=True)
class PushOptions:
    """Display options forwarded to the client with the notification."""

    tag: str
    require_interaction: bool = False
    auto_close_ms: int | None = AUTO_CLOSE_MS
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_ICON
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PushHandle:
    """Reference to a displayed notification."""

    id: str
    tag: str
    delivered_connections: int = 0


class PushGateway(ABC):
    """Permission and display API of the push transport."""

    @abstractmethod
    def permission_state(self, user_id: int) -> str:
        """Return ``granted``, ``denied`` or ``default`` for ``user_id``."""

    @abstractmethod
    def request_permission(self, user_id: int) -> str:
        """Ask for permission and return the resulting state."""

    @abstractmethod
    def display(
        self, user_id: int, title: str, body: str, options: PushOptions
    ) -> PushHandle | None:
        """Show a notification; ``None`` when nothing could be displayed."""


@dataclass(frozen=True)
class PushContent:
    title: str
    body: str
    options: PushOptions


def build_push_content(message: RenderedMessage) -> PushContent:
    """Return the title, body and options for ``message``'s event type."""

    values = message.variables
    part_name = values.get("partName", "")
    request_id = values.get("requestId", "")
    data = {
        "url": f"/purchase-requests/{request_id}" if request_id else None,
        "type": message.event_type.value,
        "requestId": request_id or None,
    }
    event_type = message.event_type

    if event_type is NotificationType.PURCHASE_REQUEST_CREATED:
        urgent = values.get("importanceLevel") == "urgent"
        return PushContent(
            title=f"{values.get('importanceIcon', '📋')} New purchase request",
            body=f'{values.get("requestorName", "")} requested the part "{part_name}".',
            options=_options("purchase-request", data, require_interaction=urgent),
        )
    if event_type is NotificationType.URGENT_REQUEST:
        return PushContent(
            title="🚨 Urgent request",
            body=(
                f'Urgent request from {values.get("requestorName", "")}: '
                f'"{part_name}" - {values.get("urgentReason", "")}'
            ),
            options=_options("urgent-request", data, require_interaction=True),
        )
    if event_type is NotificationType.OVERDUE_REQUEST:
        return PushContent(
            title="⚠️ Overdue request",
            body=f'"{part_name}" is {values.get("overdueDays", "")} day(s) overdue.',
            options=_options("overdue-request", data, require_interaction=True),
        )
    if event_type.is_status_change:
        return PushContent(
            title="📋 Status changed",
            body=f'"{part_name}" - {values.get("statusLabel", "")}',
            options=_options("status-change", data),
        )
    return PushContent(
        title=f"{values.get('levelIcon', 'ℹ️')} {values.get('title', 'System notice')}",
        body=values.get("message", message.text),
        options=_options("system-message", data),
    )


def _options(tag: str, data: dict[str, Any], *, require_interaction: bool = False) -> PushOptions:
    return PushOptions(
        tag=tag,
        require_interaction=require_interaction,
        auto_close_ms=None if require_interaction else AUTO_CLOSE_MS,
        data={key: value for key, value in data.items() if value is not None},
    )


class PushChannel(ChannelAdapter):
    """Local notification shown to the recipient's open sessions."""

    descriptor = ChannelDescriptor(channel=Channel.PUSH, label="Push")

    def __init__(self, gateway: PushGateway) -> None:
        self._gateway = gateway

    def ensure_ready(self, recipient: Recipient) -> None:
        super().ensure_ready(recipient)
        state = self._gateway.permission_state(recipient.id)
        if state == PERMISSION_DEFAULT:
            state = self._gateway.request_permission(recipient.id)
        if state != PERMISSION_GRANTED:
            raise PermissionDenied(
                f"Push permission for user {recipient.id} is '{state}'"
            )

    def _deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        self.ensure_ready(recipient)

        content = build_push_content(message)
        handle = self._gateway.display(
            recipient.id, content.title, content.body, content.options
        )
        if handle is None:
            return DeliveryOutcome.failed("DISPLAY_FAILED", "Push notification could not be displayed")

        logger.info("Push notification '%s' shown to user %s", content.title, recipient.id)
        return DeliveryOutcome.sent(handle.id)

    def check_status(self) -> ChannelStatus:
        return ChannelStatus(
            channel=self.channel,
            success=True,
            simulation=False,
            detail="Push notifications are delivered to connected sessions",
        )


__all__ = [
    "PERMISSION_GRANTED",
    "PERMISSION_DENIED",
    "PERMISSION_DEFAULT",
    "AUTO_CLOSE_MS",
    "PushOptions",
    "PushHandle",
    "PushGateway",
    "PushContent",
    "build_push_content",
    "PushChannel",
]
