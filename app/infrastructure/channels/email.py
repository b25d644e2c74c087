"""E-mail channel composing per-event messages and sending them via SendGrid."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    NotificationType,
    Recipient,
    RenderedMessage,
)
from app.domain.templates import SYSTEM_SIGNATURE
from app.infrastructure.email import SendGridCredentials, send_email

from .base import (
    CONTACT_EMAIL,
    ChannelAdapter,
    ChannelDescriptor,
    ChannelStatus,
    SimulationConfig,
    log_preview,
    simulate_delivery,
)

logger = logging.getLogger(__name__)

EMAIL_SIMULATION = SimulationConfig(
    success_rate=0.95, delay_seconds=1.2, message_id_prefix="sim_email"
)

_CLOSING = "Thank you.\nParts Management System"


@dataclass(frozen=True)
class EmailConfig:
    credentials: SendGridCredentials = field(default_factory=SendGridCredentials)
    simulation: SimulationConfig = field(default=EMAIL_SIMULATION)


@dataclass(frozen=True)
class EmailContent:
    subject: str
    body: str


def compose_email(message: RenderedMessage, recipient_name: str) -> EmailContent:
    """Return the subject and body used for ``message``'s event type."""

    values = message.variables
    part_name = values.get("partName", "")
    greeting = f"Hello {recipient_name},"
    event_type = message.event_type

    if event_type is NotificationType.PURCHASE_REQUEST_CREATED:
        return EmailContent(
            subject=f"{SYSTEM_SIGNATURE} New purchase request - {part_name}",
            body=(
                f"{greeting}\n\n"
                "A new purchase request has been registered.\n\n"
                "📋 Request details:\n"
                f"• Requester: {values.get('requestorName', '')}\n"
                f"• Part: {part_name}\n"
                f"• Importance: {values.get('importance', '')}\n"
                f"• Requested on: {values.get('requestDate', '')}\n\n"
                "Please handle it promptly.\n\n"
                f"{_CLOSING}"
            ),
        )
    if event_type is NotificationType.URGENT_REQUEST:
        return EmailContent(
            subject=f"🚨 [URGENT] {SYSTEM_SIGNATURE} urgent request - {part_name}",
            body=(
                f"{greeting}\n\n"
                "An urgent purchase request has been submitted.\n\n"
                "🚨 Urgent request details:\n"
                f"• Requester: {values.get('requestorName', '')}\n"
                f"• Part: {part_name}\n"
                f"• Reason: {values.get('urgentReason', '')}\n"
                f"• Requested at: {values.get('requestedAt', '')}\n\n"
                "⚡ Immediate handling is required!\n\n"
                f"{_CLOSING}"
            ),
        )
    if event_type is NotificationType.OVERDUE_REQUEST:
        return EmailContent(
            subject=f"⚠️ [OVERDUE] {SYSTEM_SIGNATURE} processing delayed - {part_name}",
            body=(
                f"{greeting}\n\n"
                "A purchase request is overdue.\n\n"
                "⚠️ Delay details:\n"
                f"• Part: {part_name}\n"
                f"• Days overdue: {values.get('overdueDays', '')}\n"
                f"• Current status: {values.get('currentStatus', '')}\n"
                f"• Checked on: {values.get('checkedOn', '')}\n\n"
                "Please handle it immediately.\n\n"
                f"{_CLOSING}"
            ),
        )
    if event_type.is_status_change:
        requestor = values.get("requestorName")
        requestor_line = f"• Requester: {requestor}\n" if requestor else ""
        return EmailContent(
            subject=f"{SYSTEM_SIGNATURE} Status changed - {part_name}",
            body=(
                f"{greeting}\n\n"
                "The status of a purchase request has changed.\n\n"
                "📋 Change details:\n"
                f"• Part: {part_name}\n"
                f"{requestor_line}"
                f"• New status: {values.get('statusLabel', '')}\n"
                f"• Changed at: {values.get('changedAt', '')}\n\n"
                "Please check the system for details.\n\n"
                f"{_CLOSING}"
            ),
        )
    title = values.get("title", "System notice")
    return EmailContent(
        subject=f"{values.get('levelIcon', 'ℹ️')} {SYSTEM_SIGNATURE} {title}",
        body=(
            f"{greeting}\n\n"
            f"{values.get('message', message.text)}\n\n"
            f"Time: {values.get('sentAt', '')}\n\n"
            f"{_CLOSING}"
        ),
    )


class EmailChannel(ChannelAdapter):
    """Deliver e-mail to the recipient's address; simulate without credentials."""

    descriptor = ChannelDescriptor(channel=Channel.EMAIL, required_contact=CONTACT_EMAIL, label="Email")

    def __init__(self, config: EmailConfig) -> None:
        self._config = config

    @property
    def simulated(self) -> bool:
        return not self._config.credentials.configured

    def _deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        self.ensure_ready(recipient)
        address = self.contact_for(recipient)
        content = compose_email(message, recipient.name)

        if self.simulated:
            log_preview(
                "Email",
                {
                    "recipient": f"{recipient.name} <{address}>",
                    "subject": content.subject,
                    "action url": message.action_url or "-",
                },
                content.body,
            )
            return simulate_delivery(self._config.simulation, channel_label="Email")

        message_id = send_email(
            self._config.credentials,
            subject=content.subject,
            text_content=content.body,
            recipient=address,
            action_url=message.action_url,
        )
        logger.info("Email delivered to recipient %s", recipient.id)
        return DeliveryOutcome.sent(message_id)

    def check_status(self) -> ChannelStatus:
        if self.simulated:
            return ChannelStatus(
                channel=self.channel,
                success=True,
                simulation=True,
                detail="Running in simulation mode",
            )
        return ChannelStatus(
            channel=self.channel,
            success=True,
            simulation=False,
            info={"sender": self._config.credentials.sender},
        )


__all__ = [
    "EMAIL_SIMULATION",
    "EmailConfig",
    "EmailContent",
    "compose_email",
    "EmailChannel",
]
