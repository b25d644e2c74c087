"""Chat-bot channel delivering HTML messages through the Telegram Bot API."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field

import httpx

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    NotificationType,
    Recipient,
    RenderedMessage,
)
from app.domain.errors import TransportFailure

from .base import (
    ChannelAdapter,
    ChannelDescriptor,
    ChannelStatus,
    SimulationConfig,
    log_preview,
    simulate_delivery,
)

logger = logging.getLogger(__name__)

TELEGRAM_SIMULATION = SimulationConfig(
    success_rate=0.9, delay_seconds=0.8, message_id_prefix="sim_msg"
)


@dataclass(frozen=True)
class TelegramConfig:
    """Credentials and endpoint of the chat-bot gateway."""

    bot_token: str | None = None
    chat_id: str | None = None
    api_base: str = "https://api.telegram.org"
    timeout_seconds: float = 10.0
    simulation: SimulationConfig = field(default=TELEGRAM_SIMULATION)

    @property
    def configured(self) -> bool:
        return bool((self.bot_token or "").strip() and (self.chat_id or "").strip())

    @property
    def masked_token(self) -> str:
        token = self.bot_token or ""
        return f"{token[:10]}..." if token else "<missing>"


def _e(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=False)


def _link(url: str | None, text: str) -> str:
    if not url:
        return ""
    return f'\n\n<a href="{html.escape(url)}">{text}</a>'


def format_telegram_message(message: RenderedMessage) -> str:
    """Return the HTML body sent to the chat for ``message``'s event type."""

    values = message.variables
    event_type = message.event_type
    url = message.action_url

    if event_type is NotificationType.PURCHASE_REQUEST_CREATED:
        return (
            f"{_e(values.get('importanceIcon', '📋'))} <b>New purchase request</b>\n\n"
            f"👤 <b>Requester:</b> {_e(values.get('requestorName'))}\n"
            f"🔧 <b>Part:</b> {_e(values.get('partName'))}\n"
            f"📅 <b>Requested on:</b> {_e(values.get('requestDate'))}\n"
            f"⚡ <b>Importance:</b> {_e(values.get('importanceText'))}"
            f"{_link(url, '👉 Handle it')}"
        )
    if event_type is NotificationType.URGENT_REQUEST:
        return (
            "🚨 <b>Urgent request</b> 🚨\n\n"
            f"👤 <b>Requester:</b> {_e(values.get('requestorName'))}\n"
            f"🔧 <b>Part:</b> {_e(values.get('partName'))}\n"
            f"📋 <b>Reason:</b> {_e(values.get('urgentReason'))}\n"
            f"📅 <b>Requested at:</b> {_e(values.get('requestedAt'))}\n\n"
            "⚡ <b>Needs immediate handling!</b>"
            f"{_link(url, '🚀 Handle it now')}"
        )
    if event_type is NotificationType.OVERDUE_REQUEST:
        return (
            "⚠️ <b>Overdue request</b> ⚠️\n\n"
            f"🔧 <b>Part:</b> {_e(values.get('partName'))}\n"
            f"⏰ <b>Days overdue:</b> {_e(values.get('overdueDays'))}\n"
            f"📋 <b>Current status:</b> {_e(values.get('currentStatus'))}\n"
            f"📅 <b>Checked on:</b> {_e(values.get('checkedOn'))}\n\n"
            "🔥 <b>Needs immediate handling!</b>"
            f"{_link(url, '🚀 Handle it now')}"
        )
    if event_type.is_status_change:
        requestor = values.get("requestorName")
        requestor_line = f"👤 <b>Requester:</b> {_e(requestor)}\n" if requestor else ""
        return (
            f"{_e(values.get('statusIcon', '📋'))} <b>Status changed</b>\n\n"
            f"🔧 <b>Part:</b> {_e(values.get('partName'))}\n"
            f"{requestor_line}"
            f"📋 <b>New status:</b> {_e(values.get('statusLabel'))}\n"
            f"📅 <b>Changed at:</b> {_e(values.get('changedAt'))}"
            f"{_link(url, '👉 View details')}"
        )
    return (
        f"{_e(values.get('levelIcon', 'ℹ️'))} <b>{_e(values.get('title', 'System notice'))}</b>\n\n"
        f"{_e(values.get('message', message.text))}\n\n"
        f"📅 <b>Time:</b> {_e(values.get('sentAt'))}"
    )


class TelegramChannel(ChannelAdapter):
    """Send messages to the configured chat; simulate when unconfigured."""

    descriptor = ChannelDescriptor(channel=Channel.CHAT_BOT, label="Telegram")

    def __init__(self, config: TelegramConfig, *, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.api_base, timeout=config.timeout_seconds
        )

    @property
    def simulated(self) -> bool:
        return not self._config.configured

    def _deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        text = format_telegram_message(message)

        if self.simulated:
            log_preview(
                "Telegram",
                {
                    "bot token": self._config.masked_token,
                    "chat id": self._config.chat_id or "<missing>",
                    "recipient": recipient.name,
                },
                text,
            )
            return simulate_delivery(self._config.simulation, channel_label="Telegram")

        response = self._client.post(
            f"/bot{self._config.bot_token}/sendMessage",
            json={
                "chat_id": self._config.chat_id,
                "text": text,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
        )
        payload = self._json_or_raise(response)
        if payload.get("ok"):
            result = payload.get("result") or {}
            message_id = result.get("message_id")
            logger.info("Telegram message delivered for recipient %s", recipient.id)
            return DeliveryOutcome.sent(str(message_id) if message_id is not None else None)

        description = payload.get("description") or f"HTTP {response.status_code}"
        logger.error("Telegram rejected the message: %s", description)
        return DeliveryOutcome.failed(
            str(payload.get("error_code") or "TELEGRAM_ERROR"), description
        )

    def check_status(self) -> ChannelStatus:
        """Call ``getMe`` to confirm the bot token is valid."""

        if self.simulated:
            return ChannelStatus(
                channel=self.channel,
                success=True,
                simulation=True,
                detail="Running in simulation mode",
            )

        try:
            response = self._client.get(f"/bot{self._config.bot_token}/getMe")
            payload = self._json_or_raise(response)
        except (httpx.HTTPError, TransportFailure) as exc:
            logger.error("Telegram bot status check failed: %s", exc)
            return ChannelStatus(
                channel=self.channel, success=False, simulation=False, detail="Network error"
            )

        if payload.get("ok"):
            bot_info = payload.get("result") or {}
            logger.info("Telegram bot connected: %s", bot_info.get("username"))
            return ChannelStatus(
                channel=self.channel,
                success=True,
                simulation=False,
                info={"bot": bot_info},
            )
        return ChannelStatus(
            channel=self.channel,
            success=False,
            simulation=False,
            detail=payload.get("description"),
        )

    @staticmethod
    def _json_or_raise(response: httpx.Response) -> dict:
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise TransportFailure(
                f"Telegram answered with a non JSON body (HTTP {response.status_code})"
            ) from None
        if not isinstance(payload, dict):
            raise TransportFailure("Telegram answered with an unexpected payload")
        return payload


__all__ = [
    "TELEGRAM_SIMULATION",
    "TelegramConfig",
    "TelegramChannel",
    "format_telegram_message",
]
