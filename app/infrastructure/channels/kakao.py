"""Paid messaging gateway channel addressed by phone number."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    Recipient,
    RenderedMessage,
)
from app.domain.errors import TransportFailure

from .base import (
    CONTACT_PHONE,
    ChannelAdapter,
    ChannelDescriptor,
    ChannelStatus,
    SimulationConfig,
    log_preview,
    simulate_delivery,
)

logger = logging.getLogger(__name__)

KAKAO_SIMULATION = SimulationConfig(
    success_rate=0.9, delay_seconds=1.0, message_id_prefix="msg"
)
SEND_PATH = "/api/kakao/send"


@dataclass(frozen=True)
class KakaoConfig:
    """Endpoint of the paid gateway; only production calls it for real."""

    base_url: str = "http://localhost:3001"
    live: bool = False
    timeout_seconds: float = 10.0
    simulation: SimulationConfig = field(default=KAKAO_SIMULATION)


class KakaoChannel(ChannelAdapter):
    """Template based message sent to the recipient's phone number."""

    descriptor = ChannelDescriptor(
        channel=Channel.PAID_GATEWAY, required_contact=CONTACT_PHONE, label="KakaoTalk"
    )

    def __init__(self, config: KakaoConfig, *, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.base_url, timeout=config.timeout_seconds
        )

    @property
    def simulated(self) -> bool:
        return not self._config.live

    def _deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        self.ensure_ready(recipient)
        phone = self.contact_for(recipient)

        if self.simulated:
            log_preview(
                "KakaoTalk",
                {
                    "recipient": phone,
                    "template id": message.template_id,
                    "variables": message.variables,
                },
                message.text,
            )
            return simulate_delivery(self._config.simulation, channel_label="KakaoTalk")

        response = self._client.post(
            SEND_PATH,
            json={
                "templateId": message.template_id,
                "recipientPhone": phone,
                "variables": message.variables,
            },
        )
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise TransportFailure(
                f"Gateway answered with a non JSON body (HTTP {response.status_code})"
            ) from None

        if isinstance(payload, dict) and payload.get("success"):
            logger.info("KakaoTalk message accepted for recipient %s", recipient.id)
            return DeliveryOutcome.sent(payload.get("messageId"))

        if not isinstance(payload, dict):
            payload = {}
        error_message = payload.get("errorMessage") or f"HTTP {response.status_code}"
        logger.error("KakaoTalk gateway rejected the message: %s", error_message)
        return DeliveryOutcome.failed(payload.get("errorCode") or "GATEWAY_REJECTED", error_message)

    def check_status(self) -> ChannelStatus:
        if self.simulated:
            return ChannelStatus(
                channel=self.channel,
                success=True,
                simulation=True,
                detail="Running in simulation mode outside production",
            )
        return ChannelStatus(
            channel=self.channel,
            success=True,
            simulation=False,
            info={"base_url": self._config.base_url},
        )


__all__ = ["KAKAO_SIMULATION", "SEND_PATH", "KakaoConfig", "KakaoChannel"]
