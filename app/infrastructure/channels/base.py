"""Base channel adapter interface and simulation helpers."""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    Recipient,
    RenderedMessage,
)
from app.domain.errors import NotificationError, ValidationFailure

logger = logging.getLogger(__name__)

CONTACT_EMAIL = "email"
CONTACT_PHONE = "phone"

SIMULATION_ERROR = "SIMULATION_ERROR"
TRANSPORT_ERROR = "TRANSPORT_FAILURE"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

PREVIEW_RULE = "─" * 50


@dataclass(frozen=True)
class ChannelDescriptor:
    """Static facts about a channel: its identity and the contact it needs."""

    channel: Channel
    required_contact: str | None = None
    label: str = ""


@dataclass(frozen=True)
class ChannelStatus:
    """Answer of :meth:`ChannelAdapter.check_status`."""

    channel: Channel
    success: bool
    simulation: bool
    detail: str | None = None
    info: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SimulationConfig:
    """Behaviour of a channel while it runs without live credentials.

    ``rng`` and ``sleep`` are injectable so simulated outcomes and latency can
    be made deterministic.
    """

    success_rate: float
    delay_seconds: float
    message_id_prefix: str
    rng: random.Random = field(default_factory=random.Random, compare=False)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def scaled(self, factor: float) -> "SimulationConfig":
        return SimulationConfig(
            success_rate=self.success_rate,
            delay_seconds=self.delay_seconds * factor,
            message_id_prefix=self.message_id_prefix,
            rng=self.rng,
            sleep=self.sleep,
        )


def simulate_delivery(simulation: SimulationConfig, *, channel_label: str) -> DeliveryOutcome:
    """Sleep for the configured latency and draw a simulated outcome."""

    succeeded = simulation.rng.random() < simulation.success_rate
    if simulation.delay_seconds > 0:
        simulation.sleep(simulation.delay_seconds)

    if succeeded:
        message_id = f"{simulation.message_id_prefix}_{int(time.time() * 1000)}"
        logger.info("%s simulated delivery succeeded (%s)", channel_label, message_id)
        return DeliveryOutcome.sent(message_id, simulated=True)

    logger.info("%s simulated delivery failed", channel_label)
    return DeliveryOutcome.failed(
        SIMULATION_ERROR, "Simulated delivery failure", simulated=True
    )


def log_preview(channel_label: str, header: dict[str, object], body: str) -> None:
    """Log the message a simulated channel would have sent."""

    details = "\n".join(f"{key}: {value}" for key, value in header.items())
    logger.info(
        "%s simulation preview\n%s\n%s\n%s\n%s",
        channel_label,
        details,
        PREVIEW_RULE,
        body,
        PREVIEW_RULE,
    )


class ChannelAdapter(ABC):
    """Common capability of the four delivery channels.

    Subclasses implement :meth:`_deliver`; :meth:`send` wraps it so transport
    and library errors come back as a failed :class:`DeliveryOutcome` instead
    of propagating into the orchestrator's fan-out.
    """

    descriptor: ClassVar[ChannelDescriptor]

    @property
    def channel(self) -> Channel:
        return self.descriptor.channel

    @property
    def label(self) -> str:
        return self.descriptor.label or self.descriptor.channel.value

    @property
    def simulated(self) -> bool:
        return False

    def contact_for(self, recipient: Recipient) -> str | None:
        return recipient.contact(self.descriptor.required_contact)

    def ensure_ready(self, recipient: Recipient) -> None:
        """Raise when this channel cannot be attempted for ``recipient``.

        Raises:
            ValidationFailure: the recipient lacks the required contact field.
        """

        required = self.descriptor.required_contact
        if required is not None and self.contact_for(recipient) is None:
            raise ValidationFailure(
                f"Recipient {recipient.id} has no {required} for the {self.label} channel"
            )

    def send(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        """Deliver ``message`` to ``recipient``; never raises."""

        try:
            return self._deliver(recipient, message, correlation)
        except NotificationError as exc:
            logger.warning("%s delivery to %s failed: %s", self.label, recipient.id, exc)
            return DeliveryOutcome.failed(exc.error_code, str(exc))
        except httpx.HTTPError as exc:
            logger.error("%s gateway request failed: %s", self.label, exc)
            return DeliveryOutcome.failed(TRANSPORT_ERROR, f"{type(exc).__name__}: {exc}")
        except Exception as exc:  # noqa: BLE001 - adapters report every failure as an outcome
            logger.exception("Unexpected error while sending via %s", self.label)
            return DeliveryOutcome.failed(UNEXPECTED_ERROR, str(exc) or type(exc).__name__)

    @abstractmethod
    def _deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
    ) -> DeliveryOutcome:
        """Perform the delivery; may raise, :meth:`send` converts errors."""

    @abstractmethod
    def check_status(self) -> ChannelStatus:
        """Report whether the channel is configured and reachable."""


__all__ = [
    "CONTACT_EMAIL",
    "CONTACT_PHONE",
    "SIMULATION_ERROR",
    "TRANSPORT_ERROR",
    "UNEXPECTED_ERROR",
    "ChannelDescriptor",
    "ChannelStatus",
    "SimulationConfig",
    "simulate_delivery",
    "log_preview",
    "ChannelAdapter",
]
