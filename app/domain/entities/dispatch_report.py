"""Domain entities summarising the outcome of an event fan-out."""

from __future__ import annotations

from dataclasses import dataclass, field

from .delivery_attempt import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_SENT,
    DeliveryAttempt,
)
from .notification_type import Channel


@dataclass
class ChannelSummary:
    """Per-channel counters; a dispatch has no single pass/fail verdict."""

    attempted: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class DispatchReport:
    """What happened when one business event was dispatched."""

    event_type: str
    template_id: str | None
    recipients_considered: int = 0
    recipients_skipped: int = 0
    attempts: list[DeliveryAttempt] = field(default_factory=list)
    channels: dict[str, ChannelSummary] = field(
        default_factory=lambda: {channel.value: ChannelSummary() for channel in Channel}
    )
    aborted: bool = False
    error: str | None = None

    def summary_for(self, channel: Channel) -> ChannelSummary:
        return self.channels.setdefault(Channel(channel).value, ChannelSummary())

    def record_skip(self, channel: Channel) -> None:
        self.summary_for(channel).skipped += 1

    def record_attempt(self, attempt: DeliveryAttempt) -> None:
        self.attempts.append(attempt)
        summary = self.summary_for(Channel(attempt.channel))
        summary.attempted += 1
        if attempt.status == DELIVERY_STATUS_SENT:
            summary.sent += 1
        elif attempt.status == DELIVERY_STATUS_FAILED:
            summary.failed += 1

    def attempts_for(self, channel: Channel) -> list[DeliveryAttempt]:
        value = Channel(channel).value
        return [attempt for attempt in self.attempts if attempt.channel == value]


__all__ = ["ChannelSummary", "DispatchReport"]
