"""Domain entities passed from the orchestrator to channel adapters."""

from __future__ import annotations

from dataclasses import dataclass, field

from .notification_type import NotificationType


@dataclass(frozen=True)
class RenderedMessage:
    """Template text with its variables substituted.

    ``variables`` keeps every value supplied for the event, including the ones
    the template itself does not reference, so transports that format their own
    payload (push, chat-bot, e-mail) can use them.
    """

    template_id: str
    event_type: NotificationType
    text: str
    variables: dict[str, str] = field(default_factory=dict)
    action_url: str | None = None

    @property
    def urgent(self) -> bool:
        return self.event_type.is_urgent


@dataclass(frozen=True)
class Correlation:
    """Link between a delivery and the business object that triggered it."""

    related_entity_type: str
    related_entity_id: str
    triggering_user_id: int | None = None


__all__ = ["RenderedMessage", "Correlation"]
