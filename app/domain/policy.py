"""Delivery policy: decide whether a recipient should hear about an event.

The rules are evaluated in a fixed order and stop at the first refusal:

1. no stored settings means the recipient receives everything;
2. quiet hours hold back every event except urgent requests;
3. an event type switched off explicitly is never delivered;
4. role based filtering scopes logistics and operations users;
5. anything left is delivered.

Channel toggles are not part of this decision; they are checked per channel
by the orchestrator.
"""

from __future__ import annotations

from datetime import datetime, time

from app.domain.entities import (
    ROLE_LOGISTICS,
    ROLE_OPERATIONS,
    Channel,
    NotificationType,
    QuietHours,
    Recipient,
    RecipientSettings,
)
from app.utils import ensure_app_timezone, now_in_app_timezone


def _minute_of(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def is_within_quiet_hours(quiet_hours: QuietHours | None, now: datetime | time | None = None) -> bool:
    """Return ``True`` when ``now`` falls inside the quiet hours window.

    Both window boundaries are inclusive. A window whose start is not before
    its end wraps midnight (``22:00``-``08:00`` covers ``23:30`` and
    ``07:00``). Comparison happens at minute precision.
    """

    if quiet_hours is None or not quiet_hours.enabled:
        return False

    if now is None:
        now = now_in_app_timezone()
    if isinstance(now, datetime):
        now = (ensure_app_timezone(now) or now).time()

    current = _minute_of(now)
    start = _minute_of(quiet_hours.start)
    end = _minute_of(quiet_hours.end)

    if start < end:
        return start <= current <= end
    return current >= start or current <= end


def should_deliver(
    recipient: Recipient,
    settings: RecipientSettings | None,
    event_type: NotificationType,
    triggering_user_id: int | None = None,
    *,
    now: datetime | time | None = None,
) -> bool:
    """Return whether ``recipient`` should receive ``event_type`` at all."""

    if settings is None:
        return True

    event_type = NotificationType(event_type)

    if not event_type.is_urgent and is_within_quiet_hours(settings.quiet_hours, now):
        return False

    if not settings.type_enabled(event_type):
        return False

    filtering = settings.role_based_filtering
    if filtering is not None and filtering.enabled:
        if recipient.role == ROLE_LOGISTICS:
            return filtering.logistics_receive_all

        if recipient.role == ROLE_OPERATIONS and not filtering.operations_receive_all:
            if settings.only_my_requests and triggering_user_id != recipient.id:
                return False
            # The requester's department is not compared yet; the flag alone allows.
            if settings.all_requests_in_my_department:
                return True

    return True


def channel_enabled(settings: RecipientSettings | None, channel: Channel) -> bool:
    """Return whether the recipient keeps ``channel`` switched on."""

    if settings is None:
        return True
    return settings.channel_enabled(channel)


__all__ = ["is_within_quiet_hours", "should_deliver", "channel_enabled"]
