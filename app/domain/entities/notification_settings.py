"""Domain entity holding a user's notification preferences."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time

from .notification_type import ROLE_LOGISTICS, ROLE_OPERATIONS, Channel, NotificationType

DEFAULT_QUIET_HOURS_START = time(22, 0)
DEFAULT_QUIET_HOURS_END = time(8, 0)


def _default_type_toggles() -> dict[str, bool]:
    return {notification_type.value: True for notification_type in NotificationType}


def _default_channel_toggles() -> dict[str, bool]:
    return {channel.value: True for channel in Channel}


@dataclass
class QuietHours:
    """Daily window during which non-urgent notifications are held back."""

    enabled: bool = False
    start: time = DEFAULT_QUIET_HOURS_START
    end: time = DEFAULT_QUIET_HOURS_END


@dataclass
class RoleBasedFiltering:
    """Role scoping flags applied on top of the per-type toggles."""

    enabled: bool = False
    operations_receive_all: bool = False
    logistics_receive_all: bool = False


@dataclass
class RecipientSettings:
    """Per-user channel toggles, type toggles, quiet hours and role scoping.

    Missing keys in ``channels`` or ``notification_types`` count as enabled:
    only an explicit ``False`` switches a channel or an event type off.
    """

    user_id: int
    channels: dict[str, bool] = field(default_factory=_default_channel_toggles)
    notification_types: dict[str, bool] = field(default_factory=_default_type_toggles)
    only_my_requests: bool = False
    all_requests_in_my_department: bool = False
    quiet_hours: QuietHours = field(default_factory=QuietHours)
    role_based_filtering: RoleBasedFiltering = field(default_factory=RoleBasedFiltering)
    id: int | None = None

    def channel_enabled(self, channel: Channel) -> bool:
        return self.channels.get(Channel(channel).value) is not False

    def type_enabled(self, notification_type: NotificationType) -> bool:
        return self.notification_types.get(NotificationType(notification_type).value) is not False

    @classmethod
    def defaults_for(cls, user_id: int, role: str | None) -> "RecipientSettings":
        """Return the settings a user starts with before editing anything."""

        is_operations = role == ROLE_OPERATIONS
        return cls(
            user_id=user_id,
            all_requests_in_my_department=is_operations,
            role_based_filtering=RoleBasedFiltering(
                enabled=is_operations,
                operations_receive_all=is_operations,
                logistics_receive_all=role == ROLE_LOGISTICS,
            ),
        )


__all__ = [
    "DEFAULT_QUIET_HOURS_START",
    "DEFAULT_QUIET_HOURS_END",
    "QuietHours",
    "RoleBasedFiltering",
    "RecipientSettings",
]
