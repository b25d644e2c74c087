"""Domain entity representing a message template from the fixed catalog."""

from __future__ import annotations

from dataclasses import dataclass

from .notification_type import NotificationType


@dataclass(frozen=True)
class NotificationTemplate:
    """Message body with ``{{variable}}`` placeholders and its audience."""

    id: str
    name: str
    body: str
    variables: tuple[str, ...]
    target_role: str
    trigger_event: NotificationType


__all__ = ["NotificationTemplate"]
