"""Repository implementations for infrastructure layer."""

from .user_repository import UserRepository
from .notification_settings_repository import NotificationSettingsRepository
from .notification_repository import DeliveryAttemptRepository

__all__ = [
    "UserRepository",
    "NotificationSettingsRepository",
    "DeliveryAttemptRepository",
]
