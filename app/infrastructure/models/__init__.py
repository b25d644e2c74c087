"""ORM models used by the application infrastructure."""

from .user import UserModel
from .notification_settings import NotificationSettingsModel
from .notification import DeliveryAttemptModel

__all__ = [
    "UserModel",
    "NotificationSettingsModel",
    "DeliveryAttemptModel",
]
