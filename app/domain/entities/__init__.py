"""Domain entities exposed by the application."""

from .delivery_attempt import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_PENDING,
    DELIVERY_STATUS_SENT,
    DELIVERY_TERMINAL_STATUSES,
    DeliveryAttempt,
    DeliveryOutcome,
)
from .dispatch_report import ChannelSummary, DispatchReport
from .message import Correlation, RenderedMessage
from .notification_settings import QuietHours, RecipientSettings, RoleBasedFiltering
from .notification_template import NotificationTemplate
from .notification_type import (
    RECIPIENT_ROLES,
    RELATED_ENTITY_BRANCH,
    RELATED_ENTITY_PART,
    RELATED_ENTITY_PURCHASE_REQUEST,
    RELATED_ENTITY_TYPES,
    RELATED_ENTITY_USER,
    ROLE_ADMIN,
    ROLE_ALL,
    ROLE_LOGISTICS,
    ROLE_OPERATIONS,
    Channel,
    NotificationType,
)
from .recipient import Recipient, Requester

__all__ = [
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DELIVERY_STATUS_PENDING",
    "DELIVERY_STATUS_SENT",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_TERMINAL_STATUSES",
    "ChannelSummary",
    "DispatchReport",
    "Correlation",
    "RenderedMessage",
    "QuietHours",
    "RecipientSettings",
    "RoleBasedFiltering",
    "NotificationTemplate",
    "NotificationType",
    "Channel",
    "ROLE_OPERATIONS",
    "ROLE_LOGISTICS",
    "ROLE_ADMIN",
    "ROLE_ALL",
    "RECIPIENT_ROLES",
    "RELATED_ENTITY_PURCHASE_REQUEST",
    "RELATED_ENTITY_PART",
    "RELATED_ENTITY_USER",
    "RELATED_ENTITY_BRANCH",
    "RELATED_ENTITY_TYPES",
    "Recipient",
    "Requester",
]
