"""Vocabulary shared by notification events, channels and recipients."""

from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    """Business trigger categories that drive template and policy selection."""

    PURCHASE_REQUEST_CREATED = "purchase_request_created"
    ECOUNT_REGISTRATION_NEEDED = "ecount_registration_needed"
    PURCHASE_ORDER_COMPLETED = "purchase_order_completed"
    WAREHOUSE_RECEIVED = "warehouse_received"
    BRANCH_DISPATCH_READY = "branch_dispatch_ready"
    URGENT_REQUEST = "urgent_request"
    OVERDUE_REQUEST = "overdue_request"
    SYSTEM_MAINTENANCE = "system_maintenance"

    @property
    def is_urgent(self) -> bool:
        return self is NotificationType.URGENT_REQUEST

    @property
    def is_status_change(self) -> bool:
        return self in _STATUS_CHANGE_TYPES


_STATUS_CHANGE_TYPES = frozenset(
    {
        NotificationType.ECOUNT_REGISTRATION_NEEDED,
        NotificationType.PURCHASE_ORDER_COMPLETED,
        NotificationType.WAREHOUSE_RECEIVED,
        NotificationType.BRANCH_DISPATCH_READY,
    }
)


class Channel(str, Enum):
    """Delivery transports available to the orchestrator."""

    PUSH = "push"
    CHAT_BOT = "chat_bot"
    EMAIL = "email"
    PAID_GATEWAY = "paid_gateway"


ROLE_OPERATIONS = "operations"
ROLE_LOGISTICS = "logistics"
ROLE_ADMIN = "admin"
ROLE_ALL = "all"

RECIPIENT_ROLES = (ROLE_OPERATIONS, ROLE_LOGISTICS, ROLE_ADMIN)

RELATED_ENTITY_PURCHASE_REQUEST = "purchase_request"
RELATED_ENTITY_PART = "part"
RELATED_ENTITY_USER = "user"
RELATED_ENTITY_BRANCH = "branch"

RELATED_ENTITY_TYPES = (
    RELATED_ENTITY_PURCHASE_REQUEST,
    RELATED_ENTITY_PART,
    RELATED_ENTITY_USER,
    RELATED_ENTITY_BRANCH,
)


__all__ = [
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
]
