"""Build the template variables sent with each purchase-request event."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities import NotificationType
from app.domain.labels import (
    importance_icon,
    importance_label,
    importance_text,
    level_icon,
    status_icon,
    status_text,
)
from app.domain.templates import (
    TEMPLATE_BRANCH_DISPATCH_READY,
    TEMPLATE_ECOUNT_REGISTRATION_NEEDED,
    TEMPLATE_PURCHASE_ORDER_COMPLETED,
    TEMPLATE_WAREHOUSE_RECEIVED,
)
from app.utils import format_display_date

DEFAULT_REQUESTER_NAME = "Requester"
DEFAULT_EXPECTED_DATE = "To be confirmed"
DEFAULT_QUANTITY = "-"
DEFAULT_BRANCH_NAME = "-"


@dataclass(frozen=True)
class StatusRoute:
    """Template used to announce a purchase request entering a status."""

    event_type: NotificationType
    template_id: str


STATUS_ROUTES: dict[str, StatusRoute] = {
    "ecount_registered": StatusRoute(
        NotificationType.ECOUNT_REGISTRATION_NEEDED, TEMPLATE_ECOUNT_REGISTRATION_NEEDED
    ),
    "po_completed": StatusRoute(
        NotificationType.PURCHASE_ORDER_COMPLETED, TEMPLATE_PURCHASE_ORDER_COMPLETED
    ),
    "warehouse_received": StatusRoute(
        NotificationType.WAREHOUSE_RECEIVED, TEMPLATE_WAREHOUSE_RECEIVED
    ),
    "branch_dispatched": StatusRoute(
        NotificationType.BRANCH_DISPATCH_READY, TEMPLATE_BRANCH_DISPATCH_READY
    ),
}


def request_url(base_url: str, request_id: str) -> str:
    return f"{base_url.rstrip('/')}/purchase-requests/{request_id}"


def request_created_variables(
    *,
    base_url: str,
    request_id: str,
    requester_name: str,
    part_name: str,
    importance: str,
    now: datetime,
) -> dict[str, str]:
    return {
        "requestId": request_id,
        "requestorName": requester_name,
        "partName": part_name,
        "requestDate": format_display_date(now),
        "importance": importance_label(importance),
        "importanceLevel": (importance or "").lower(),
        "importanceIcon": importance_icon(importance),
        "importanceText": importance_text(importance),
        "actionUrl": request_url(base_url, request_id),
    }


def urgent_request_variables(
    *,
    base_url: str,
    request_id: str,
    requester_name: str,
    requester_phone: str,
    part_name: str,
    urgent_reason: str,
    now: datetime,
) -> dict[str, str]:
    return {
        "requestId": request_id,
        "partName": part_name,
        "requestorName": requester_name,
        "requestorPhone": requester_phone or "",
        "urgentReason": urgent_reason,
        "requestedAt": format_display_date(now, with_time=True),
        "actionUrl": request_url(base_url, request_id),
    }


def status_change_variables(
    *,
    base_url: str,
    request_id: str,
    new_status: str,
    part_name: str,
    now: datetime,
    requester_name: str | None = None,
    quantity: int | str | None = None,
    branch_name: str | None = None,
    expected_date: datetime | str | None = None,
) -> dict[str, str]:
    """Return the variables of a status change.

    Every status template draws from the same map, so values a caller does
    not know are filled with neutral placeholders.
    """

    if isinstance(expected_date, datetime):
        expected = format_display_date(expected_date)
    else:
        expected = expected_date or DEFAULT_EXPECTED_DATE

    return {
        "requestId": request_id,
        "partName": part_name,
        "requestorName": requester_name or DEFAULT_REQUESTER_NAME,
        "newStatus": new_status,
        "statusLabel": status_text(new_status),
        "statusIcon": status_icon(new_status),
        "expectedDate": expected,
        "quantity": DEFAULT_QUANTITY if quantity is None else str(quantity),
        "branchName": branch_name or DEFAULT_BRANCH_NAME,
        "changedAt": format_display_date(now, with_time=True),
        "actionUrl": request_url(base_url, request_id),
    }


def overdue_request_variables(
    *,
    base_url: str,
    request_id: str,
    part_name: str,
    request_date: datetime,
    overdue_days: int,
    current_status: str,
    now: datetime,
) -> dict[str, str]:
    return {
        "requestId": request_id,
        "partName": part_name,
        "requestDate": format_display_date(request_date),
        "overdueDays": str(overdue_days),
        "currentStatus": status_text(current_status),
        "checkedOn": format_display_date(now),
        "actionUrl": request_url(base_url, request_id),
    }


def system_message_variables(
    *, title: str, message: str, level: str, now: datetime
) -> dict[str, str]:
    return {
        "title": title,
        "message": message,
        "level": (level or "info").lower(),
        "levelIcon": level_icon(level),
        "sentAt": format_display_date(now, with_time=True),
    }


__all__ = [
    "STATUS_ROUTES",
    "StatusRoute",
    "request_url",
    "request_created_variables",
    "urgent_request_variables",
    "status_change_variables",
    "overdue_request_variables",
    "system_message_variables",
]
