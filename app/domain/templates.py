"""Fixed catalog of notification templates and the renderer that fills them."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from app.domain.entities import (
    ROLE_ALL,
    NotificationTemplate,
    NotificationType,
    RenderedMessage,
)
from app.domain.errors import MissingTemplate, MissingVariable

SYSTEM_SIGNATURE = "[Parts Management]"

TEMPLATE_PURCHASE_REQUEST_CREATED = "purchase_request_created"
TEMPLATE_ECOUNT_REGISTRATION_NEEDED = "ecount_registration_needed"
TEMPLATE_PURCHASE_ORDER_COMPLETED = "purchase_order_completed"
TEMPLATE_WAREHOUSE_RECEIVED = "warehouse_received"
TEMPLATE_BRANCH_DISPATCH_READY = "branch_dispatch_ready"
TEMPLATE_URGENT_REQUEST_ALERT = "urgent_request_alert"
TEMPLATE_OVERDUE_REQUEST_WARNING = "overdue_request_warning"
TEMPLATE_SYSTEM_MAINTENANCE_NOTICE = "system_maintenance_notice"


NOTIFICATION_TEMPLATES: tuple[NotificationTemplate, ...] = (
    NotificationTemplate(
        id=TEMPLATE_PURCHASE_REQUEST_CREATED,
        name="Purchase request created",
        body=(
            f"{SYSTEM_SIGNATURE} A new purchase request has been registered.\n"
            "\n"
            "📋 Requester: {{requestorName}}\n"
            "🔧 Part: {{partName}}\n"
            "📅 Requested on: {{requestDate}}\n"
            "⚡ Importance: {{importance}}\n"
            "\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("requestorName", "partName", "requestDate", "importance", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.PURCHASE_REQUEST_CREATED,
    ),
    NotificationTemplate(
        id=TEMPLATE_ECOUNT_REGISTRATION_NEEDED,
        name="ECOUNT registration needed",
        body=(
            f"{SYSTEM_SIGNATURE} The request must be registered in ECOUNT.\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "📋 Request no.: {{requestId}}\n"
            "👤 Requester: {{requestorName}}\n"
            "\n"
            "⏰ Please handle it promptly.\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("partName", "requestId", "requestorName", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.ECOUNT_REGISTRATION_NEEDED,
    ),
    NotificationTemplate(
        id=TEMPLATE_PURCHASE_ORDER_COMPLETED,
        name="Purchase order completed",
        body=(
            f"{SYSTEM_SIGNATURE} The purchase order has been placed.\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "📋 Request no.: {{requestId}}\n"
            "📅 Expected arrival: {{expectedDate}}\n"
            "\n"
            "✅ Purchase order completed."
        ),
        variables=("partName", "requestId", "expectedDate"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.PURCHASE_ORDER_COMPLETED,
    ),
    NotificationTemplate(
        id=TEMPLATE_WAREHOUSE_RECEIVED,
        name="Warehouse received",
        body=(
            f"{SYSTEM_SIGNATURE} The part has arrived at the warehouse.\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "📋 Request no.: {{requestId}}\n"
            "📦 Quantity received: {{quantity}}\n"
            "\n"
            "👉 Please prepare the branch dispatch.\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("partName", "requestId", "quantity", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.WAREHOUSE_RECEIVED,
    ),
    NotificationTemplate(
        id=TEMPLATE_BRANCH_DISPATCH_READY,
        name="Branch dispatch ready",
        body=(
            f"{SYSTEM_SIGNATURE} The branch dispatch is ready.\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "🏪 Branch: {{branchName}}\n"
            "📦 Quantity: {{quantity}}\n"
            "\n"
            "👉 Please complete the dispatch.\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("partName", "branchName", "quantity", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.BRANCH_DISPATCH_READY,
    ),
    NotificationTemplate(
        id=TEMPLATE_URGENT_REQUEST_ALERT,
        name="Urgent request alert",
        body=(
            f"🚨 [URGENT] {SYSTEM_SIGNATURE} urgent request\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "👤 Requester: {{requestorName}}\n"
            "📞 Contact: {{requestorPhone}}\n"
            "📋 Reason: {{urgentReason}}\n"
            "\n"
            "⚡ Please handle it immediately!\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("partName", "requestorName", "requestorPhone", "urgentReason", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.URGENT_REQUEST,
    ),
    NotificationTemplate(
        id=TEMPLATE_OVERDUE_REQUEST_WARNING,
        name="Overdue request warning",
        body=(
            f"⚠️ [OVERDUE] {SYSTEM_SIGNATURE} processing delayed\n"
            "\n"
            "🔧 Part: {{partName}}\n"
            "📅 Requested on: {{requestDate}}\n"
            "⏰ Days overdue: {{overdueDays}}\n"
            "\n"
            "📋 Current status: {{currentStatus}}\n"
            "👉 Please handle it immediately.\n"
            "👉 Handle it: {{actionUrl}}"
        ),
        variables=("partName", "requestDate", "overdueDays", "currentStatus", "actionUrl"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.OVERDUE_REQUEST,
    ),
    NotificationTemplate(
        id=TEMPLATE_SYSTEM_MAINTENANCE_NOTICE,
        name="System notice",
        body=(
            f"{SYSTEM_SIGNATURE} {{{{title}}}}\n"
            "\n"
            "{{message}}"
        ),
        variables=("title", "message"),
        target_role=ROLE_ALL,
        trigger_event=NotificationType.SYSTEM_MAINTENANCE,
    ),
)


PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


class TemplateCatalog:
    """Read-only registry of :class:`NotificationTemplate` objects."""

    def __init__(self, templates: tuple[NotificationTemplate, ...] = NOTIFICATION_TEMPLATES) -> None:
        self._templates: Mapping[str, NotificationTemplate] = MappingProxyType(
            {template.id: template for template in templates}
        )

    def __iter__(self) -> Iterator[NotificationTemplate]:
        return iter(self._templates.values())

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def get(self, template_id: str) -> NotificationTemplate:
        """Return the template registered under ``template_id``."""

        template = self._templates.get(template_id)
        if template is None:
            raise MissingTemplate(template_id)
        return template

    def for_event(self, event_type: NotificationType) -> NotificationTemplate:
        """Return the template triggered by ``event_type``."""

        for template in self._templates.values():
            if template.trigger_event == event_type:
                return template
        raise MissingTemplate(NotificationType(event_type).value)

    def render(
        self,
        template_id: str,
        variables: Mapping[str, object],
        *,
        action_url: str | None = None,
    ) -> RenderedMessage:
        """Substitute every ``{{name}}`` placeholder of the template.

        Every variable declared by the template or referenced by a placeholder
        in its body must be supplied; extra variables are carried along in the
        result but otherwise ignored.
        Substitution is a single pass, so values are never expanded again.
        """

        template = self.get(template_id)
        values = {key: "" if value is None else str(value) for key, value in variables.items()}
        required = dict.fromkeys((*template.variables, *PLACEHOLDER_PATTERN.findall(template.body)))
        missing = [name for name in required if name not in values]
        if missing:
            raise MissingVariable(template.id, missing)

        text = PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], template.body)

        return RenderedMessage(
            template_id=template.id,
            event_type=template.trigger_event,
            text=text,
            variables=values,
            action_url=action_url if action_url is not None else values.get("actionUrl"),
        )


default_catalog = TemplateCatalog()


def render_template(template_id: str, variables: Mapping[str, object]) -> RenderedMessage:
    """Public helper that delegates to the shared catalog instance."""

    return default_catalog.render(template_id, variables)


__all__ = [
    "NOTIFICATION_TEMPLATES",
    "TEMPLATE_PURCHASE_REQUEST_CREATED",
    "TEMPLATE_ECOUNT_REGISTRATION_NEEDED",
    "TEMPLATE_PURCHASE_ORDER_COMPLETED",
    "TEMPLATE_WAREHOUSE_RECEIVED",
    "TEMPLATE_BRANCH_DISPATCH_READY",
    "TEMPLATE_URGENT_REQUEST_ALERT",
    "TEMPLATE_OVERDUE_REQUEST_WARNING",
    "TEMPLATE_SYSTEM_MAINTENANCE_NOTICE",
    "TemplateCatalog",
    "default_catalog",
    "render_template",
]
