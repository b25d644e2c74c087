"""Display labels shared by templates and channel-specific message formats."""

from __future__ import annotations

IMPORTANCE_URGENT = "urgent"
IMPORTANCE_HIGH = "high"
IMPORTANCE_NORMAL = "normal"

_IMPORTANCE_LABELS: dict[str, tuple[str, str]] = {
    IMPORTANCE_URGENT: ("🚨", "Urgent"),
    IMPORTANCE_HIGH: ("⚡", "High"),
}
_DEFAULT_IMPORTANCE = ("📋", "Normal")

_STATUS_LABELS: dict[str, tuple[str, str]] = {
    "operations_submitted": ("📋", "Requested"),
    "ecount_registered": ("📝", "ECOUNT registered"),
    "po_completed": ("📋", "Purchase order completed"),
    "warehouse_received": ("📦", "Received at warehouse"),
    "branch_dispatched": ("🚚", "Dispatched to branch"),
    "branch_received_confirmed": ("✅", "Receipt confirmed"),
    "completed": ("✅", "Completed"),
}

LEVEL_ICONS: dict[str, str] = {
    "info": "ℹ️",
    "warning": "⚠️",
    "error": "🚨",
}


def importance_icon(importance: str | None) -> str:
    return _IMPORTANCE_LABELS.get((importance or "").lower(), _DEFAULT_IMPORTANCE)[0]


def importance_text(importance: str | None) -> str:
    return _IMPORTANCE_LABELS.get((importance or "").lower(), _DEFAULT_IMPORTANCE)[1]


def importance_label(importance: str | None) -> str:
    """Return the icon and text shown for a request importance (``🚨 Urgent``)."""

    return f"{importance_icon(importance)} {importance_text(importance)}"


def status_icon(status: str | None) -> str:
    return _STATUS_LABELS.get(status or "", ("📋", ""))[0]


def status_text(status: str | None) -> str:
    """Return the human readable name of a workflow status, or the raw value."""

    label = _STATUS_LABELS.get(status or "")
    return label[1] if label else (status or "")


def level_icon(level: str | None) -> str:
    return LEVEL_ICONS.get((level or "info").lower(), LEVEL_ICONS["info"])


__all__ = [
    "IMPORTANCE_URGENT",
    "IMPORTANCE_HIGH",
    "IMPORTANCE_NORMAL",
    "LEVEL_ICONS",
    "importance_icon",
    "importance_text",
    "importance_label",
    "status_icon",
    "status_text",
    "level_icon",
]
