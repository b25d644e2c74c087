"""Use cases for maintaining the people who receive notifications."""

from sqlalchemy.orm import Session

from app.domain.entities import RECIPIENT_ROLES, Recipient
from app.infrastructure.repositories import (
    NotificationSettingsRepository,
    UserRepository,
)


def register_recipient(
    session: Session,
    *,
    name: str,
    role: str,
    email: str | None = None,
    phone: str | None = None,
    department: str | None = None,
) -> Recipient:
    """Create an active recipient together with the default settings of its role."""

    name = (name or "").strip()
    if not name:
        raise ValueError("Recipient name is required")

    role = (role or "").strip().lower()
    if role not in RECIPIENT_ROLES:
        allowed = ", ".join(RECIPIENT_ROLES)
        raise ValueError(f"Role must be one of: {allowed}")

    recipient = UserRepository(session).create(
        name=name,
        role=role,
        email=(email or "").strip() or None,
        phone=(phone or "").strip() or None,
        department=(department or "").strip() or None,
    )
    NotificationSettingsRepository(session).get_or_create(recipient.id, role=role)
    return recipient


def deactivate_recipient(session: Session, user_id: int) -> None:
    """Stop resolving ``user_id`` as a recipient; their history is kept."""

    UserRepository(session).set_active(user_id, False)
