"""Look up who should be considered for a notification and their settings."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import ROLE_ALL, Recipient, RecipientSettings
from app.domain.errors import RecipientLookupError
from app.infrastructure.repositories import NotificationSettingsRepository, UserRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


class RecipientResolver:
    """Return active users, freshly read for every dispatch.

    Users without a phone number or e-mail are returned as well; deciding which
    channels can reach them is left to the orchestrator.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def resolve_by_role(self, role: str) -> Sequence[Recipient]:
        if role == ROLE_ALL:
            return self.resolve_all_active()
        return self._query(lambda repository: repository.list_active_by_role(role))

    def resolve_all_active(self) -> Sequence[Recipient]:
        return self._query(lambda repository: repository.list_active())

    def _query(
        self, reader: Callable[[UserRepository], Sequence[Recipient]]
    ) -> Sequence[Recipient]:
        try:
            with self._session_factory() as session:
                return list(reader(UserRepository(session)))
        except SQLAlchemyError as exc:
            raise RecipientLookupError(f"Could not load recipients: {exc}") from exc


class RecipientSettingsReader:
    """Read-only access to stored notification settings."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, user_id: int) -> RecipientSettings | None:
        """Return the stored settings or ``None``; lookup errors count as absent."""

        try:
            with self._session_factory() as session:
                return NotificationSettingsRepository(session).get(user_id)
        except SQLAlchemyError:
            logger.exception("Failed to load notification settings for user %s", user_id)
            return None


__all__ = ["SessionFactory", "RecipientResolver", "RecipientSettingsReader"]
