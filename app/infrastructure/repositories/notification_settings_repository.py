"""Persistence helpers for per-user notification settings."""

from __future__ import annotations

from datetime import time

from sqlalchemy.orm import Session

from app.domain.entities import QuietHours, RecipientSettings, RoleBasedFiltering
from app.infrastructure.models import NotificationSettingsModel
from app.utils import parse_time_of_day


class NotificationSettingsRepository:
    """Load and store :class:`RecipientSettings` rows keyed by user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> RecipientSettings | None:
        model = self._get_model(user_id)
        return self._to_entity(model) if model else None

    def get_or_create(self, user_id: int, *, role: str | None) -> RecipientSettings:
        """Return stored settings, creating the role defaults on first access."""

        existing = self.get(user_id)
        if existing is not None:
            return existing
        return self.save(RecipientSettings.defaults_for(user_id, role))

    def save(self, settings: RecipientSettings) -> RecipientSettings:
        model = self._get_model(settings.user_id) or NotificationSettingsModel(
            user_id=settings.user_id
        )
        self._apply_entity_to_model(model, settings)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _get_model(self, user_id: int) -> NotificationSettingsModel | None:
        return (
            self.session.query(NotificationSettingsModel)
            .filter(NotificationSettingsModel.user_id == user_id)
            .first()
        )

    @staticmethod
    def _format_time(value: time) -> str:
        return f"{value.hour:02d}:{value.minute:02d}"

    @classmethod
    def _apply_entity_to_model(
        cls, model: NotificationSettingsModel, settings: RecipientSettings
    ) -> None:
        model.channels = dict(settings.channels)
        model.notification_types = dict(settings.notification_types)
        model.only_my_requests = settings.only_my_requests
        model.all_requests_in_my_department = settings.all_requests_in_my_department
        model.quiet_hours_enabled = settings.quiet_hours.enabled
        model.quiet_hours_start = cls._format_time(settings.quiet_hours.start)
        model.quiet_hours_end = cls._format_time(settings.quiet_hours.end)
        model.role_filtering_enabled = settings.role_based_filtering.enabled
        model.operations_receive_all = settings.role_based_filtering.operations_receive_all
        model.logistics_receive_all = settings.role_based_filtering.logistics_receive_all

    @staticmethod
    def _to_entity(model: NotificationSettingsModel) -> RecipientSettings:
        return RecipientSettings(
            id=model.id,
            user_id=model.user_id,
            channels=dict(model.channels or {}),
            notification_types=dict(model.notification_types or {}),
            only_my_requests=bool(model.only_my_requests),
            all_requests_in_my_department=bool(model.all_requests_in_my_department),
            quiet_hours=QuietHours(
                enabled=bool(model.quiet_hours_enabled),
                start=parse_time_of_day(model.quiet_hours_start or "22:00"),
                end=parse_time_of_day(model.quiet_hours_end or "08:00"),
            ),
            role_based_filtering=RoleBasedFiltering(
                enabled=bool(model.role_filtering_enabled),
                operations_receive_all=bool(model.operations_receive_all),
                logistics_receive_all=bool(model.logistics_receive_all),
            ),
        )


__all__ = ["NotificationSettingsRepository"]
