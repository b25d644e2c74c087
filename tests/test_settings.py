"""Tests for configuration and stored notification settings."""

from __future__ import annotations

from datetime import time

import pytest
from pydantic import ValidationError

from app.application.use_cases.users import deactivate_recipient, register_recipient
from app.config import Settings
from app.domain.entities import Channel, NotificationType, QuietHours, RecipientSettings
from app.infrastructure.repositories import NotificationSettingsRepository, UserRepository


@pytest.mark.parametrize(
    ("role", "department", "filtering", "operations_all", "logistics_all"),
    [
        ("operations", True, True, True, False),
        ("logistics", False, False, False, True),
        ("admin", False, False, False, False),
    ],
)
def test_defaults_depend_on_role(
    role: str, department: bool, filtering: bool, operations_all: bool, logistics_all: bool
) -> None:
    settings = RecipientSettings.defaults_for(5, role)

    assert all(settings.type_enabled(event_type) for event_type in NotificationType)
    assert all(settings.channel_enabled(channel) for channel in Channel)
    assert settings.only_my_requests is False
    assert settings.all_requests_in_my_department is department
    assert settings.quiet_hours == QuietHours(enabled=False, start=time(22, 0), end=time(8, 0))
    assert settings.role_based_filtering.enabled is filtering
    assert settings.role_based_filtering.operations_receive_all is operations_all
    assert settings.role_based_filtering.logistics_receive_all is logistics_all


def test_settings_repository_round_trip(session_factory, add_user) -> None:
    user = add_user("Kim", "logistics")
    settings = RecipientSettings(
        user_id=user.id,
        channels={Channel.EMAIL.value: False},
        quiet_hours=QuietHours(enabled=True, start=time(21, 30), end=time(7, 15)),
    )

    with session_factory() as session:
        NotificationSettingsRepository(session).save(settings)

    with session_factory() as session:
        stored = NotificationSettingsRepository(session).get(user.id)

    assert stored is not None
    assert stored.channel_enabled(Channel.EMAIL) is False
    assert stored.channel_enabled(Channel.PUSH) is True
    assert stored.quiet_hours == QuietHours(enabled=True, start=time(21, 30), end=time(7, 15))


def test_get_or_create_stores_role_defaults_once(session_factory, add_user) -> None:
    user = add_user("Lee", "operations")

    with session_factory() as session:
        repository = NotificationSettingsRepository(session)
        created = repository.get_or_create(user.id, role="operations")
        again = repository.get_or_create(user.id, role="logistics")

    assert created.id is not None
    assert again.id == created.id
    assert again.role_based_filtering.operations_receive_all is True


def test_register_recipient_creates_user_and_settings(session_factory) -> None:
    with session_factory() as session:
        recipient = register_recipient(
            session, name="  Choi ", role="Logistics", email="choi@example.com", phone=" "
        )

    assert recipient.name == "Choi"
    assert recipient.role == "logistics"
    assert recipient.phone is None

    with session_factory() as session:
        settings = NotificationSettingsRepository(session).get(recipient.id)
    assert settings is not None
    assert settings.role_based_filtering.logistics_receive_all is True


def test_register_recipient_rejects_unknown_role(session_factory) -> None:
    with session_factory() as session, pytest.raises(ValueError):
        register_recipient(session, name="Jung", role="guest")


def test_deactivated_recipient_is_not_listed(session_factory, add_user) -> None:
    first = add_user("Kim")
    second = add_user("Lee")

    with session_factory() as session:
        deactivate_recipient(session, first.id)

    with session_factory() as session:
        active = UserRepository(session).list_active()

    assert [recipient.id for recipient in active] == [second.id]


def test_sendgrid_settings_must_come_in_pairs() -> None:
    with pytest.raises(ValidationError):
        Settings(sendgrid_api_key="SG.key", sendgrid_sender=None)

    settings = Settings(sendgrid_api_key="SG.key", sendgrid_sender="noreply@example.com")
    assert settings.sendgrid_sender == "noreply@example.com"


def test_production_flag_follows_app_env() -> None:
    assert Settings(app_env=" Production ").is_production
    assert not Settings(app_env="development").is_production
