"""Shared fixtures: a throwaway SQLite database and deterministic channels."""

from __future__ import annotations

import threading
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from app.domain.entities import (
    Channel,
    Correlation,
    DeliveryOutcome,
    Recipient,
    RecipientSettings,
    RenderedMessage,
)
from app.infrastructure.channels import ChannelAdapter, ChannelDescriptor, ChannelStatus
from app.infrastructure.channels.base import CONTACT_EMAIL, CONTACT_PHONE
from app.infrastructure.database import build_engine, build_session_factory, initialize_database
from app.infrastructure.repositories import NotificationSettingsRepository, UserRepository

SEOUL = ZoneInfo("Asia/Seoul")


class FixedRandom:
    """Stand-in for ``random.Random`` that always draws the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class StubChannel(ChannelAdapter):
    """Channel that records every call and answers with a fixed outcome."""

    def __init__(
        self,
        channel: Channel,
        *,
        required_contact: str | None = None,
        outcome: DeliveryOutcome | None = None,
        error: Exception | None = None,
        gate: threading.Event | None = None,
        calls: list | None = None,
    ) -> None:
        self.descriptor = ChannelDescriptor(
            channel=channel, required_contact=required_contact, label=channel.value
        )
        self.outcome = outcome
        self.error = error
        self.gate = gate
        self.calls = calls if calls is not None else []

    def _deliver(
        self, recipient: Recipient, message: RenderedMessage, correlation: Correlation
    ) -> DeliveryOutcome:
        self.calls.append((self.channel, recipient.id))
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.outcome or DeliveryOutcome.sent(f"{self.channel.value}-{recipient.id}")

    def check_status(self) -> ChannelStatus:
        return ChannelStatus(channel=self.channel, success=True, simulation=True)


def stub_channels(calls: list | None = None, **overrides: StubChannel) -> dict[Channel, ChannelAdapter]:
    """Return one stub per channel; e-mail and paid gateway need contacts."""

    calls = calls if calls is not None else []
    channels: dict[Channel, ChannelAdapter] = {
        Channel.PUSH: StubChannel(Channel.PUSH, calls=calls),
        Channel.CHAT_BOT: StubChannel(Channel.CHAT_BOT, calls=calls),
        Channel.EMAIL: StubChannel(Channel.EMAIL, required_contact=CONTACT_EMAIL, calls=calls),
        Channel.PAID_GATEWAY: StubChannel(
            Channel.PAID_GATEWAY, required_contact=CONTACT_PHONE, calls=calls
        ),
    }
    for name, adapter in overrides.items():
        channels[Channel(name)] = adapter
    return channels


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 10, 30, tzinfo=SEOUL)


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'notifications.db'}")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def add_user(session_factory):
    def _add(
        name: str,
        role: str = "operations",
        *,
        email: str | None = None,
        phone: str | None = None,
        department: str | None = None,
        is_active: bool = True,
    ) -> Recipient:
        with session_factory() as session:
            return UserRepository(session).create(
                name=name,
                role=role,
                email=email,
                phone=phone,
                department=department,
                is_active=is_active,
            )

    return _add


@pytest.fixture()
def save_settings(session_factory):
    def _save(settings: RecipientSettings) -> RecipientSettings:
        with session_factory() as session:
            return NotificationSettingsRepository(session).save(settings)

    return _save
