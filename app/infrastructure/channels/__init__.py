"""Delivery channel adapters: push, chat-bot, e-mail and paid gateway."""

from __future__ import annotations

from collections.abc import Mapping

from app.config import Settings
from app.domain.entities import Channel
from app.infrastructure.email import SendGridCredentials

from .base import (
    ChannelAdapter,
    ChannelDescriptor,
    ChannelStatus,
    SimulationConfig,
    simulate_delivery,
)
from .email import EMAIL_SIMULATION, EmailChannel, EmailConfig, compose_email
from .kakao import KAKAO_SIMULATION, KakaoChannel, KakaoConfig
from .push import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    PushChannel,
    PushGateway,
    PushHandle,
    PushOptions,
    build_push_content,
)
from .telegram import TELEGRAM_SIMULATION, TelegramChannel, TelegramConfig, format_telegram_message

CHANNEL_ORDER: tuple[Channel, ...] = (
    Channel.PUSH,
    Channel.CHAT_BOT,
    Channel.EMAIL,
    Channel.PAID_GATEWAY,
)


def build_channels(settings: Settings, push_gateway: PushGateway) -> Mapping[Channel, ChannelAdapter]:
    """Create the four adapters with configuration taken from ``settings``."""

    scale = settings.simulation_delay_scale
    telegram = TelegramChannel(
        TelegramConfig(
            bot_token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
            api_base=settings.telegram_api_base,
            timeout_seconds=settings.http_timeout_seconds,
            simulation=TELEGRAM_SIMULATION.scaled(scale),
        )
    )
    email = EmailChannel(
        EmailConfig(
            credentials=SendGridCredentials(
                api_key=settings.sendgrid_api_key,
                sender=settings.sendgrid_sender,
                timeout_seconds=settings.http_timeout_seconds,
            ),
            simulation=EMAIL_SIMULATION.scaled(scale),
        )
    )
    kakao = KakaoChannel(
        KakaoConfig(
            base_url=settings.kakao_gateway_url,
            live=settings.is_production,
            timeout_seconds=settings.http_timeout_seconds,
            simulation=KAKAO_SIMULATION.scaled(scale),
        )
    )
    return {
        Channel.PUSH: PushChannel(push_gateway),
        Channel.CHAT_BOT: telegram,
        Channel.EMAIL: email,
        Channel.PAID_GATEWAY: kakao,
    }


__all__ = [
    "CHANNEL_ORDER",
    "build_channels",
    "ChannelAdapter",
    "ChannelDescriptor",
    "ChannelStatus",
    "SimulationConfig",
    "simulate_delivery",
    "EmailChannel",
    "EmailConfig",
    "compose_email",
    "KakaoChannel",
    "KakaoConfig",
    "PushChannel",
    "PushGateway",
    "PushHandle",
    "PushOptions",
    "build_push_content",
    "PERMISSION_GRANTED",
    "PERMISSION_DENIED",
    "PERMISSION_DEFAULT",
    "TelegramChannel",
    "TelegramConfig",
    "format_telegram_message",
]
