"""Tests for the paid messaging gateway channel."""

from __future__ import annotations

import json

import httpx

from app.domain.entities import Correlation, NotificationType, Recipient, RenderedMessage
from app.infrastructure.channels import KakaoChannel, KakaoConfig
from app.infrastructure.channels.base import SimulationConfig
from app.infrastructure.channels.kakao import SEND_PATH

from tests.conftest import FixedRandom

RECIPIENT = Recipient(id=5, name="Choi", role="logistics", phone="010-5555-6666")
CORRELATION = Correlation("purchase_request", "PR-3")
MESSAGE = RenderedMessage(
    template_id="branch_dispatch_ready",
    event_type=NotificationType.BRANCH_DISPATCH_READY,
    text="dispatch ready",
    variables={"partName": "Filter", "branchName": "Busan", "quantity": "2"},
)


def _live_channel(handler) -> KakaoChannel:
    config = KakaoConfig(base_url="http://gateway.test", live=True)
    client = httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))
    return KakaoChannel(config, client=client)


def test_live_send_posts_template_and_variables() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == SEND_PATH
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "messageId": "kakao-77"})

    outcome = _live_channel(handler).send(RECIPIENT, MESSAGE, CORRELATION)

    assert outcome.success
    assert outcome.message_id == "kakao-77"
    assert seen == [
        {
            "templateId": "branch_dispatch_ready",
            "recipientPhone": "010-5555-6666",
            "variables": {"partName": "Filter", "branchName": "Busan", "quantity": "2"},
        }
    ]


def test_gateway_rejection_keeps_error_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "errorMessage": "Template not approved"})

    outcome = _live_channel(handler).send(RECIPIENT, MESSAGE, CORRELATION)

    assert not outcome.success
    assert outcome.error_code == "GATEWAY_REJECTED"
    assert outcome.error_message == "Template not approved"


def test_non_json_server_error_is_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    outcome = _live_channel(handler).send(RECIPIENT, MESSAGE, CORRELATION)

    assert not outcome.success
    assert outcome.error_code == "TRANSPORT_FAILURE"


def test_phone_is_required() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError("no HTTP call expected")

    outcome = _live_channel(handler).send(
        Recipient(id=6, name="Han", role="admin"), MESSAGE, CORRELATION
    )

    assert not outcome.success
    assert outcome.error_code == "VALIDATION_FAILURE"


def test_outside_production_the_gateway_is_simulated(caplog) -> None:
    simulation = SimulationConfig(
        success_rate=0.9, delay_seconds=0, message_id_prefix="msg", rng=FixedRandom(0.0)
    )
    channel = KakaoChannel(KakaoConfig(live=False, simulation=simulation))

    with caplog.at_level("INFO"):
        outcome = channel.send(RECIPIENT, MESSAGE, CORRELATION)

    assert outcome.success and outcome.simulated
    assert outcome.message_id.startswith("msg_")
    assert "dispatch ready" in caplog.text
