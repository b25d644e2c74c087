"""Unit tests for the SendGrid email helper and the e-mail channel."""

from __future__ import annotations

import json
import types

import pytest

from app.domain.entities import Correlation, NotificationType, Recipient, RenderedMessage
from app.domain.errors import ConfigurationMissing, TransportFailure
from app.infrastructure import email as email_module
from app.infrastructure.channels import EmailChannel, EmailConfig, compose_email
from app.infrastructure.channels.base import SimulationConfig
from app.infrastructure.email import SendGridCredentials

from tests.conftest import FixedRandom

CREDENTIALS = SendGridCredentials(api_key="SG.fake", sender="sender@example.com")
RECIPIENT = Recipient(id=3, name="Park", role="logistics", email="park@example.com")
CORRELATION = Correlation("purchase_request", "PR-9")
MESSAGE = RenderedMessage(
    template_id="overdue_request_warning",
    event_type=NotificationType.OVERDUE_REQUEST,
    text="overdue",
    variables={
        "partName": "Hydraulic hose",
        "overdueDays": "4",
        "currentStatus": "Purchase order completed",
        "checkedOn": "2026. 3. 2.",
    },
    action_url="http://localhost:3000/purchase-requests/PR-9",
)


class _RecordingClient:
    """Stand-in for ``SendGridAPIClient`` capturing the sent message."""

    sent: list = []

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self.client = types.SimpleNamespace(timeout=None)

    def send(self, message):
        type(self).sent.append(message)
        return types.SimpleNamespace(
            status_code=202, body=None, headers={"X-Message-Id": "sg-message-1"}
        )


def test_send_email_without_configuration() -> None:
    """Missing SendGrid settings are reported before any request is made."""

    with pytest.raises(ConfigurationMissing):
        email_module.send_email(
            SendGridCredentials(), subject="Subject", text_content="Body", recipient="a@example.com"
        )


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful SendGrid response returns the message id header."""

    _RecordingClient.sent = []
    monkeypatch.setattr(email_module, "SendGridAPIClient", _RecordingClient)

    message_id = email_module.send_email(
        CREDENTIALS,
        subject="Subject",
        text_content="Line one\n\nLine <two>",
        recipient="user@example.com",
        action_url="http://localhost:3000/purchase-requests/PR-9",
    )

    assert message_id == "sg-message-1"
    assert len(_RecordingClient.sent) == 1


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/for-developers/sending-email/api-getting-started/",
                    }
                ]
            }
        ).encode()

    class FailingClient(_RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"), pytest.raises(TransportFailure) as exc_info:
        email_module.send_email(
            CREDENTIALS, subject="Subject", text_content="Body", recipient="user@example.com"
        )

    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in str(exc_info.value)


def test_unsuccessful_status_is_a_transport_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    class RejectingClient(_RecordingClient):
        def send(self, message):
            return types.SimpleNamespace(
                status_code=400, body=b'{"errors": [{"message": "Invalid to address"}]}', headers={}
            )

    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with pytest.raises(TransportFailure, match="Invalid to address"):
        email_module.send_email(
            CREDENTIALS, subject="Subject", text_content="Body", recipient="user@example.com"
        )


def test_render_html_escapes_and_links() -> None:
    rendered = email_module.render_html("Hello <b>\nthere", "http://example.com/?a=1&b=2")

    assert "&lt;b&gt;<br>there" in rendered
    assert 'href="http://example.com/?a=1&amp;b=2"' in rendered


def test_overdue_email_greets_recipient() -> None:
    content = compose_email(MESSAGE, RECIPIENT.name)

    assert content.subject.startswith("⚠️ [OVERDUE]")
    assert "Hydraulic hose" in content.subject
    assert content.body.startswith("Hello Park,")
    assert "• Days overdue: 4" in content.body


def test_email_channel_requires_address() -> None:
    channel = EmailChannel(EmailConfig(credentials=CREDENTIALS))
    no_email = Recipient(id=4, name="Jung", role="admin")

    outcome = channel.send(no_email, MESSAGE, CORRELATION)

    assert not outcome.success
    assert outcome.error_code == "VALIDATION_FAILURE"


def test_email_channel_sends_through_sendgrid(monkeypatch: pytest.MonkeyPatch) -> None:
    _RecordingClient.sent = []
    monkeypatch.setattr(email_module, "SendGridAPIClient", _RecordingClient)
    channel = EmailChannel(EmailConfig(credentials=CREDENTIALS))

    outcome = channel.send(RECIPIENT, MESSAGE, CORRELATION)

    assert outcome.success
    assert outcome.message_id == "sg-message-1"
    assert not channel.simulated


def test_email_channel_simulates_without_credentials() -> None:
    simulation = SimulationConfig(
        success_rate=0.95, delay_seconds=0, message_id_prefix="sim_email", rng=FixedRandom(0.5)
    )
    channel = EmailChannel(EmailConfig(simulation=simulation))

    outcome = channel.send(RECIPIENT, MESSAGE, CORRELATION)

    assert channel.simulated
    assert outcome.success and outcome.simulated
    assert outcome.message_id.startswith("sim_email_")
    assert channel.check_status().simulation


def test_sendgrid_error_text_names_the_offending_field() -> None:
    body = json.dumps(
        {
            "errors": [
                {"message": "Does not contain a valid address.", "field": "personalizations.0.to.0.email"},
                {"message": "The from address is not verified.", "field": None},
                "ignored",
            ]
        }
    ).encode()

    assert email_module._sendgrid_error_text(body) == (
        "personalizations.0.to.0.email: Does not contain a valid address.; "
        "The from address is not verified."
    )
    assert email_module._sendgrid_error_text(b"  Service Unavailable \n") == "Service Unavailable"
    assert email_module._sendgrid_error_text(b"") is None
