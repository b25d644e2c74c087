"""Utility helpers for sending notification emails via SendGrid."""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.domain.errors import ConfigurationMissing, TransportFailure

logger = logging.getLogger(__name__)

FROM_NAME = "Parts Management"


@dataclass(frozen=True)
class SendGridCredentials:
    """API key and sender address used for the SendGrid v3 REST API."""

    api_key: str | None = None
    sender: str | None = None
    timeout_seconds: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender)


def _sendgrid_error_text(body: Any) -> str | None:
    """Join the ``errors[].message`` entries of a SendGrid v3 error body.

    Bodies that are not JSON are returned as plain text.
    """

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str) or not body.strip():
        return None

    text = body.strip()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text

    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list):
        return text

    messages = []
    for error in errors:
        if not isinstance(error, dict) or not error.get("message"):
            continue
        field = error.get("field")
        messages.append(f"{field}: {error['message']}" if field else str(error["message"]))
    return "; ".join(messages) or text


def _describe_sendgrid_exception(exc: Exception) -> str:
    """Log a SendGrid API error and return the text stored on the attempt."""

    status_code = getattr(exc, "status_code", None)
    details = _sendgrid_error_text(getattr(exc, "body", None))

    if status_code and details:
        logger.error("SendGrid API request failed with status %s: %s", status_code, details)
        return f"SendGrid status {status_code}: {details}"
    if status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
        return f"SendGrid status {status_code}"
    if details:
        logger.error("SendGrid API request failed: %s", details)
        return details
    logger.error("Error sending email via SendGrid: %s", exc)
    return str(exc) or type(exc).__name__


def _describe_unsuccessful_response(response: Any) -> str:
    status_code = getattr(response, "status_code", None)
    details = _sendgrid_error_text(getattr(response, "body", None))

    if details:
        logger.error("SendGrid API responded with status %s: %s", status_code, details)
        return f"SendGrid status {status_code}: {details}"
    logger.error("SendGrid API responded with status %s", status_code)
    return f"SendGrid status {status_code}"


def _message_id_from(response: Any) -> str | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return headers.get("X-Message-Id") or headers.get("x-message-id")
    except AttributeError:
        return None


def render_html(text: str, action_url: str | None = None) -> str:
    """Return an HTML rendition of a plain text body."""

    paragraphs = [
        "<p>" + html.escape(block).replace("\n", "<br>") + "</p>"
        for block in text.split("\n\n")
        if block.strip()
    ]
    if action_url:
        paragraphs.append(f'<p><a href="{html.escape(action_url)}">Open in the system</a></p>')
    return "".join(paragraphs)


def send_email(
    credentials: SendGridCredentials,
    *,
    subject: str,
    text_content: str,
    recipient: str,
    action_url: str | None = None,
) -> str | None:
    """Send an email and return the SendGrid message id.

    Raises:
        ConfigurationMissing: the SendGrid key or sender is not configured.
        TransportFailure: SendGrid rejected the request or could not be reached.
    """

    if not credentials.configured:
        raise ConfigurationMissing("SendGrid configuration incomplete")

    body = text_content
    if action_url:
        body = f"{text_content}\n\n{action_url}"
    message = Mail(
        from_email=(credentials.sender, FROM_NAME),
        to_emails=recipient,
        subject=subject,
        plain_text_content=body,
        html_content=render_html(text_content, action_url),
    )

    client = SendGridAPIClient(credentials.api_key)
    http_client = getattr(client, "client", None)
    if http_client is not None and hasattr(http_client, "timeout"):
        http_client.timeout = credentials.timeout_seconds

    try:
        response = client.send(message)
    except Exception as exc:  # noqa: BLE001 - network failures depend on environment
        raise TransportFailure(_describe_sendgrid_exception(exc)) from exc

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        raise TransportFailure(_describe_unsuccessful_response(response))

    return _message_id_from(response)


__all__ = ["FROM_NAME", "SendGridCredentials", "render_html", "send_email"]
