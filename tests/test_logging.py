"""Tests for the log redaction filter."""

from __future__ import annotations

import logging

from app.infrastructure.logging import ContactRedactingFilter


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_contacts_are_masked_in_arguments() -> None:
    record = _record("Sending to %s / %s", "kim@example.com", "010-1234-5678")

    assert ContactRedactingFilter().filter(record)

    assert record.getMessage() == "Sending to [REDACTED] / [REDACTED]"


def test_bot_token_is_masked_in_message() -> None:
    record = _record("POST https://api.telegram.org/bot123456:ABC-def_9/sendMessage failed")

    ContactRedactingFilter().filter(record)

    assert "123456:ABC" not in record.getMessage()
    assert "/bot[REDACTED]/sendMessage" in record.getMessage()


def test_non_string_arguments_are_kept() -> None:
    record = _record("Attempt %d for request %s", 7, "PR-1")

    ContactRedactingFilter().filter(record)

    assert record.getMessage() == "Attempt 7 for request PR-1"
