"""Logging configuration for the notification service."""

import logging
import logging.config
import re

CONTACT_PATTERNS = [
    re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?\d{2,4}[-.\s]?\d{3,4}[-.\s]?\d{4}(?!\d)"),
]
BOT_TOKEN_PATTERN = re.compile(r"(/bot)(\d+:[A-Za-z0-9_-]+)")


class ContactRedactingFilter(logging.Filter):
    """Mask e-mail addresses, phone numbers and bot tokens in log records."""

    def _sanitize(self, value: object) -> object:
        if not isinstance(value, str):
            return value

        redacted = BOT_TOKEN_PATTERN.sub(r"\1[REDACTED]", value)
        for pattern in CONTACT_PATTERNS:
            redacted = pattern.sub("[REDACTED]", redacted)
        return redacted

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        return True


def setup_logging(level: str | None = None) -> None:
    from app.config import get_settings

    log_level = (level or get_settings().log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "contact_redacting": {
                    "()": "app.infrastructure.logging.ContactRedactingFilter",
                }
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["contact_redacting"],
                }
            },
            "loggers": {
                "": {
                    "handlers": ["console"],
                    "level": log_level,
                },
                "httpx": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )
