"""Exceptions raised while preparing or delivering notifications."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification delivery errors."""

    error_code = "NOTIFICATION_ERROR"

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code


class ConfigurationMissing(NotificationError):
    """Channel credentials are absent; the channel falls back to simulation."""

    error_code = "CONFIGURATION_MISSING"


class ValidationFailure(NotificationError):
    """The recipient lacks the contact field a channel needs."""

    error_code = "VALIDATION_FAILURE"


class TransportFailure(NotificationError):
    """A gateway answered with an error or could not be reached."""

    error_code = "TRANSPORT_FAILURE"


class PermissionDenied(NotificationError):
    """Push notifications were not allowed by the recipient."""

    error_code = "PERMISSION_DENIED"


class TemplateError(NotificationError):
    """A message could not be rendered from the catalog."""

    error_code = "TEMPLATE_ERROR"


class MissingTemplate(TemplateError):
    error_code = "MISSING_TEMPLATE"

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Notification template '{template_id}' does not exist")
        self.template_id = template_id


class MissingVariable(TemplateError):
    error_code = "MISSING_VARIABLE"

    def __init__(self, template_id: str, variables: list[str]) -> None:
        names = ", ".join(variables)
        super().__init__(f"Template '{template_id}' is missing variables: {names}")
        self.template_id = template_id
        self.variables = variables


class RecipientLookupError(NotificationError):
    """Recipients could not be read from the user store."""

    error_code = "RECIPIENT_LOOKUP_FAILED"


__all__ = [
    "NotificationError",
    "ConfigurationMissing",
    "ValidationFailure",
    "TransportFailure",
    "PermissionDenied",
    "TemplateError",
    "MissingTemplate",
    "MissingVariable",
    "RecipientLookupError",
]
