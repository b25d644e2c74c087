"""Use cases for managing notification recipients."""

from .register_recipient import deactivate_recipient, register_recipient

__all__ = ["register_recipient", "deactivate_recipient"]
