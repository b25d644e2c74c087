"""Aggregate application use cases."""

from .users import deactivate_recipient, register_recipient

__all__ = [
    "register_recipient",
    "deactivate_recipient",
]
