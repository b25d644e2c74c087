"""Domain entities describing who receives and who triggers notifications."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Recipient:
    """Active user resolved for a single dispatch."""

    id: int
    name: str
    role: str
    email: str | None = None
    phone: str | None = None
    department: str | None = None

    def contact(self, field_name: str | None) -> str | None:
        """Return the contact value stored in ``field_name`` (``email``/``phone``)."""

        if field_name is None:
            return None
        value = getattr(self, field_name, None)
        if isinstance(value, str):
            value = value.strip()
        return value or None


@dataclass(frozen=True)
class Requester:
    """Account that triggered the business event (from the session provider)."""

    id: int | None
    display_name: str
    email: str | None = None


__all__ = ["Recipient", "Requester"]
