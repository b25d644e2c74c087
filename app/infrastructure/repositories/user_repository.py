"""Persistence layer for the users that receive notifications."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import ROLE_OPERATIONS, Recipient
from app.infrastructure.models import UserModel


class UserRepository:
    """Read active users and map them to :class:`Recipient` entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active(self) -> Sequence[Recipient]:
        query = (
            self.session.query(UserModel)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_active_by_role(self, role: str) -> Sequence[Recipient]:
        query = (
            self.session.query(UserModel)
            .filter(UserModel.is_active.is_(True))
            .filter(UserModel.role == role)
            .order_by(UserModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, user_id: int) -> Recipient | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def create(
        self,
        *,
        name: str,
        role: str,
        email: str | None = None,
        phone: str | None = None,
        department: str | None = None,
        is_active: bool = True,
    ) -> Recipient:
        model = UserModel(
            name=name,
            role=role,
            email=email,
            phone=phone,
            department=department,
            is_active=is_active,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_active(self, user_id: int, is_active: bool) -> None:
        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        model.is_active = is_active
        self.session.add(model)
        self.session.commit()

    @staticmethod
    def _to_entity(model: UserModel) -> Recipient:
        return Recipient(
            id=model.id,
            name=model.name or "",
            role=model.role or ROLE_OPERATIONS,
            email=model.email or None,
            phone=model.phone or None,
            department=model.department or None,
        )


__all__ = ["UserRepository"]
