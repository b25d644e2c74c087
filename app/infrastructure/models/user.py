"""SQLAlchemy model for the users who can receive notifications."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from app.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a system user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(120), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    role = Column(String(20), nullable=False, index=True)
    department = Column(String(80), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
