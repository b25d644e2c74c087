"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationSettingsModel(Base):
    """Database representation of :class:`RecipientSettings`."""

    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    channels = Column(JSON, nullable=False, default=dict)
    notification_types = Column(JSON, nullable=False, default=dict)
    only_my_requests = Column(Boolean, nullable=False, default=False)
    all_requests_in_my_department = Column(Boolean, nullable=False, default=False)
    quiet_hours_enabled = Column(Boolean, nullable=False, default=False)
    quiet_hours_start = Column(String(5), nullable=False, default="22:00")
    quiet_hours_end = Column(String(5), nullable=False, default="08:00")
    role_filtering_enabled = Column(Boolean, nullable=False, default=False)
    operations_receive_all = Column(Boolean, nullable=False, default=False)
    logistics_receive_all = Column(Boolean, nullable=False, default=False)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationSettingsModel"]
