"""SQLAlchemy model for persisted delivery attempts."""

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class DeliveryAttemptModel(Base):
    """Database representation of one (event, recipient, channel) delivery."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String(50), nullable=False)
    channel = Column(String(20), nullable=False, index=True)
    template_id = Column(String(50), nullable=False)
    recipient_id = Column(Integer, nullable=True, index=True)
    recipient_name = Column(String(50), nullable=False)
    recipient_email = Column(String(120), nullable=True)
    recipient_phone = Column(String(30), nullable=True)
    variables = Column(JSON, nullable=False, default=dict)
    status = Column(String(10), nullable=False, index=True)
    message_id = Column(String(120), nullable=True)
    sent_at = Column(DateTime(), nullable=True)
    error_code = Column(String(50), nullable=True)
    error_message = Column(Text, nullable=True)
    related_entity_type = Column(String(30), nullable=False)
    related_entity_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["DeliveryAttemptModel"]
