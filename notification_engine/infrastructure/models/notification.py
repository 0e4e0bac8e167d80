"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)

from notification_engine.infrastructure.database import Base
from notification_engine.utils import storage_now


class NotificationModel(Base):
    """Database representation of a notification document.

    Bilingual fields are stored as ``{"en": ..., "ta": ...}`` JSON objects.
    ``recipient_id`` is ``NULL`` only for legacy broadcast documents.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_read_start", "recipient_id", "is_read", "start_at"),
        Index("ix_notification_audience_window", "target_audience", "start_at", "end_at"),
        Index("ix_notification_type_priority", "type", "priority"),
        Index("ix_notification_email_state", "send_email", "email_sent_at"),
        Index("ix_notification_window", "start_at", "end_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title = Column(JSON, nullable=False)
    message = Column(JSON, nullable=False)
    type = Column(String(20), nullable=False)
    priority = Column(String(10), nullable=False, default="medium")
    target_audience = Column(String(10), nullable=False, default="all")
    start_at = Column(DateTime(), nullable=False, default=storage_now)
    end_at = Column(DateTime(), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(), nullable=True)
    send_email = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(DateTime(), nullable=True)
    action_url = Column(String(500), nullable=True)
    action_text = Column(JSON, nullable=True)
    image_url = Column(String(500), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    payload = Column(JSON, nullable=False, default=dict)
    created_by = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(), nullable=False, default=storage_now)
    updated_at = Column(DateTime(), nullable=True, onupdate=storage_now)


__all__ = ["NotificationModel"]
