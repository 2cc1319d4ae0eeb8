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
    Text,
)
from sqlalchemy.orm import relationship

from eventcraft.infrastructure.database import Base
from eventcraft.utils import storage_now


class NotificationModel(Base):
    """Database representation for user notifications.

    Channel state is stored as flat columns so that each channel can be
    updated with a targeted statement instead of rewriting the whole row.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
        Index("ix_notification_status_scheduled", "status", "scheduled_for"),
        Index("ix_notification_recipient_read", "recipient_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(40), nullable=False, default="info")
    status = Column(String(20), nullable=False, default="pending")
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(), nullable=True)

    in_app_enabled = Column(Boolean, nullable=False, default=True)
    in_app_sent = Column(Boolean, nullable=False, default=False)
    in_app_sent_at = Column(DateTime(), nullable=True)
    in_app_delivery_status = Column(String(20), nullable=True)
    email_enabled = Column(Boolean, nullable=False, default=False)
    email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(DateTime(), nullable=True)
    email_delivery_status = Column(String(20), nullable=True)
    sms_enabled = Column(Boolean, nullable=False, default=False)
    sms_sent = Column(Boolean, nullable=False, default=False)
    sms_sent_at = Column(DateTime(), nullable=True)
    sms_delivery_status = Column(String(20), nullable=True)

    related_event_id = Column(Integer, nullable=True, index=True)
    related_ticket_id = Column(Integer, nullable=True)
    action = Column(JSON, nullable=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    priority = Column(String(10), nullable=False, default="normal")
    expires_at = Column(DateTime(), nullable=True, index=True)
    scheduled_for = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=storage_now)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=storage_now,
        onupdate=storage_now,
    )

    recipient = relationship("UserModel", lazy="joined")


__all__ = ["NotificationModel"]
