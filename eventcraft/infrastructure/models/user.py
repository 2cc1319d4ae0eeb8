"""SQLAlchemy model for the user table."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.sql import expression

from eventcraft.infrastructure.database import Base


class UserModel(Base):
    """Database representation of the application user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default="attendee")
    notify_email = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    notify_sms = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    event_categories = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())


__all__ = ["UserModel"]
