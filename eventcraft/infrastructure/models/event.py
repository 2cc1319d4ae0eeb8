"""SQLAlchemy models for events and their attendees."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from eventcraft.infrastructure.database import Base


class EventModel(Base):
    """Database representation of a ticketed event."""

    __tablename__ = "event"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    date = Column(DateTime(), nullable=False, index=True)
    location = Column(String(200), nullable=False)
    category = Column(String(60), nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    organizer_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    hour_reminder_sent = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )

    attendees = relationship(
        "EventAttendeeModel",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class EventAttendeeModel(Base):
    """Registration linking a user to an event."""

    __tablename__ = "event_attendee"

    id = Column(Integer, primary_key=True)
    event_id = Column(
        Integer, ForeignKey("event.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    ticket_type = Column(String(60), nullable=True)
    checked_in = Column(Boolean, nullable=False, default=False)

    event = relationship("EventModel", back_populates="attendees")


__all__ = ["EventAttendeeModel", "EventModel"]
