"""Domain entities for ticketed events and their attendees."""

from dataclasses import dataclass, field
from datetime import datetime

EVENT_STATUS_DRAFT = "draft"
EVENT_STATUS_PENDING_APPROVAL = "pending_approval"
EVENT_STATUS_PUBLISHED = "published"
EVENT_STATUS_REJECTED = "rejected"
EVENT_STATUS_CANCELLED = "cancelled"
EVENT_STATUS_COMPLETED = "completed"


@dataclass
class Attendee:
    """Registration of a user for an event."""

    user_id: int
    ticket_type: str | None = None
    checked_in: bool = False


@dataclass
class Event:
    """Scheduled event that users buy tickets for."""

    id: int | None
    title: str
    date: datetime
    location: str
    organizer_id: int
    category: str | None = None
    status: str = EVENT_STATUS_DRAFT
    hour_reminder_sent: bool = False
    attendees: list[Attendee] = field(default_factory=list)


__all__ = [
    "Attendee",
    "Event",
    "EVENT_STATUS_CANCELLED",
    "EVENT_STATUS_COMPLETED",
    "EVENT_STATUS_DRAFT",
    "EVENT_STATUS_PENDING_APPROVAL",
    "EVENT_STATUS_PUBLISHED",
    "EVENT_STATUS_REJECTED",
]
