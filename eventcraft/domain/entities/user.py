"""Domain entity representing a user."""

from dataclasses import dataclass, field
from datetime import datetime

from .notification import NotificationPreferences

USER_ROLE_ATTENDEE = "attendee"
USER_ROLE_ORGANIZER = "organizer"
USER_ROLE_ADMIN = "admin"


@dataclass
class User:
    """Attributes of an application user relevant to notifications."""

    id: int | None
    name: str
    email: str
    role: str = USER_ROLE_ATTENDEE
    phone: str | None = None
    notify_email: bool = True
    notify_sms: bool = False
    event_categories: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the user's role matches ``role``."""

        return self.role.lower() == role.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(USER_ROLE_ADMIN)

    @property
    def preferences(self) -> NotificationPreferences:
        return NotificationPreferences(email=self.notify_email, sms=self.notify_sms)

    @property
    def has_phone(self) -> bool:
        return bool(self.phone and self.phone.strip())
