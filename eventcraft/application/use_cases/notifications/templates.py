"""Select the email and SMS rendering for a notification.

Presets tag their notifications with ``metadata["template"]``; when the tag
is known and the related event could be loaded, the dedicated builder is
used. Everything else falls back to the generic notification layout.
"""

from __future__ import annotations

from collections.abc import Callable

from eventcraft.domain.entities import Event, Notification, User
from eventcraft.infrastructure.channels.email import (
    build_event_approved_email,
    build_event_reminder_email,
    build_notification_email,
    build_registration_confirmation_email,
)
from eventcraft.infrastructure.channels.sms import (
    build_checkin_confirmation_sms,
    build_event_approved_sms,
    build_event_reminder_sms,
    build_notification_sms,
    build_registration_confirmation_sms,
    build_ticket_purchase_sms,
)

TEMPLATE_REGISTRATION_CONFIRMATION = "registration_confirmation"
TEMPLATE_DAILY_REMINDER = "daily_reminder"
TEMPLATE_EVENT_APPROVED = "event_approved"
TEMPLATE_TICKET_CHECKIN = "ticket_checkin"
TEMPLATE_TICKET_PURCHASE = "ticket_purchase"

_EMAIL_TEMPLATES: dict[str, Callable[[User, Event], tuple[str, str]]] = {
    TEMPLATE_REGISTRATION_CONFIRMATION: build_registration_confirmation_email,
    TEMPLATE_DAILY_REMINDER: build_event_reminder_email,
    TEMPLATE_EVENT_APPROVED: build_event_approved_email,
}

# Any record carrying one of these tags gets the dedicated text when SMS is
# enabled on it. The check-in preset itself is in-app only, so the check-in
# text is reached through records created with the tag over the admin API.
_SMS_TEMPLATES: dict[str, Callable[[Notification, Event], str]] = {
    TEMPLATE_REGISTRATION_CONFIRMATION: lambda _, event: build_registration_confirmation_sms(
        event
    ),
    TEMPLATE_DAILY_REMINDER: lambda _, event: build_event_reminder_sms(event),
    TEMPLATE_EVENT_APPROVED: lambda _, event: build_event_approved_sms(event),
    TEMPLATE_TICKET_CHECKIN: lambda _, event: build_checkin_confirmation_sms(event),
    TEMPLATE_TICKET_PURCHASE: lambda notification, event: build_ticket_purchase_sms(
        event, str(notification.metadata.get("ticket_type") or "general")
    ),
}


def template_name(notification: Notification) -> str | None:
    value = (notification.metadata or {}).get("template")
    return value if isinstance(value, str) else None


def render_email(
    notification: Notification,
    recipient: User,
    event: Event | None,
    *,
    base_url: str = "",
) -> tuple[str, str]:
    builder = _EMAIL_TEMPLATES.get(template_name(notification) or "")
    if builder is not None and event is not None:
        return builder(recipient, event)
    return build_notification_email(notification, event, base_url=base_url)


def render_sms(notification: Notification, event: Event | None) -> str:
    builder = _SMS_TEMPLATES.get(template_name(notification) or "")
    if builder is not None and event is not None:
        return builder(notification, event)
    return build_notification_sms(notification, event)


__all__ = [
    "TEMPLATE_DAILY_REMINDER",
    "TEMPLATE_EVENT_APPROVED",
    "TEMPLATE_REGISTRATION_CONFIRMATION",
    "TEMPLATE_TICKET_CHECKIN",
    "TEMPLATE_TICKET_PURCHASE",
    "render_email",
    "render_sms",
    "template_name",
]
