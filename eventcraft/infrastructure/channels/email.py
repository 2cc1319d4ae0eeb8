"""Email delivery through SendGrid plus the HTML templates EventCraft sends."""

from __future__ import annotations

import json
import logging
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from eventcraft.config import Settings
from eventcraft.domain.entities import Event, Notification, User
from eventcraft.utils import ensure_app_timezone

from .base import ChannelMessage, ChannelResult, DeliveryChannel

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{message} (field: {field})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_failure(status_code: Any, body: Any) -> str:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid API request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid API request failed with status {status_code}"
    if details:
        return f"SendGrid API request failed: {details}"
    return "SendGrid API request failed"


class SendGridEmailChannel(DeliveryChannel):
    """Send transactional email with the configured SendGrid credentials."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.sendgrid_api_key
        self._sender = settings.sendgrid_sender

    @property
    def channel_name(self) -> str:
        return "email"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def send(self, message: ChannelMessage) -> ChannelResult:
        if not self.is_configured:
            logger.info("SendGrid configuration incomplete; skipping email delivery")
            return ChannelResult.failed("Email provider is not configured")
        if not message.to:
            return ChannelResult.failed("Recipient email address is missing")

        mail = Mail(
            from_email=self._sender,
            to_emails=message.to,
            subject=message.subject or "EventCraft",
            html_content=message.body,
        )

        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(mail)
        except Exception as exc:
            error = _describe_sendgrid_failure(
                getattr(exc, "status_code", None), getattr(exc, "body", None)
            )
            logger.error("Error sending email to %s: %s", message.to, error)
            return ChannelResult.failed(error)

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            error = _describe_sendgrid_failure(
                status_code, getattr(response, "body", None)
            )
            logger.error("SendGrid rejected email to %s: %s", message.to, error)
            return ChannelResult.failed(error)

        headers = getattr(response, "headers", None) or {}
        provider_id = headers.get("X-Message-Id") if hasattr(headers, "get") else None
        logger.info("Email sent to %s", message.to)
        return ChannelResult.ok(provider_id)


def _format_date(event: Event) -> str:
    localized = ensure_app_timezone(event.date)
    assert localized is not None
    return localized.strftime("%B %d, %Y")


def _format_time(event: Event) -> str:
    localized = ensure_app_timezone(event.date)
    assert localized is not None
    return localized.strftime("%I:%M %p")


def _event_details_list(event: Event) -> str:
    return (
        "<ul>"
        f"<li>📅 Date: {_format_date(event)}</li>"
        f"<li>🕐 Time: {_format_time(event)}</li>"
        f"<li>📍 Location: {escape(event.location)}</li>"
        "</ul>"
    )


def build_notification_email(
    notification: Notification,
    event: Event | None = None,
    *,
    base_url: str = "",
) -> tuple[str, str]:
    """Return ``(subject, html)`` for a generic notification."""

    title = escape(notification.title)
    parts = [
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">",
        f"<title>{title}</title></head><body>",
        "<div style=\"max-width:600px;margin:0 auto;padding:20px;"
        "font-family:Arial,sans-serif;color:#333\">",
        "<div style=\"background:#3b82f6;color:#fff;padding:20px;text-align:center\">"
        "<h1>🎫 EventCraft</h1></div>",
        "<div style=\"background:#f9fafb;padding:20px\">",
        f"<h2>{title}</h2>",
        f"<p>{escape(notification.message)}</p>",
    ]
    if event is not None:
        parts.append(
            "<div style=\"border:1px solid #e5e7eb;padding:15px;margin:15px 0;"
            "border-radius:6px\"><h3>📅 Event Details</h3>"
            f"<p><strong>Event:</strong> {escape(event.title)}</p>"
            f"<p><strong>Date:</strong> {_format_date(event)}</p>"
            f"<p><strong>Location:</strong> {escape(event.location or 'TBD')}</p>"
            "</div>"
        )
    if notification.action is not None and notification.action.url:
        url = notification.action.url
        if url.startswith("/") and base_url:
            url = base_url.rstrip("/") + url
        parts.append(
            "<p style=\"text-align:center\">"
            f"<a href=\"{escape(url, quote=True)}\" style=\"display:inline-block;"
            "background:#3b82f6;color:#fff;padding:12px 24px;text-decoration:none;"
            f"border-radius:6px\">{escape(notification.action.text)}</a></p>"
        )
    parts.append(
        "</div><div style=\"text-align:center;padding:20px;color:#666;font-size:12px\">"
        "<p>EventCraft - Your Event Management Platform</p>"
        "<p>You received this email because you're registered for our platform.</p>"
        "</div></div></body></html>"
    )
    return notification.title, "".join(parts)


def build_registration_confirmation_email(user: User, event: Event) -> tuple[str, str]:
    subject = f"Registration Confirmed: {event.title}"
    html_content = "".join(
        (
            f"<h1>🎉 You're registered for {escape(event.title)}!</h1>",
            f"<p>Hello {escape(user.name)},</p>",
            f"<p>Your registration for <strong>{escape(event.title)}</strong> is confirmed.</p>",
            "<p><strong>Event Details:</strong></p>",
            _event_details_list(event),
            "<p>Thank you for using EventCraft!</p>",
        )
    )
    return subject, html_content


def build_event_reminder_email(user: User, event: Event) -> tuple[str, str]:
    subject = f"Reminder: {event.title} is tomorrow!"
    html_content = "".join(
        (
            "<h1>Event Reminder</h1>",
            f"<p>Hello {escape(user.name)},</p>",
            f"<p>This is a reminder that {escape(event.title)} is happening tomorrow "
            f"at {escape(event.location)}.</p>",
            f"<p>Date: {_format_date(event)}</p>",
            f"<p>Time: {_format_time(event)}</p>",
        )
    )
    return subject, html_content


def build_event_approved_email(organizer: User, event: Event) -> tuple[str, str]:
    subject = f"Event Approved: {event.title}"
    html_content = "".join(
        (
            "<h1>✅ Your event has been approved!</h1>",
            f"<p>Hello {escape(organizer.name)},</p>",
            f"<p>Great news! Your event <strong>{escape(event.title)}</strong> has been "
            "approved and is now live.</p>",
            "<p><strong>Event Details:</strong></p>",
            _event_details_list(event),
            "<p>Your event is now visible to attendees and ready for registrations!</p>",
        )
    )
    return subject, html_content


def build_starting_soon_email(user: User, event: Event) -> tuple[str, str]:
    subject = f"{event.title} Starting Soon!"
    html_content = "".join(
        (
            "<h2>Your event is starting soon!</h2>",
            f"<p>Hello {escape(user.name)},</p>",
            f"<p><strong>{escape(event.title)}</strong> is starting in about an hour "
            f"at {escape(event.location)}.</p>",
            "<p>We're looking forward to seeing you there!</p>",
        )
    )
    return subject, html_content


def build_attendee_broadcast_email(
    title: str, message: str, event: Event
) -> tuple[str, str]:
    subject = f"{title} - {event.title}"
    html_content = "".join(
        (
            f"<h1>{escape(title)}</h1>",
            f"<p>Event: {escape(event.title)}</p>",
            f"<p>{escape(message)}</p>",
            f"<p>Date: {_format_date(event)}</p>",
            f"<p>Time: {_format_time(event)}</p>",
            f"<p>Location: {escape(event.location)}</p>",
        )
    )
    return subject, html_content


__all__ = [
    "SendGridEmailChannel",
    "build_attendee_broadcast_email",
    "build_event_approved_email",
    "build_event_reminder_email",
    "build_notification_email",
    "build_registration_confirmation_email",
    "build_starting_soon_email",
]
