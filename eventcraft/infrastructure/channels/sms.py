"""SMS delivery through the Twilio Messaging REST API."""

from __future__ import annotations

import logging

import requests

from eventcraft.config import Settings
from eventcraft.domain.entities import Event, Notification
from eventcraft.utils import ensure_app_timezone

from .base import ChannelMessage, ChannelResult, DeliveryChannel

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 1600


def truncate_sms(text: str, limit: int = SMS_MAX_LENGTH) -> str:
    """Cap ``text`` at ``limit`` characters, marking the cut with an ellipsis."""

    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class TwilioSmsChannel(DeliveryChannel):
    """Send text messages with the configured Twilio account."""

    def __init__(self, settings: Settings) -> None:
        self._account_sid = settings.twilio_account_sid
        self._auth_token = settings.twilio_auth_token
        self._from_number = settings.twilio_from_number
        self._api_url = settings.twilio_api_url.rstrip("/")
        self._timeout = settings.channel_timeout_seconds

    @property
    def channel_name(self) -> str:
        return "sms"

    @property
    def is_configured(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_number)

    @property
    def messages_url(self) -> str:
        return f"{self._api_url}/2010-04-01/Accounts/{self._account_sid}/Messages.json"

    def send(self, message: ChannelMessage) -> ChannelResult:
        if not self.is_configured:
            logger.info("Twilio configuration incomplete; skipping SMS delivery")
            return ChannelResult.failed("SMS provider is not configured")
        if not message.to:
            return ChannelResult.failed("No phone number available")

        body = truncate_sms(message.body)
        if len(body) < len(message.body):
            logger.warning(
                "SMS to %s truncated from %s characters", message.to, len(message.body)
            )

        try:
            response = requests.post(
                self.messages_url,
                data={"To": message.to, "From": self._from_number, "Body": body},
                auth=(self._account_sid, self._auth_token),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("Error sending SMS to %s: %s", message.to, exc)
            return ChannelResult.failed(f"SMS send error: {exc}")

        if not 200 <= response.status_code < 300:
            error = self._describe_error(response)
            logger.error("Twilio rejected SMS to %s: %s", message.to, error)
            return ChannelResult.failed(error)

        try:
            provider_id = response.json().get("sid")
        except ValueError:
            provider_id = None
        logger.info("SMS sent to %s, SID: %s", message.to, provider_id)
        return ChannelResult.ok(provider_id)

    @staticmethod
    def _describe_error(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("message"):
            code = payload.get("code")
            suffix = f" (code {code})" if code else ""
            return f"Twilio API error: HTTP {response.status_code}: {payload['message']}{suffix}"
        return f"Twilio API error: HTTP {response.status_code}"


def _event_day(event: Event) -> str:
    localized = ensure_app_timezone(event.date)
    assert localized is not None
    return localized.strftime("%m/%d/%Y")


def _event_time(event: Event) -> str:
    localized = ensure_app_timezone(event.date)
    assert localized is not None
    return localized.strftime("%I:%M %p")


def build_notification_sms(
    notification: Notification, event: Event | None = None
) -> str:
    text = f"EventCraft: {notification.title}\n\n{notification.message}"
    if event is not None:
        text += f"\n\nEvent: {event.title}"
        text += f"\nDate: {_event_day(event)}"
    if notification.action is not None and notification.action.url:
        text += f"\n\nView details: {notification.action.url}"
    return truncate_sms(text)


def build_event_reminder_sms(event: Event) -> str:
    return truncate_sms(
        f"Reminder: {event.title} is tomorrow at {_event_time(event)} in "
        f"{event.location}. See you there!"
    )


def build_checkin_confirmation_sms(event: Event) -> str:
    return truncate_sms(
        f"You've successfully checked in to {event.title}. Enjoy the event!"
    )


def build_ticket_purchase_sms(event: Event, ticket_type: str) -> str:
    return truncate_sms(
        f"Thank you for purchasing a {ticket_type} ticket for {event.title}. "
        "Your ticket has been confirmed!"
    )


def build_registration_confirmation_sms(event: Event) -> str:
    return truncate_sms(
        f"🎉 Registration confirmed for {event.title} on {_event_day(event)} at "
        f"{event.location}. See you there!"
    )


def build_event_approved_sms(event: Event) -> str:
    return truncate_sms(
        f'✅ Your event "{event.title}" has been approved and is now live! '
        "Attendees can now register."
    )


def build_starting_soon_sms(event: Event) -> str:
    return truncate_sms(
        f"{event.title} is starting in about an hour! Location: {event.location}"
    )


def build_attendee_broadcast_sms(title: str, message: str, event: Event) -> str:
    return truncate_sms(f"{title} - {event.title}: {message}")


__all__ = [
    "SMS_MAX_LENGTH",
    "TwilioSmsChannel",
    "build_attendee_broadcast_sms",
    "build_checkin_confirmation_sms",
    "build_event_approved_sms",
    "build_event_reminder_sms",
    "build_notification_sms",
    "build_registration_confirmation_sms",
    "build_starting_soon_sms",
    "build_ticket_purchase_sms",
    "truncate_sms",
]
