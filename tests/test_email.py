"""Unit tests for the SendGrid email channel and its templates."""

from __future__ import annotations

import json
import types
from datetime import datetime, timezone

import pytest

from eventcraft.config import Settings
from eventcraft.domain.entities import Event, Notification, NotificationAction, User
from eventcraft.infrastructure.channels import ChannelMessage
from eventcraft.infrastructure.channels import email as email_module

MESSAGE = ChannelMessage(to="user@example.com", subject="Subject", body="<p>Body</p>")


class _StubSendGridAPIClient:
    """Default stub client that returns a successful response."""

    instances: list["_StubSendGridAPIClient"] = []

    def __init__(self, api_key: str):
        self.api_key = api_key
        self.sent = []
        _StubSendGridAPIClient.instances.append(self)

    def send(self, message):
        self.sent.append(message)
        return types.SimpleNamespace(
            status_code=202, body=None, headers={"X-Message-Id": "msg-123"}
        )


def _channel(**overrides) -> email_module.SendGridEmailChannel:
    values = {
        "database_url": "sqlite://",
        "secret_key": "secret",
        "sendgrid_api_key": "SG.fake",
        "sendgrid_sender": "sender@example.com",
    }
    values.update(overrides)
    return email_module.SendGridEmailChannel(Settings(**values))


def _event() -> Event:
    return Event(
        id=1,
        title="Jazz Night",
        date=datetime(2026, 5, 2, 18, 30, tzinfo=timezone.utc),
        location="Blue Note",
        organizer_id=1,
    )


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the channel should exit early."""

    monkeypatch.setattr(email_module, "SendGridAPIClient", _StubSendGridAPIClient)
    _StubSendGridAPIClient.instances.clear()

    result = _channel(sendgrid_api_key=None, sendgrid_sender=None).send(MESSAGE)

    assert result.success is False
    assert _StubSendGridAPIClient.instances == []


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful SendGrid response should report the provider message id."""

    monkeypatch.setattr(email_module, "SendGridAPIClient", _StubSendGridAPIClient)

    result = _channel().send(MESSAGE)

    assert result.success is True
    assert result.provider_id == "msg-123"


def test_send_email_non_2xx_response(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class RejectingClient(_StubSendGridAPIClient):
        def send(self, message):
            return types.SimpleNamespace(
                status_code=400,
                body=json.dumps({"errors": [{"message": "Bad to", "field": "to"}]}),
                headers={},
            )

    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with caplog.at_level("ERROR"):
        result = _channel().send(MESSAGE)

    assert result.success is False
    assert result.error == "SendGrid API request failed with status 400: Bad to (field: to)"
    assert "Bad to" in caplog.text


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog):
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/API_Reference/Web_API_v3/How_To_Use_The_Web_API_v3/authentication.html",
                    }
                ]
            }
        ).encode()

    class FailingClient(_StubSendGridAPIClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = _channel().send(MESSAGE)

    assert result.success is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_notification_email_includes_event_and_absolute_action():
    notification = Notification(
        id=1,
        recipient_id=1,
        title="Doors <open>",
        message="See you soon",
        action=NotificationAction(text="View Event", url="/event/1"),
    )

    subject, html_content = email_module.build_notification_email(
        notification, _event(), base_url="https://eventcraft.example/"
    )

    assert subject == "Doors <open>"
    assert "Doors &lt;open&gt;" in html_content
    assert "Blue Note" in html_content
    assert 'href="https://eventcraft.example/event/1"' in html_content


def test_event_templates_render_event_details():
    user = User(id=1, name="Ada", email="ada@example.com")

    subject, html_content = email_module.build_event_reminder_email(user, _event())
    assert subject == "Reminder: Jazz Night is tomorrow!"
    assert "Hello Ada" in html_content
    assert "06:30 PM" in html_content

    subject, _ = email_module.build_attendee_broadcast_email("Update", "New time", _event())
    assert subject == "Update - Jazz Night"
