"""Integration tests for the notification API endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from eventcraft.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationInput,
)
from eventcraft.infrastructure.database import get_db
from eventcraft.infrastructure.models import NotificationModel
from eventcraft.infrastructure.realtime import notification_publisher
from eventcraft.infrastructure.security import create_access_token
from eventcraft.interfaces.api.dependencies import get_notification_dispatcher
from eventcraft.interfaces.api.routes import notifications as notifications_routes


def _auth(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture()
def client(session, dispatcher):
    """Return a test client wired to the test database and fake channels."""

    from main import create_app

    app = create_app()
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    assert client.get("/notifications/").status_code == 401
    response = client.get(
        "/notifications/", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


def test_list_count_read_and_delete_flow(client: TestClient, dispatcher, make_user) -> None:
    """Exercise the lifecycle of a user's notifications over HTTP."""

    user = make_user()
    stranger = make_user()
    first = dispatcher.create_notification(
        NotificationInput(recipient_id=user.id, title="First", message="One")
    )
    dispatcher.create_notification(
        NotificationInput(
            recipient_id=user.id, title="Second", message="Two", category="event_update"
        )
    )

    listing = client.get("/notifications/", headers=_auth(user))
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 2
    assert [item["title"] for item in body["notifications"]] == ["Second", "First"]
    assert body["notifications"][0]["type"] == "event_update"

    filtered = client.get("/notifications/?type=info", headers=_auth(user)).json()
    assert [item["title"] for item in filtered["notifications"]] == ["First"]

    assert client.get("/notifications/unread-count", headers=_auth(user)).json() == {
        "count": 2
    }

    not_mine = client.put(f"/notifications/{first.id}/read", headers=_auth(stranger))
    assert not_mine.status_code == 404

    read = client.put(f"/notifications/{first.id}/read", headers=_auth(user))
    assert read.status_code == 200
    assert read.json()["is_read"] is True
    assert read.json()["status"] == "read"

    marked = client.put("/notifications/mark-all-read", headers=_auth(user))
    assert marked.json() == {"modified_count": 1}

    assert client.delete(f"/notifications/{first.id}", headers=_auth(stranger)).status_code == 404
    assert client.delete(f"/notifications/{first.id}", headers=_auth(user)).status_code == 204
    assert client.delete(f"/notifications/{first.id}", headers=_auth(user)).status_code == 404


def test_admin_create_accepts_legacy_recipient_key(
    client: TestClient, make_user, email_channel
) -> None:
    admin = make_user(role="admin")
    attendee = make_user()
    payload = {
        "user": attendee.id,
        "title": "Welcome",
        "message": "Thanks for joining",
        "type": "system",
        "channels": {"inApp": True, "email": True},
    }

    response = client.post("/notifications/", json=payload, headers=_auth(admin))

    assert response.status_code == 201
    created = response.json()
    assert created["recipient_id"] == attendee.id
    assert created["status"] == "sent"
    assert created["channels"]["email"]["sent"] is True
    assert email_channel.sent[0].to == attendee.email


def test_admin_create_error_mapping(client: TestClient, session, make_user) -> None:
    admin = make_user(role="admin")
    attendee = make_user()

    no_recipient = client.post(
        "/notifications/",
        json={"title": "x", "message": "y"},
        headers=_auth(admin),
    )
    assert no_recipient.status_code == 400
    assert "Recipient ID is required" in no_recipient.json()["detail"]
    assert session.query(NotificationModel).count() == 0

    forbidden = client.post(
        "/notifications/",
        json={"recipientId": admin.id, "title": "x", "message": "y"},
        headers=_auth(attendee),
    )
    assert forbidden.status_code == 403

    missing_title = client.post(
        "/notifications/",
        json={"recipientId": attendee.id, "title": "", "message": "y"},
        headers=_auth(admin),
    )
    assert missing_title.status_code == 400

    unknown = client.post(
        "/notifications/",
        json={"recipientId": 9999, "title": "x", "message": "y"},
        headers=_auth(admin),
    )
    assert unknown.status_code == 404


def test_preferences_round_trip(client: TestClient, make_user) -> None:
    user = make_user()

    assert client.get("/notifications/preferences", headers=_auth(user)).json() == {
        "email": True,
        "sms": False,
        "event_categories": [],
    }

    updated = client.put(
        "/notifications/preferences",
        json={"sms": True, "eventTypes": ["music"]},
        headers=_auth(user),
    )
    assert updated.status_code == 200
    assert updated.json() == {"email": True, "sms": True, "event_categories": ["music"]}


def test_test_notification_is_in_app_only(client: TestClient, make_user, email_channel) -> None:
    user = make_user()

    response = client.post("/notifications/test", headers=_auth(user))

    assert response.status_code == 201
    assert response.json()["channels"]["in_app"]["sent"] is True
    assert response.json()["channels"]["email"]["enabled"] is False
    assert email_channel.sent == []


def test_broadcast_endpoint(client: TestClient, make_user, make_event, sms_channel) -> None:
    organizer = make_user(role="organizer")
    other_organizer = make_user(role="organizer")
    attendee = make_user(notify_sms=True, phone="+15550001234")
    event = make_event(
        organizer, datetime.now(timezone.utc) + timedelta(days=3), [attendee]
    )
    payload = {
        "eventId": event.id,
        "title": "Gates open early",
        "message": "Come at 6pm",
        "notificationType": "both",
        "sendToAll": True,
    }

    response = client.post("/notifications/send", json=payload, headers=_auth(organizer))
    assert response.status_code == 200
    assert response.json()["stats"] == {
        "email_count": 1,
        "sms_count": 1,
        "total_recipients": 2,
    }
    assert len(sms_channel.sent) == 1

    assert (
        client.post("/notifications/send", json=payload, headers=_auth(other_organizer)).status_code
        == 403
    )
    assert (
        client.post("/notifications/send", json=payload, headers=_auth(attendee)).status_code
        == 403
    )


def test_websocket_init_ping_ack_and_push(
    client: TestClient,
    monkeypatch,
    session,
    session_factory,
    settings,
    dispatcher,
    make_user,
) -> None:
    user = make_user()
    pending = dispatcher.create_notification(
        NotificationInput(recipient_id=user.id, title="Unread", message="Hello")
    )
    monkeypatch.setattr(notifications_routes, "SessionLocal", session_factory)
    token = create_access_token({"sub": str(user.id)})

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [pending.id]

        websocket.send_json({"type": "ack", "ids": [pending.id]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        live_dispatcher = NotificationDispatcher(
            session,
            settings,
            email_channel=dispatcher.email_channel,
            sms_channel=dispatcher.sms_channel,
            publisher=notification_publisher,
        )
        pushed = live_dispatcher.create_notification(
            NotificationInput(recipient_id=user.id, title="Live", message="Now")
        )
        message = websocket.receive_json()
        assert message["type"] == "notification"
        assert message["data"]["id"] == pushed.id

    assert dispatcher.notifications.get(pending.id).is_read is True


def test_websocket_rejects_missing_token(client: TestClient) -> None:
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws") as websocket:
            websocket.receive_json()
