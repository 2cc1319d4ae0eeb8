"""Tests for the notification persistence layer."""

from __future__ import annotations

from datetime import timedelta

from eventcraft.domain.entities import (
    ChannelSet,
    ChannelState,
    Notification,
    NotificationAction,
)
from eventcraft.infrastructure.repositories import NotificationRepository
from eventcraft.utils import now_in_app_timezone


def _notification(recipient_id: int, **overrides) -> Notification:
    values = {
        "id": None,
        "recipient_id": recipient_id,
        "title": "Hello",
        "message": "World",
    }
    values.update(overrides)
    return Notification(**values)


def _channels(**enabled) -> ChannelSet:
    return ChannelSet(
        in_app=ChannelState(enabled=enabled.get("in_app", True)),
        email=ChannelState(enabled=enabled.get("email", False)),
        sms=ChannelState(enabled=enabled.get("sms", False)),
    )


def test_create_defaults_scheduled_for_to_creation_time(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)

    created = repository.create(_notification(user.id))

    assert created.id is not None
    assert created.scheduled_for == created.created_at
    assert created.status == "pending"
    assert created.channels.in_app.enabled is True
    assert created.metadata == {}


def test_create_round_trips_action_and_metadata(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)

    created = repository.create(
        _notification(
            user.id,
            action=NotificationAction(text="View", url="/event/1", type="internal"),
            metadata={"eventId": 1},
        )
    )
    loaded = repository.get(created.id)

    assert loaded.action == NotificationAction(text="View", url="/event/1", type="internal")
    assert loaded.metadata == {"eventId": 1}


def test_list_for_user_filters_sorts_and_paginates(session, make_user):
    user = make_user()
    other = make_user()
    repository = NotificationRepository(session)
    base = now_in_app_timezone()
    for index in range(5):
        repository.create(
            _notification(
                user.id,
                title=f"n{index}",
                category="event_update" if index % 2 else "info",
                created_at=base + timedelta(minutes=index),
            )
        )
    repository.create(_notification(other.id))

    first_page = repository.list_for_user(user.id, page=1, limit=2)
    assert first_page.total == 5
    assert first_page.pages == 3
    assert [item.title for item in first_page.items] == ["n4", "n3"]

    last_page = repository.list_for_user(user.id, page=3, limit=2)
    assert [item.title for item in last_page.items] == ["n0"]

    updates = repository.list_for_user(user.id, category="event_update")
    assert {item.title for item in updates.items} == {"n1", "n3"}


def test_count_unread_only_counts_active_statuses(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    repository.create(_notification(user.id, status="pending"))
    repository.create(_notification(user.id, status="sent"))
    repository.create(_notification(user.id, status="failed"))
    read = repository.create(_notification(user.id))
    repository.mark_read(read.id)

    assert repository.count_unread(user.id) == 2


def test_mark_read_is_idempotent(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    created = repository.create(_notification(user.id))

    first = repository.mark_read(created.id)
    second = repository.mark_read(created.id)

    assert first.is_read is True
    assert first.status == "read"
    assert first.read_at is not None
    assert second.read_at == first.read_at


def test_mark_channel_sent_settles_status_only_when_all_enabled_sent(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    created = repository.create(
        _notification(user.id, channels=_channels(email=True, sms=True))
    )

    repository.mark_channel_sent(created.id, "in_app")
    repository.mark_channel_sent(created.id, "email")
    partial = repository.get(created.id)
    assert partial.status == "pending"
    assert partial.channels.email.delivery_status == "delivered"
    assert partial.channels.email.sent_at is not None

    repository.mark_channel_sent(created.id, "sms")
    assert repository.get(created.id).status == "sent"


def test_mark_channel_failed_leaves_channel_unsent(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    created = repository.create(_notification(user.id, channels=_channels(email=True)))

    repository.mark_channel_sent(created.id, "in_app")
    repository.mark_channel_failed(created.id, "email")
    loaded = repository.get(created.id)

    assert loaded.channels.email.sent is False
    assert loaded.channels.email.delivery_status == "failed"
    assert loaded.status == "pending"


def test_settle_status_does_not_overwrite_read(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    created = repository.create(_notification(user.id))

    repository.mark_read(created.id)
    repository.mark_channel_sent(created.id, "in_app")

    loaded = repository.get(created.id)
    assert loaded.status == "read"
    assert loaded.channels.in_app.sent is True


def test_list_due_returns_pending_records_with_failed_channels(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    now = now_in_app_timezone()
    due = repository.create(_notification(user.id, scheduled_for=now - timedelta(minutes=1)))
    repository.create(_notification(user.id, scheduled_for=now + timedelta(hours=1)))
    retrying = repository.create(
        _notification(
            user.id,
            channels=_channels(email=True),
            scheduled_for=now - timedelta(minutes=5),
        )
    )
    repository.mark_channel_sent(retrying.id, "in_app")
    repository.mark_channel_failed(retrying.id, "email")
    settled = repository.create(_notification(user.id, scheduled_for=now - timedelta(minutes=2)))
    repository.mark_channel_sent(settled.id, "in_app")

    assert [item.id for item in repository.list_due(now)] == [retrying.id, due.id]


def test_delete_owned_by_requires_ownership(session, make_user):
    owner = make_user()
    stranger = make_user()
    repository = NotificationRepository(session)
    created = repository.create(_notification(owner.id))

    assert repository.delete_owned_by(created.id, stranger.id) == 0
    assert repository.get(created.id) is not None
    assert repository.delete_owned_by(created.id, owner.id) == 1
    assert repository.get(created.id) is None


def test_purge_expired_removes_only_expired_records(session, make_user):
    user = make_user()
    repository = NotificationRepository(session)
    now = now_in_app_timezone()
    expired = repository.create(_notification(user.id, expires_at=now - timedelta(days=1)))
    kept = repository.create(_notification(user.id, expires_at=now + timedelta(days=1)))
    forever = repository.create(_notification(user.id))

    assert repository.purge_expired(now) == 1
    assert repository.get(expired.id) is None
    assert repository.get(kept.id) is not None
    assert repository.get(forever.id) is not None
