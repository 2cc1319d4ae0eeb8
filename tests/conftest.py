"""Shared fixtures for the notification test-suite."""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"
for _name in (
    "SENDGRID_API_KEY",
    "SENDGRID_SENDER",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_FROM_NUMBER",
):
    os.environ.pop(_name, None)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventcraft.application.use_cases.notifications import NotificationDispatcher
from eventcraft.config import Settings
from eventcraft.domain.entities import Attendee, Event, EVENT_STATUS_PUBLISHED, User
from eventcraft.infrastructure import models  # noqa: F401  # register tables
from eventcraft.infrastructure.channels import ChannelMessage, ChannelResult, DeliveryChannel
from eventcraft.infrastructure.database import Base
from eventcraft.infrastructure.repositories import EventRepository, UserRepository


class FakeChannel(DeliveryChannel):
    """In-memory channel recording every message it is asked to send."""

    def __init__(
        self,
        name: str,
        *,
        succeed: bool = True,
        raises: Exception | None = None,
        block: threading.Event | None = None,
    ) -> None:
        self.name = name
        self.succeed = succeed
        self.raises = raises
        self.block = block
        self.sent: list[ChannelMessage] = []

    @property
    def channel_name(self) -> str:
        return self.name

    @property
    def is_configured(self) -> bool:
        return True

    def send(self, message: ChannelMessage) -> ChannelResult:
        if self.block is not None:
            self.block.wait(5)
        if self.raises is not None:
            raise self.raises
        self.sent.append(message)
        if self.succeed:
            return ChannelResult.ok(f"{self.name}-{len(self.sent)}")
        return ChannelResult.failed(f"{self.name} provider rejected the message")


class FakePublisher:
    def __init__(self) -> None:
        self.dispatched = []

    def dispatch(self, notification) -> bool:
        self.dispatched.append(notification)
        return True


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        channel_timeout_seconds=0.5,
        scheduler_enabled=False,
    )


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def email_channel() -> FakeChannel:
    return FakeChannel("email")


@pytest.fixture()
def sms_channel() -> FakeChannel:
    return FakeChannel("sms")


@pytest.fixture()
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture()
def dispatcher(session, settings, email_channel, sms_channel, publisher):
    return NotificationDispatcher(
        session,
        settings,
        email_channel=email_channel,
        sms_channel=sms_channel,
        publisher=publisher,
    )


@pytest.fixture()
def make_user(session):
    counter = {"value": 0}

    def _make_user(**overrides) -> User:
        counter["value"] += 1
        values = {
            "id": None,
            "name": f"User {counter['value']}",
            "email": f"user{counter['value']}@example.com",
        }
        values.update(overrides)
        return UserRepository(session).create(User(**values))

    return _make_user


@pytest.fixture()
def make_event(session):
    def _make_event(
        organizer: User,
        date: datetime,
        attendees: list[User] = (),
        **overrides,
    ) -> Event:
        values = {
            "id": None,
            "title": "Jazz Night",
            "date": date,
            "location": "Blue Note",
            "organizer_id": organizer.id,
            "category": "music",
            "status": EVENT_STATUS_PUBLISHED,
            "attendees": [Attendee(user_id=user.id) for user in attendees],
        }
        values.update(overrides)
        return EventRepository(session).create(Event(**values))

    return _make_event
