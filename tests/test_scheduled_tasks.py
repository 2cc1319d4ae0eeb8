"""Tests for the scheduler job wrappers and registration."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

import pytest
import schedule

from eventcraft.application.use_cases.notifications import NotificationDispatcher
from eventcraft.domain.entities import Notification
from eventcraft.infrastructure.repositories import NotificationRepository
from eventcraft.jobs import scheduled_tasks
from eventcraft.utils import now_in_app_timezone


@pytest.fixture(autouse=True)
def clear_schedule():
    schedule.clear()
    yield
    schedule.clear()


def test_safe_run_logs_and_swallows_errors(caplog):
    def exploding_job():
        raise RuntimeError("database unavailable")

    with caplog.at_level(logging.ERROR):
        assert scheduled_tasks.safe_run(exploding_job)() is None

    assert "exploding_job" in caplog.text


def test_single_flight_skips_overlapping_run(caplog):
    started = threading.Event()
    release = threading.Event()
    calls = []

    @scheduled_tasks.single_flight
    def slow_job():
        calls.append("run")
        started.set()
        release.wait(5)
        return "done"

    worker = threading.Thread(target=slow_job)
    worker.start()
    assert started.wait(5)

    with caplog.at_level(logging.WARNING):
        assert slow_job() is None
    release.set()
    worker.join(5)

    assert calls == ["run"]
    assert "still running" in caplog.text
    assert slow_job() == "done"


def test_init_registers_every_job(settings):
    scheduled_tasks.init(settings)

    registered = {job.job_func.__name__ for job in schedule.get_jobs()}
    assert registered == {
        "daily_event_reminders",
        "imminent_event_reminders",
        "scheduled_notifications_sweep",
        "purge_expired_notifications",
    }


def test_sweep_job_delivers_due_notifications(
    monkeypatch, session, session_factory, settings, email_channel, sms_channel, publisher, make_user
):
    user = make_user()
    due = NotificationRepository(session).create(
        Notification(
            id=None,
            recipient_id=user.id,
            title="Later",
            message="Scheduled message",
            scheduled_for=now_in_app_timezone() - timedelta(minutes=1),
        )
    )
    assert due.status == "pending"

    monkeypatch.setattr(scheduled_tasks, "SessionLocal", session_factory)
    monkeypatch.setattr(
        scheduled_tasks,
        "build_dispatcher",
        lambda db: NotificationDispatcher(
            db,
            settings,
            email_channel=email_channel,
            sms_channel=sms_channel,
            publisher=publisher,
        ),
    )

    assert scheduled_tasks.scheduled_notifications_sweep() == 1
    assert scheduled_tasks.scheduled_notifications_sweep() == 0
    assert [item.id for item in publisher.dispatched] == [due.id]


def test_start_scheduler_returns_stop_event(monkeypatch, settings):
    monkeypatch.setattr(scheduled_tasks, "run_continuously", lambda interval=1: threading.Event())

    stop = scheduled_tasks.start_scheduler(settings)

    assert isinstance(stop, threading.Event)
    assert len(schedule.get_jobs()) == 4
