"""Register and run the periodic notification jobs.

Jobs run on a background thread driven by ``schedule``. Each job opens its
own database session, never overlaps with a still-running instance of
itself, and logs instead of raising so the scheduler thread survives.
"""

import functools
import logging
import threading

import schedule
from sqlalchemy.orm import Session

from eventcraft.application.use_cases.notifications import (
    NotificationDispatcher,
    send_daily_event_reminders,
    send_imminent_event_reminders,
)
from eventcraft.config import Settings, get_settings
from eventcraft.infrastructure.database import SessionLocal
from eventcraft.infrastructure.repositories import NotificationRepository
from eventcraft.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

EXPIRED_PURGE_TIME = "03:00"


def safe_run(job):
    @functools.wraps(job)
    def wrapper(*args, **kwargs):
        try:
            return job(*args, **kwargs)
        except Exception:
            logger.exception("Error running job `%s`", job.__name__)
            return None

    return wrapper


def single_flight(job):
    """Skip a tick while the previous run of ``job`` is still in progress."""

    lock = threading.Lock()

    @functools.wraps(job)
    def wrapper(*args, **kwargs):
        if not lock.acquire(blocking=False):
            logger.warning("Job `%s` is still running; skipping this tick", job.__name__)
            return None
        try:
            return job(*args, **kwargs)
        finally:
            lock.release()

    return wrapper


def build_dispatcher(session: Session) -> NotificationDispatcher:
    return NotificationDispatcher(session, get_settings())


@single_flight
def daily_event_reminders() -> int:
    logger.info("Running daily event reminder check ...")
    with SessionLocal() as session:
        created = send_daily_event_reminders(build_dispatcher(session))
    logger.info("Daily event reminders created: %s", created)
    return created


@single_flight
def imminent_event_reminders() -> int:
    logger.info("Running hourly imminent reminder check ...")
    with SessionLocal() as session:
        delivered = send_imminent_event_reminders(build_dispatcher(session))
    logger.info("Starting-soon reminders delivered: %s", delivered)
    return delivered


@single_flight
def scheduled_notifications_sweep() -> int:
    with SessionLocal() as session:
        sent = build_dispatcher(session).process_scheduled_notifications()
    if sent:
        logger.info("Delivered %s scheduled notifications", sent)
    return sent


@single_flight
def purge_expired_notifications() -> int:
    with SessionLocal() as session:
        deleted = NotificationRepository(session).purge_expired(now_in_app_timezone())
    logger.info("Purged %s expired notifications", deleted)
    return deleted


def init(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logger.info("Scheduled tasks initialized ...")

    schedule.every().day.at(settings.daily_reminder_time).do(
        safe_run(daily_event_reminders)
    )
    schedule.every().hour.at(":00").do(safe_run(imminent_event_reminders))
    schedule.every(settings.scheduled_sweep_minutes).minutes.do(
        safe_run(scheduled_notifications_sweep)
    )
    schedule.every().day.at(EXPIRED_PURGE_TIME).do(
        safe_run(purge_expired_notifications)
    )


def run_continuously(interval=1):
    """Run pending jobs every ``interval`` seconds on a daemon thread.

    Returns a ``threading.Event`` that stops the loop once set. Missed runs
    are not replayed: a job due several times while the loop slept runs once.
    """

    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        def run(self):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                cease_continuous_run.wait(interval)

    continuous_thread = ScheduleThread(name="notification-scheduler", daemon=True)
    continuous_thread.start()
    return cease_continuous_run


def start_scheduler(settings: Settings | None = None) -> threading.Event:
    """Register every job and start the scheduler thread."""

    schedule.clear()
    init(settings)
    return run_continuously()


__all__ = [
    "daily_event_reminders",
    "imminent_event_reminders",
    "init",
    "purge_expired_notifications",
    "run_continuously",
    "safe_run",
    "scheduled_notifications_sweep",
    "single_flight",
    "start_scheduler",
]
