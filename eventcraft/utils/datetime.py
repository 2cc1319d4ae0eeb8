"""Time helpers bound to the configured ``APP_TIMEZONE``.

Domain code works with aware datetimes. The database stores naive values
expressed in the app timezone, so every read and write goes through
``from_storage`` / ``to_storage``.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo

from eventcraft.config import get_settings


@lru_cache(maxsize=1)
def app_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().app_timezone)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=app_zone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are taken as local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=app_zone())
    return value.astimezone(app_zone())


def to_storage(value: datetime | None) -> datetime | None:
    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


from_storage = ensure_app_timezone


def storage_now() -> datetime:
    """Current time in the naive form written to ``DateTime`` columns."""

    return now_in_app_timezone().replace(tzinfo=None)


def start_of_next_day(value: datetime) -> datetime:
    """Midnight after ``value`` in the app timezone."""

    local_date = ensure_app_timezone(value).date() + timedelta(days=1)
    return datetime.combine(local_date, time.min, tzinfo=app_zone())


def day_window(value: datetime) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` of the calendar day after ``value``."""

    start = start_of_next_day(value)
    return start, start_of_next_day(start)
