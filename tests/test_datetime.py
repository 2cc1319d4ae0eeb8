"""Tests for timezone configuration and storage conversions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from eventcraft.config import Settings
from eventcraft.utils import day_window, from_storage, to_storage


def test_day_window_covers_the_next_calendar_day():
    start, end = day_window(datetime(2026, 5, 1, 23, 30, tzinfo=timezone.utc))

    assert start == datetime(2026, 5, 2, tzinfo=timezone.utc)
    assert end == datetime(2026, 5, 3, tzinfo=timezone.utc)


def test_storage_round_trip_normalizes_to_app_timezone():
    lima = timezone(timedelta(hours=-5))
    value = datetime(2026, 5, 1, 20, 0, tzinfo=lima)

    stored = to_storage(value)

    assert stored == datetime(2026, 5, 2, 1, 0)
    assert stored.tzinfo is None
    assert from_storage(stored) == value
    assert to_storage(None) is None


def test_settings_reject_unknown_timezone():
    with pytest.raises(ValidationError, match="not a known IANA timezone"):
        Settings(database_url="sqlite://", secret_key="secret", app_timezone="Mars/Base")

    blank = Settings(database_url="sqlite://", secret_key="secret", app_timezone=" ")
    assert blank.app_timezone == "UTC"
