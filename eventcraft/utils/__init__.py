"""Utility helpers for reusable functionality."""

from .datetime import (
    app_zone,
    day_window,
    ensure_app_timezone,
    from_storage,
    now_in_app_timezone,
    start_of_next_day,
    storage_now,
    to_storage,
)

__all__ = [
    "app_zone",
    "day_window",
    "ensure_app_timezone",
    "from_storage",
    "now_in_app_timezone",
    "start_of_next_day",
    "storage_now",
    "to_storage",
]
