"""Timezone-aware date helpers and calendar-day arithmetic."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Asia/Kolkata')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def inclusive_day_count(start: date, end: date) -> int:
    """
    Count calendar days in [start, end], both ends included.

    A single-day range counts as 1. An end before the start yields zero or a
    negative number; callers validate ordering first.
    """
    return (end - start).days + 1
