"""Timezone-aware datetime utilities for the store's local time."""

import os
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

# Buenos Aires: UTC-3 year-round, no DST
APP_TIMEZONE = ZoneInfo(os.getenv("APP_TIMEZONE", "America/Argentina/Buenos_Aires"))


def now_local() -> datetime:
    """Get current datetime in the store timezone."""
    return datetime.now(APP_TIMEZONE)


def today_local() -> date:
    """Get today's date in the store timezone."""
    return now_local().date()


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def next_day(day: date) -> date:
    return day + timedelta(days=1)


def earliest(*days: date | None) -> date | None:
    """Earliest of the given dates, ignoring None."""
    present = [d for d in days if d is not None]
    return min(present) if present else None
