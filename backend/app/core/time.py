"""Time utilities for timezone-aware datetimes and calendar-day boundaries."""

from datetime import UTC, date, datetime, time, tzinfo
from zoneinfo import ZoneInfo

from backend.app.core.settings import get_settings


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def practice_timezone() -> tzinfo:
    """Timezone in which the practice's calendar days are counted."""
    name = get_settings().practice_timezone
    if name.upper() == "UTC":
        return UTC
    return ZoneInfo(name)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    """Last representable instant of ``day`` (23:59:59.999999) in ``tz``."""
    return datetime.combine(day, time.max, tzinfo=tz)


def local_date(value: datetime, tz: tzinfo = UTC) -> date:
    return as_utc(value).astimezone(tz).date()
