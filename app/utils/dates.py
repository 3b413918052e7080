"""
Timezone helpers: stored timestamps are UTC, calendar days are local (TIMEZONE)
"""
from datetime import date, datetime, time, timezone, tzinfo


def as_utc(value: datetime) -> datetime:
    """Naive timestamp (SQLite drops tzinfo) is read as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_day(value: datetime, tz: tzinfo) -> date:
    """Календарный день момента value в поясе tz"""
    return as_utc(value).astimezone(tz).date()


def local_today(tz: tzinfo, now: datetime | None = None) -> date:
    return local_day(now or datetime.now(timezone.utc), tz)


def day_start(day: date, tz: tzinfo) -> datetime:
    """00:00 дня day в поясе tz"""
    return datetime.combine(day, time.min, tzinfo=tz)
