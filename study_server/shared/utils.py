from datetime import date, datetime, timedelta
from typing import Any


def js_weekday(day: date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def to_local_day(value: Any) -> date:
    """
    Normalizes epoch-milliseconds, ISO strings and datetimes to a local calendar day.
    Time-of-day is dropped, so two values on the same day compare equal.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Expected a date, got: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000).date()
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text) / 1000).date()
        try:
            return date.fromisoformat(text)
        except ValueError:
            return to_local_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise ValueError(f"Expected a date, got: {value!r}")


def daterange(start: date, end: date) -> list[date]:
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def format_duration(seconds: int) -> str:
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
