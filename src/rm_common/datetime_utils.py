"""UTC datetime helpers. All timestamps stored and compared are timezone-aware UTC."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_month(now: datetime) -> datetime:
    """First instant of now's calendar month, same tzinfo."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
