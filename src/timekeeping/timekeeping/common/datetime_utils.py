from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import SECONDS_PER_HOUR
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"invalid date {value!r}, expected YYYY-MM-DD")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(value)


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"invalid time {value!r}, expected HH:MM")


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"unknown timezone {name!r}")


def now_utc() -> datetime:
    """Current instant as an aware UTC datetime.

    Note: Wrapped so tests can patch/mock it easier.
    """
    return datetime.now(timezone.utc)


def as_aware(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach ``tz`` (UTC when None) to a naive value; aware values pass through."""
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=tz or timezone.utc)


def to_utc(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    return as_aware(value, tz).astimezone(timezone.utc)


def local_date(value: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of ``value`` in the organisation timezone."""
    return as_aware(value, tz).astimezone(tz or timezone.utc).date()


def to_db_utc(value: Optional[datetime]) -> Optional[datetime]:
    # DATETIME columns carry no zone; instants are stored as naive UTC.
    return None if value is None else to_utc(value).replace(tzinfo=None)


def from_db_utc(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else value.replace(tzinfo=timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours between two instants (naive values are read as UTC)."""
    return (to_utc(end) - to_utc(start)).total_seconds() / SECONDS_PER_HOUR
