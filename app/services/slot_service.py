"""Time conversion and slot rules shared by bookings, reminders and thank-you messages.

Every externally supplied date-time is a naive local string plus an optional
zone name. It is converted once to an absolute instant and stored as naive
UTC; zones are only used again when rendering for people.
"""
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INVALID_TIME_MESSAGE = "Invalid timezone or date format provided."


@dataclass(frozen=True)
class TimeConversion:
    """Outcome of converting user input to UTC: either ``value`` or ``error``."""

    value: datetime | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def utc_naive_now() -> datetime:
    """Naive UTC for comparison with TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def get_zone(tz_name: str | None) -> ZoneInfo | None:
    """ZoneInfo for ``tz_name`` (default zone when empty), or None if unknown."""
    name = tz_name or settings.default_timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: names like "America" resolve to a tzdata directory
        return None


def to_utc(local_value: str | datetime | None, tz_name: str | None = None) -> TimeConversion:
    """Interpret ``local_value`` in ``tz_name`` and return the naive UTC instant.

    Accepts ``YYYY-MM-DD HH:MM[:SS]`` or the ISO ``T`` form. A value that
    carries its own UTC offset keeps it and ignores the zone.
    """
    if local_value is None or (isinstance(local_value, str) and not local_value.strip()):
        return TimeConversion(error=INVALID_TIME_MESSAGE)
    zone = get_zone(tz_name)
    if zone is None:
        return TimeConversion(error=INVALID_TIME_MESSAGE)
    if isinstance(local_value, datetime):
        parsed = local_value
    else:
        try:
            parsed = datetime.fromisoformat(local_value.strip())
        except ValueError:
            return TimeConversion(error=INVALID_TIME_MESSAGE)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    try:
        return TimeConversion(value=to_naive_utc(parsed))
    except OverflowError:
        return TimeConversion(error=INVALID_TIME_MESSAGE)


def reminder_time_for(local_value: str | None, tz_name: str | None, appointment_date: datetime) -> TimeConversion:
    """Convert a reminder time; it must fall strictly before the appointment."""
    conv = to_utc(local_value, tz_name)
    if conv.ok and not conv.value < appointment_date:
        return TimeConversion(error="Reminder time must be set before the appointment time.")
    return conv


def thank_you_time_for(local_value: str | None, tz_name: str | None, appointment_date: datetime) -> TimeConversion:
    """Convert a thank-you send time; it must fall strictly after the appointment."""
    conv = to_utc(local_value, tz_name)
    if conv.ok and not conv.value > appointment_date:
        return TimeConversion(error="Thank you message send time must be after the appointment time.")
    return conv


@dataclass(frozen=True)
class DayRange:
    """UTC bounds of a local calendar day, or ``error`` for malformed input."""

    start: datetime | None = None
    end: datetime | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def local_day_bounds(date_str: str | None, tz_name: str | None = None) -> DayRange:
    """UTC [start, end] of the local day ``YYYY-MM-DD`` in ``tz_name``."""
    if not date_str or not _DATE_RE.match(date_str):
        return DayRange(error="A valid date query parameter is required (YYYY-MM-DD).")
    start = to_utc(f"{date_str} 00:00:00", tz_name)
    end = to_utc(f"{date_str} 23:59:59", tz_name)
    if not start.ok or not end.ok:
        return DayRange(error=start.error or end.error)
    return DayRange(start=start.value, end=end.value)


def format_in_zone(dt: datetime, tz_name: str | None = None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Render a naive UTC datetime in the given zone (default zone when empty)."""
    zone = get_zone(tz_name) or ZoneInfo("UTC")
    aware = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt
    return aware.astimezone(zone).strftime(fmt)


def thank_you_send_time(appointment_date: datetime) -> datetime:
    return appointment_date + timedelta(hours=settings.thank_you_delay_hours)
