import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sukejuru.config import app_cfg
from sukejuru.constants import WEEKDAYS

logger = logging.getLogger(__name__)

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$")
_SUGGESTED_TIME_PATTERN = re.compile(
    r"^\s*([A-Za-z]+)\s+"
    r"(\d{1,2}(?::\d{2})?\s*(?:[AaPp][Mm])?)\s*-\s*"
    r"(\d{1,2}(?::\d{2})?\s*(?:[AaPp][Mm])?)\s*$"
)


def app_timezone() -> ZoneInfo:
    """Timezone used to interpret dates, weekdays and day boundaries."""
    return ZoneInfo(app_cfg.DEFAULT_TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today() -> date:
    return utc_now().astimezone(app_timezone()).date()


def ensure_aware(value: datetime) -> datetime:
    """Attach the application timezone to naive datetimes received from clients."""
    if value.tzinfo is None:
        return value.replace(tzinfo=app_timezone())
    return value


def to_utc(value: datetime | None) -> datetime | None:
    """Normalize a client datetime to UTC before it is written or compared in the store."""
    if value is None:
        return None
    return ensure_aware(value).astimezone(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Datetimes read back from the store are UTC; SQLite drops the offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso(value: datetime | None) -> str | None:
    """
    Render a stored datetime as ISO-8601 UTC with millisecond precision.

    Example:
        2025-09-23T01:40:00.000Z
    """
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 date or datetime string into an aware datetime.

    Bare dates resolve to local midnight in the application timezone.

    Raises:
        ValueError: If the value is not an ISO-8601 date/datetime
    """
    if isinstance(value, datetime):
        return ensure_aware(value)

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


def parse_date(value: str | date) -> date:
    """Parse the calendar date of a `YYYY-MM-DD` or ISO datetime string (local date)."""
    if isinstance(value, datetime):
        return ensure_aware(value).astimezone(app_timezone()).date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_datetime(text).astimezone(app_timezone()).date()


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the UTC instants [start, end) covering one local calendar day."""
    tz = app_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def weekday_index(day_name: str) -> int | None:
    """Monday=0 ... Sunday=6, or None for an unknown name."""
    try:
        return WEEKDAYS.index(day_name.strip().lower())
    except ValueError:
        return None


def local_weekday(value: datetime) -> int:
    return as_utc(value).astimezone(app_timezone()).weekday()


def local_weekday_name(value: datetime) -> str:
    return WEEKDAYS[local_weekday(value)].capitalize()


def next_weekday_occurrence(day_name: str, from_date: date) -> date:
    """
    Next date falling on `day_name`, strictly after `from_date`.

    Raises:
        ValueError: If `day_name` is not a weekday name
    """
    target = weekday_index(day_name)
    if target is None:
        raise ValueError(f"Invalid day name: {day_name}")

    days_until_target = target - from_date.weekday()
    if days_until_target <= 0:
        days_until_target += 7
    return from_date + timedelta(days=days_until_target)


def _parse_clock(text: str, default_period: str | None = None) -> tuple[int, int]:
    match = _CLOCK_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid time: {text}")

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    period = (match.group(3) or default_period or "").upper()

    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {text}")
    return hour, minute


def _clock_period(text: str) -> str | None:
    match = _CLOCK_PATTERN.match(text)
    if match and match.group(3):
        return match.group(3).upper()
    return None


def parse_suggested_time(suggested_time: str) -> tuple[str, time, time]:
    """
    Parse an optimizer suggestion such as "Tuesday 7-9 PM" or "Friday 13:00-14:30".

    A start time without AM/PM inherits the period of the end time.

    Returns:
        Tuple of (weekday name, start time, end time)

    Raises:
        ValueError: If the string does not follow "<Weekday> <start>-<end>"
    """
    match = _SUGGESTED_TIME_PATTERN.match(suggested_time or "")
    if not match:
        raise ValueError(f"Cannot parse suggested time: {suggested_time!r}")

    day_name, start_text, end_text = match.groups()
    if weekday_index(day_name) is None:
        raise ValueError(f"Invalid day name: {day_name}")

    end_period = _clock_period(end_text)
    start_hour, start_minute = _parse_clock(start_text, default_period=end_period)
    end_hour, end_minute = _parse_clock(end_text)

    if end_period == "PM" and _clock_period(start_text) is None and start_hour > end_hour:
        # "11-1 PM" starts in the morning
        start_hour -= 12

    return day_name.capitalize(), time(start_hour, start_minute), time(end_hour, end_minute)


def format_local_clock(value: datetime) -> str:
    return as_utc(value).astimezone(app_timezone()).strftime("%H:%M")
