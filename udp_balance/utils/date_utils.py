"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    """Current instant as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(moment: datetime) -> datetime:
    """Drop timezone info after converting aware datetimes to UTC"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: str | datetime | date) -> datetime:
    """
    Parse an ISO 8601 timestamp into a naive UTC datetime.

    Bare dates map to midnight. Raises ValueError or TypeError on bad input.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise TypeError(f"expected ISO string, got {type(value).__name__}")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(text))


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def subtract_years(moment: datetime, years: int) -> datetime:
    """Same calendar position N years earlier; Feb 29 falls back to Feb 28"""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def is_same_month(a: datetime, b: datetime) -> bool:
    return a.year == b.year and a.month == b.month
