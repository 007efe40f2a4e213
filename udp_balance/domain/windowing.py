"""Time window selection for dashboard ranges"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from udp_balance.domain.exceptions import InvalidWindowError
from udp_balance.domain.models import TimeWindow, Transaction
from udp_balance.utils.date_utils import end_of_day, start_of_day, subtract_years, to_naive_utc, utc_now

NAMED_RANGES = ("7d", "30d", "90d", "1y", "all")

_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}

Bound = Union[date, datetime, None]
WindowSpec = Union[str, TimeWindow, Tuple[Bound, Bound]]


def _lower_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return start_of_day(value)


def _upper_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return end_of_day(value)


def resolve_window(window: WindowSpec, now: Optional[datetime] = None) -> TimeWindow:
    """
    Turn a named range or explicit pair into absolute inclusive bounds.

    Named ranges are relative to ``now``:
    - 7d / 30d / 90d: now minus that many days, up to now
    - 1y: same calendar instant one year earlier, up to now
    - all: unbounded

    Explicit ``(start, end)`` dates cover whole days; datetimes are used as given.

    Raises:
        InvalidWindowError: unknown range name or start after end
    """
    if isinstance(window, TimeWindow):
        resolved = window
    elif isinstance(window, str):
        name = window.strip().lower()
        if name == "all":
            return TimeWindow(start=None, end=None, label="all")

        now = to_naive_utc(now) if now is not None else utc_now()
        if name in _RANGE_DAYS:
            start = now - timedelta(days=_RANGE_DAYS[name])
        elif name == "1y":
            start = subtract_years(now, 1)
        else:
            raise InvalidWindowError(
                f"Unknown time range {window!r}; expected one of {', '.join(NAMED_RANGES)}"
            )
        resolved = TimeWindow(start=start, end=now, label=name)
    else:
        try:
            start, end = window
        except (TypeError, ValueError) as e:
            raise InvalidWindowError(f"Invalid window {window!r}") from e
        resolved = TimeWindow(start=_lower_bound(start), end=_upper_bound(end), label="custom")

    if resolved.start is not None and resolved.end is not None and resolved.start > resolved.end:
        raise InvalidWindowError(f"Window start {resolved.start} is after end {resolved.end}")
    return resolved


def filter_transactions(
    transactions: Optional[Iterable[Transaction]],
    window: WindowSpec,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """Transactions inside the window, keeping their relative input order"""
    resolved = resolve_window(window, now)
    return [t for t in transactions or () if resolved.contains(t.timestamp)]
