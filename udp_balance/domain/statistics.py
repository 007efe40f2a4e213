"""Trend and volatility statistics over chronological balance sequences"""

import statistics
from decimal import Decimal
from typing import List, Optional, Sequence

from udp_balance.domain.models import Trend

Number = Decimal | float | int


def percent_changes(values: Optional[Sequence[Number]]) -> List[float]:
    """Consecutive percentage changes, skipping pairs whose previous value is 0"""
    values = list(values or ())
    changes = []
    for prev, curr in zip(values, values[1:]):
        if prev == 0:
            continue
        changes.append(float((curr - prev) / abs(prev)) * 100)
    return changes


def volatility(balances: Optional[Sequence[Number]]) -> float:
    """
    Volatility index: population standard deviation of percentage changes.

    Requirements:
    - Input in chronological order (per transaction or month-end balances)
    - Pairs with a zero previous balance are skipped, not treated as infinite
    - Fewer than 2 usable pairs yields 0.0
    """
    changes = percent_changes(list(balances or ()))
    if len(changes) < 2:
        return 0.0
    return statistics.pstdev(changes)


def trend(values: Optional[Sequence[Number]]) -> Trend:
    """
    First-to-last change of a chronological sequence.

    Zero change counts as positive. With fewer than 2 values there is no trend.
    """
    values = list(values or ())
    if len(values) < 2:
        return Trend(change=Decimal(0), change_percent=0.0, is_positive=True)

    first, last = values[0], values[-1]
    change = last - first
    change_percent = float(change / abs(first)) * 100 if first != 0 else 0.0
    return Trend(change=change, change_percent=change_percent, is_positive=change >= 0)


def relative_change(current: Number, previous: Number) -> float:
    """
    Percentage change against ``previous``, dividing by 1 when it is 0.

    Matches the month-over-month figures the dashboard already shows, which can
    exceed 100% when the previous value is small.
    """
    denominator = abs(previous) or 1
    return float((current - previous) / denominator) * 100
