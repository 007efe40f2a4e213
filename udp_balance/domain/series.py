"""Balance-over-time series for the chart layer"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from udp_balance.domain.models import SeriesPoint, SeriesSummary, Transaction
from udp_balance.domain.ordering import sort_chronologically
from udp_balance.domain.statistics import trend


def build_series(transactions: Optional[Iterable[Transaction]]) -> List[SeriesPoint]:
    """One point per transaction, in chronological order"""
    return [
        SeriesPoint(timestamp=t.timestamp, balance=t.balance_after, source_transaction=t)
        for t in sort_chronologically(transactions)
    ]


def summarize_series(points: Optional[Sequence[SeriesPoint]]) -> SeriesSummary:
    """Current, highest and lowest balance plus the first-to-last trend"""
    if not points:
        zero = Decimal(0)
        return SeriesSummary(
            current_balance=zero,
            highest_balance=zero,
            lowest_balance=zero,
            trend=trend([]),
        )

    balances = [p.balance for p in points]
    return SeriesSummary(
        current_balance=balances[-1],
        highest_balance=max(balances),
        lowest_balance=min(balances),
        trend=trend(balances),
    )
