"""Grouping of transactions by type and by calendar month"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from udp_balance.domain.models import MonthBucket, MonthlyTrends, Transaction, TypeBucket, TypeSummary
from udp_balance.domain.ordering import group_by, sort_chronologically
from udp_balance.domain.statistics import relative_change

# Rendering hint only, never used for grouping
DEFAULT_PALETTE = (
    "#3B82F6",  # blue
    "#10B981",  # green
    "#F59E0B",  # yellow
    "#EF4444",  # red
    "#8B5CF6",  # purple
    "#06B6D4",  # cyan
    "#84CC16",  # lime
    "#F97316",  # orange
    "#EC4899",  # pink
    "#6B7280",  # gray
)

ZERO = Decimal(0)


def aggregate_by_type(
    transactions: Optional[Iterable[Transaction]],
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> List[TypeBucket]:
    """
    One bucket per distinct type label, largest moved amount first.

    Requirements:
    - Exact string equality on ``type``; unseen labels need no code change
    - Totals and averages over |amount|
    - Ties keep first-appearance order (sorted() is stable)
    - Palette slot = first-appearance index mod palette size
    """
    buckets = []
    for index, (type_label, members) in enumerate(group_by(transactions, lambda t: t.type)):
        total = sum((abs(t.amount) for t in members), ZERO)
        slot = index % len(palette) if palette else 0
        buckets.append(
            TypeBucket(
                type=type_label,
                count=len(members),
                total_absolute_amount=total,
                average_absolute_amount=total / len(members),
                palette_index=slot,
                color=palette[slot] if palette else "",
            )
        )

    return sorted(buckets, key=lambda b: b.total_absolute_amount, reverse=True)


def summarize_types(buckets: Optional[Sequence[TypeBucket]]) -> TypeSummary:
    """Grand totals across buckets; average is 0 when there are no transactions"""
    buckets = buckets or ()
    total_amount = sum((b.total_absolute_amount for b in buckets), ZERO)
    total_transactions = sum(b.count for b in buckets)
    return TypeSummary(
        distinct_types=len(buckets),
        total_amount=total_amount,
        total_transactions=total_transactions,
        overall_average=total_amount / total_transactions if total_transactions else ZERO,
    )


def aggregate_by_month(transactions: Optional[Iterable[Transaction]]) -> List[MonthBucket]:
    """
    One bucket per (year, month) of the transaction timestamps, oldest first.

    Requirements:
    - income = sum of positive amounts, expenses = sum of |negative amounts|
    - net = income - expenses
    - end_balance = balance after the chronologically last transaction of the month
    """
    # Sorting first makes every group chronological with input order as tie-break
    ordered = sort_chronologically(transactions)

    buckets = []
    for (year, month), members in group_by(ordered, lambda t: (t.timestamp.year, t.timestamp.month)):
        income = sum((t.amount for t in members if t.amount > 0), ZERO)
        expenses = sum((-t.amount for t in members if t.amount < 0), ZERO)
        buckets.append(
            MonthBucket(
                year=year,
                month=month,
                income=income,
                expenses=expenses,
                net=income - expenses,
                transaction_count=len(members),
                end_balance=members[-1].balance_after,
            )
        )

    return sorted(buckets, key=lambda b: (b.year, b.month))


def month_over_month(buckets: Optional[Sequence[MonthBucket]]) -> MonthlyTrends:
    """Compare the last two months; a single month has no trend"""
    if not buckets or len(buckets) < 2:
        return MonthlyTrends(balance_trend_percent=0.0, income_trend_percent=0.0)

    previous, current = buckets[-2], buckets[-1]
    return MonthlyTrends(
        balance_trend_percent=relative_change(current.end_balance, previous.end_balance),
        income_trend_percent=relative_change(current.income, previous.income),
    )
