"""Domain models - pure Python dataclasses representing ledger entities and derived summaries"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from functools import cached_property
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Transaction:
    """Signed ledger entry of a UDP account, as returned by the backend"""

    id: str
    timestamp: datetime  # naive UTC
    type: str
    amount: Decimal  # positive = inflow, negative = outflow
    balance_after: Decimal
    description: str


@dataclass(frozen=True)
class TransactionSet:
    """Immutable snapshot of an account's transactions, in input order"""

    transactions: Tuple[Transaction, ...] = ()
    account_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions)

    @cached_property
    def fingerprint(self) -> str:
        """SHA-256 over the snapshot content, usable as a cache key"""
        canonical = json.dumps(
            {
                "account_id": self.account_id,
                "transactions": [
                    [
                        t.id,
                        t.timestamp.isoformat(),
                        t.type,
                        str(t.amount),
                        str(t.balance_after),
                        t.description,
                    ]
                    for t in self.transactions
                ],
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TimeWindow:
    """Absolute, inclusive time bounds; None means unbounded"""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    label: str = "custom"

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


@dataclass(frozen=True)
class TypeBucket:
    """Aggregate of all transactions sharing a type label"""

    type: str
    count: int
    total_absolute_amount: Decimal
    average_absolute_amount: Decimal
    palette_index: int
    color: str

    def share_percent(self, grand_total: Decimal) -> float:
        """Share of the overall moved amount, 0 when nothing moved"""
        if grand_total == 0:
            return 0.0
        return float(self.total_absolute_amount / grand_total * 100)


@dataclass(frozen=True)
class TypeSummary:
    """Totals across every type bucket"""

    distinct_types: int
    total_amount: Decimal
    total_transactions: int
    overall_average: Decimal


@dataclass(frozen=True)
class MonthBucket:
    """Flow and ending balance for one calendar month"""

    year: int
    month: int
    income: Decimal
    expenses: Decimal
    net: Decimal
    transaction_count: int
    end_balance: Decimal

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthlyTrends:
    """Last month compared with the one before it, in percent"""

    balance_trend_percent: float
    income_trend_percent: float


@dataclass(frozen=True)
class Trend:
    """Directional change between the first and last value of a sequence"""

    change: Decimal
    change_percent: float
    is_positive: bool


@dataclass(frozen=True)
class SeriesPoint:
    """Chart point; keeps a read-only reference to its transaction"""

    timestamp: datetime
    balance: Decimal
    source_transaction: Optional[Transaction] = None


@dataclass(frozen=True)
class SeriesSummary:
    """Headline figures shown above the balance chart"""

    current_balance: Decimal
    highest_balance: Decimal
    lowest_balance: Decimal
    trend: Trend


@dataclass(frozen=True)
class CardTrends:
    """Percentages displayed on the summary cards"""

    balance: float
    income_share: float
    expense_share: float
    net_share: float


@dataclass(frozen=True)
class BalanceMetrics:
    """Summary card figures for a window of transactions"""

    current_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_flow: Decimal
    transaction_count: int
    average_transaction: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_net: Decimal
    last_transaction: Optional[Transaction]
    highest_balance: Decimal
    lowest_balance: Decimal
    volatility_index: float
    card_trends: CardTrends


@dataclass(frozen=True)
class DashboardReport:
    """Everything the balance dashboard renders for one account and window"""

    account_id: Optional[str]
    window: TimeWindow
    transactions: Tuple[Transaction, ...]
    series: List[SeriesPoint] = field(default_factory=list)
    series_summary: Optional[SeriesSummary] = None
    type_buckets: List[TypeBucket] = field(default_factory=list)
    type_summary: Optional[TypeSummary] = None
    month_buckets: List[MonthBucket] = field(default_factory=list)
    monthly_trends: Optional[MonthlyTrends] = None
    metrics: Optional[BalanceMetrics] = None
