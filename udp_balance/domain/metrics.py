"""Summary card metrics for a window of transactions"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from udp_balance.domain.models import BalanceMetrics, CardTrends, Transaction
from udp_balance.domain.ordering import sort_chronologically
from udp_balance.domain.statistics import volatility
from udp_balance.utils.date_utils import is_same_month, to_naive_utc, utc_now

ZERO = Decimal(0)


def _income(transactions: list[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions if t.amount > 0), ZERO)


def _expenses(transactions: list[Transaction]) -> Decimal:
    return sum((-t.amount for t in transactions if t.amount < 0), ZERO)


def card_trends(
    current_balance: Decimal,
    total_income: Decimal,
    total_expenses: Decimal,
    net_flow: Decimal,
    monthly_income: Decimal,
    monthly_expenses: Decimal,
    monthly_net: Decimal,
) -> CardTrends:
    """
    Percentages shown under each card.

    Denominators are the ones the dashboard has always used (net flow against
    current balance, month against all-time totals), so values may exceed 100%.
    """
    balance = float(net_flow / (abs(current_balance) or 1)) * 100 if net_flow != 0 else 0.0
    income_share = float(monthly_income / total_income) * 100 if monthly_income != 0 else 0.0
    expense_share = float(monthly_expenses / total_expenses) * 100 if monthly_expenses != 0 else 0.0
    net_share = abs(float(monthly_net / (net_flow or 1))) * 100 if monthly_net != 0 else 0.0
    return CardTrends(
        balance=balance,
        income_share=income_share,
        expense_share=expense_share,
        net_share=net_share,
    )


def compute_metrics(
    transactions: Optional[Iterable[Transaction]],
    now: Optional[datetime] = None,
) -> BalanceMetrics:
    """
    Headline figures for the summary cards.

    Requirements:
    - current balance = balance after the chronologically last transaction
    - monthly figures cover the calendar month of ``now``
    - volatility over the per-transaction balance sequence
    - empty input yields zeros and no last transaction
    """
    ordered = sort_chronologically(transactions)
    now = to_naive_utc(now) if now is not None else utc_now()

    total_income = _income(ordered)
    total_expenses = _expenses(ordered)
    net_flow = total_income - total_expenses
    count = len(ordered)
    moved = sum((abs(t.amount) for t in ordered), ZERO)

    this_month = [t for t in ordered if is_same_month(t.timestamp, now)]
    monthly_income = _income(this_month)
    monthly_expenses = _expenses(this_month)
    monthly_net = monthly_income - monthly_expenses

    balances = [t.balance_after for t in ordered]
    current_balance = balances[-1] if balances else ZERO

    return BalanceMetrics(
        current_balance=current_balance,
        total_income=total_income,
        total_expenses=total_expenses,
        net_flow=net_flow,
        transaction_count=count,
        average_transaction=moved / count if count else ZERO,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_net=monthly_net,
        last_transaction=ordered[-1] if ordered else None,
        highest_balance=max(balances, default=ZERO),
        lowest_balance=min(balances, default=ZERO),
        volatility_index=volatility(balances),
        card_trends=card_trends(
            current_balance,
            total_income,
            total_expenses,
            net_flow,
            monthly_income,
            monthly_expenses,
            monthly_net,
        ),
    )
