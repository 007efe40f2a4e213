"""Dashboard composition - main entry point of the analytics engine"""

from datetime import datetime
from typing import Optional, Sequence

from udp_balance.domain.aggregation import (
    DEFAULT_PALETTE,
    aggregate_by_month,
    aggregate_by_type,
    month_over_month,
    summarize_types,
)
from udp_balance.domain.metrics import compute_metrics
from udp_balance.domain.models import DashboardReport, TransactionSet
from udp_balance.domain.ordering import sort_chronologically
from udp_balance.domain.series import build_series, summarize_series
from udp_balance.domain.windowing import WindowSpec, filter_transactions, resolve_window
from udp_balance.utils.date_utils import to_naive_utc, utc_now


def build_dashboard(
    transaction_set: Optional[TransactionSet],
    window: WindowSpec = "all",
    now: Optional[datetime] = None,
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> DashboardReport:
    """
    Run every stage for one account and window.

    Flow:
    1. Resolve the window against ``now`` and filter the snapshot
    2. Order the survivors chronologically
    3. Build series, type buckets, month buckets and card metrics from them

    Pure: the snapshot is never modified and nothing is cached here.
    """
    if transaction_set is None:
        transaction_set = TransactionSet()
    now = to_naive_utc(now) if now is not None else utc_now()
    resolved = resolve_window(window, now)
    in_window = sort_chronologically(filter_transactions(transaction_set, resolved))

    series = build_series(in_window)
    type_buckets = aggregate_by_type(in_window, palette)
    month_buckets = aggregate_by_month(in_window)

    return DashboardReport(
        account_id=transaction_set.account_id,
        window=resolved,
        transactions=tuple(in_window),
        series=series,
        series_summary=summarize_series(series),
        type_buckets=type_buckets,
        type_summary=summarize_types(type_buckets),
        month_buckets=month_buckets,
        monthly_trends=month_over_month(month_buckets),
        metrics=compute_metrics(in_window, now),
    )
