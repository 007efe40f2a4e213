"""Translation between HTTP parameters, domain objects and response schemas"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from starlette.responses import Response

from udp_balance.api.v1.schemas import (
    CardTrendsSchema,
    DashboardResponse,
    MetricsSchema,
    MonthBucketSchema,
    MonthlyTrendsSchema,
    SeriesPointSchema,
    SeriesSummarySchema,
    TransactionSchema,
    TrendSchema,
    TypeBucketSchema,
    TypeSummarySchema,
    WindowSchema,
)
from udp_balance.config import settings
from udp_balance.domain.exceptions import InvalidWindowError
from udp_balance.domain.export import CSV_MEDIA_TYPE, EscapePolicy, export_filename, to_csv
from udp_balance.domain.models import DashboardReport, TimeWindow, Transaction, Trend
from udp_balance.domain.windowing import WindowSpec
from udp_balance.utils.date_utils import parse_timestamp

RECENT_TRANSACTIONS_LIMIT = 10


def parse_bound(value: Optional[str]) -> date | datetime | None:
    """ISO bound from a query/body string; bare dates stay dates"""
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        if len(text) == 10 and "T" not in text:
            return date.fromisoformat(text)
        return parse_timestamp(text)
    except ValueError as e:
        raise InvalidWindowError(f"Invalid date bound {value!r}") from e


def window_spec(time_range: Optional[str], start: Optional[str], end: Optional[str]) -> WindowSpec:
    """Explicit bounds take precedence over a named range"""
    if start or end:
        return (parse_bound(start), parse_bound(end))
    return time_range or settings.default_time_range


def default_escape_policy() -> EscapePolicy:
    return EscapePolicy(settings.csv_escape_policy)


def _transaction(t: Transaction) -> TransactionSchema:
    return TransactionSchema(
        id=t.id,
        timestamp=t.timestamp,
        type=t.type,
        amount=float(t.amount),
        balance_after=float(t.balance_after),
        description=t.description,
    )


def _trend(trend: Trend) -> TrendSchema:
    return TrendSchema(
        change=float(trend.change),
        change_percent=trend.change_percent,
        is_positive=trend.is_positive,
    )


def to_dashboard_response(report: DashboardReport) -> DashboardResponse:
    """Flatten a DashboardReport into JSON-friendly schemas"""
    summary = report.series_summary
    type_summary = report.type_summary
    metrics = report.metrics
    recent = list(reversed(report.transactions[-RECENT_TRANSACTIONS_LIMIT:]))

    return DashboardResponse(
        account_id=report.account_id,
        window=WindowSchema(label=report.window.label, start=report.window.start, end=report.window.end),
        series=[
            SeriesPointSchema(
                timestamp=p.timestamp,
                balance=float(p.balance),
                transaction_id=p.source_transaction.id if p.source_transaction else None,
            )
            for p in report.series
        ],
        series_summary=SeriesSummarySchema(
            current_balance=float(summary.current_balance),
            highest_balance=float(summary.highest_balance),
            lowest_balance=float(summary.lowest_balance),
            trend=_trend(summary.trend),
        ),
        type_buckets=[
            TypeBucketSchema(
                type=b.type,
                count=b.count,
                total_absolute_amount=float(b.total_absolute_amount),
                average_absolute_amount=float(b.average_absolute_amount),
                share_percent=b.share_percent(type_summary.total_amount),
                palette_index=b.palette_index,
                color=b.color,
            )
            for b in report.type_buckets
        ],
        type_summary=TypeSummarySchema(
            distinct_types=type_summary.distinct_types,
            total_amount=float(type_summary.total_amount),
            total_transactions=type_summary.total_transactions,
            overall_average=float(type_summary.overall_average),
        ),
        month_buckets=[
            MonthBucketSchema(
                label=m.label,
                year=m.year,
                month=m.month,
                income=float(m.income),
                expenses=float(m.expenses),
                net=float(m.net),
                transaction_count=m.transaction_count,
                end_balance=float(m.end_balance),
            )
            for m in report.month_buckets
        ],
        monthly_trends=MonthlyTrendsSchema(
            balance_trend_percent=report.monthly_trends.balance_trend_percent,
            income_trend_percent=report.monthly_trends.income_trend_percent,
        ),
        metrics=MetricsSchema(
            current_balance=float(metrics.current_balance),
            total_income=float(metrics.total_income),
            total_expenses=float(metrics.total_expenses),
            net_flow=float(metrics.net_flow),
            transaction_count=metrics.transaction_count,
            average_transaction=float(metrics.average_transaction),
            monthly_income=float(metrics.monthly_income),
            monthly_expenses=float(metrics.monthly_expenses),
            monthly_net=float(metrics.monthly_net),
            last_transaction=_transaction(metrics.last_transaction) if metrics.last_transaction else None,
            highest_balance=float(metrics.highest_balance),
            lowest_balance=float(metrics.lowest_balance),
            volatility_index=metrics.volatility_index,
            card_trends=CardTrendsSchema(
                balance=metrics.card_trends.balance,
                income_share=metrics.card_trends.income_share,
                expense_share=metrics.card_trends.expense_share,
                net_share=metrics.card_trends.net_share,
            ),
        ),
        recent_transactions=[_transaction(t) for t in recent],
    )


def csv_filename(account_id: Optional[str], window: TimeWindow, rows: Sequence[Transaction]) -> str:
    """Name after the window bounds, falling back to the exported rows for open ends"""
    timestamps: List[datetime] = [t.timestamp for t in rows]
    start = window.start or (min(timestamps) if timestamps else None)
    end = window.end or (max(timestamps) if timestamps else None)
    return export_filename(account_id, start, end)


def csv_response(csv_text: str, filename: str) -> Response:
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def render_csv(rows: Sequence[Transaction], escape: EscapePolicy) -> str:
    return to_csv(rows, escape=escape, date_format=settings.csv_date_format)
