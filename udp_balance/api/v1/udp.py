"""GET /v1/udp/{udp_id}/* - Dashboard and export for a UDP account fetched from the ledger"""

import time
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from udp_balance.api.v1.schemas import DashboardResponse
from udp_balance.api.v1.presenters import (
    csv_filename,
    csv_response,
    default_escape_policy,
    render_csv,
    to_dashboard_response,
    window_spec,
)
from udp_balance.api.dependencies import get_dashboard_cache, get_ledger_client, get_now, get_request_id
from udp_balance.infrastructure.cache import DashboardCache
from udp_balance.infrastructure.clients.ledger import LedgerClient
from udp_balance.domain.exceptions import InvalidWindowError, LedgerAPIError, ParseError
from udp_balance.domain.export import EscapePolicy
from udp_balance.domain.models import TimeWindow, TransactionSet
from udp_balance.domain.windowing import resolve_window
from udp_balance.infrastructure.observability.metrics import (
    csv_export_counter,
    parse_failures_counter,
    record_dashboard,
)
from udp_balance.infrastructure.observability.logging import log_dashboard, log_export

router = APIRouter()


async def _fetch_window(
    udp_id: str,
    time_range: Optional[str],
    start: Optional[str],
    end: Optional[str],
    now: datetime,
    ledger_client: LedgerClient,
    request_id: str,
) -> tuple[TransactionSet, TimeWindow]:
    """Resolve the window and fetch the account's history bounded by it"""
    try:
        window = resolve_window(window_spec(time_range, start, end), now)
        transaction_set = await ledger_client.get_balance_history(udp_id, window.start, window.end)
        return transaction_set, window

    except InvalidWindowError as e:
        logging.warning(f"Invalid window: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except LedgerAPIError as e:
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    except ParseError as e:
        parse_failures_counter.inc()
        logging.error(f"Ledger returned unparsable transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/udp/{udp_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    udp_id: str,
    request: Request,
    time_range: Optional[str] = Query(None, alias="range", description="7d | 30d | 90d | 1y | all"),
    start: Optional[str] = Query(None, description="Inclusive ISO start"),
    end: Optional[str] = Query(None, description="Inclusive ISO end"),
    now: datetime = Depends(get_now),
    ledger_client: LedgerClient = Depends(get_ledger_client),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """
    Fetch a UDP account's balance history and build its dashboard.

    Returns:
        Series, type and month buckets, trends and summary card metrics
    """
    start_time = time.time()
    request_id = get_request_id(request)

    transaction_set, window = await _fetch_window(
        udp_id, time_range, start, end, now, ledger_client, request_id
    )
    report, cache_hit = cache.get_or_build(transaction_set, window, now)

    duration_ms = (time.time() - start_time) * 1000
    record_dashboard(window.label, len(report.transactions))
    log_dashboard(request_id, udp_id, window.label, len(report.transactions), cache_hit, duration_ms)

    return to_dashboard_response(report)


@router.get("/udp/{udp_id}/export")
async def get_export(
    udp_id: str,
    request: Request,
    time_range: Optional[str] = Query(None, alias="range", description="7d | 30d | 90d | 1y | all"),
    start: Optional[str] = Query(None, description="Inclusive ISO start"),
    end: Optional[str] = Query(None, description="Inclusive ISO end"),
    escape: Optional[EscapePolicy] = Query(None, description="none | double_quotes"),
    now: datetime = Depends(get_now),
    ledger_client: LedgerClient = Depends(get_ledger_client),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """Download the account's windowed transactions as CSV, oldest first"""
    request_id = get_request_id(request)
    escape = escape or default_escape_policy()

    transaction_set, window = await _fetch_window(
        udp_id, time_range, start, end, now, ledger_client, request_id
    )
    report, _ = cache.get_or_build(transaction_set, window, now)

    filename = csv_filename(udp_id, window, report.transactions)
    csv_export_counter.labels(escape_policy=escape.value).inc()
    log_export(request_id, udp_id, filename, len(report.transactions), escape.value)

    return csv_response(render_csv(report.transactions, escape), filename)
