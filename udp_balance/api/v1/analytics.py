"""POST /v1/analytics/* - Run the analytics engine over transactions supplied in the body"""

import time
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request

from udp_balance.api.v1.schemas import DashboardRequest, DashboardResponse, ExportRequest
from udp_balance.api.v1.presenters import (
    csv_filename,
    csv_response,
    default_escape_policy,
    render_csv,
    to_dashboard_response,
    window_spec,
)
from udp_balance.api.dependencies import get_dashboard_cache, get_now, get_request_id
from udp_balance.infrastructure.cache import DashboardCache
from udp_balance.domain.exceptions import InvalidWindowError, ParseError
from udp_balance.domain.ordering import sort_chronologically
from udp_balance.domain.parsing import parse_transactions
from udp_balance.domain.windowing import filter_transactions, resolve_window
from udp_balance.infrastructure.observability.metrics import (
    csv_export_counter,
    parse_failures_counter,
    record_dashboard,
)
from udp_balance.infrastructure.observability.logging import log_dashboard, log_export

router = APIRouter()


@router.post("/analytics/dashboard", response_model=DashboardResponse)
def create_dashboard(
    request_body: DashboardRequest,
    request: Request,
    now: datetime = Depends(get_now),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """
    Build the full dashboard for the supplied transactions.

    Flow:
    1. Parse raw records into an immutable snapshot
    2. Resolve the requested window against now
    3. Build (or reuse) the report keyed by snapshot content
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        transaction_set = parse_transactions(request_body.transactions, account_id=request_body.account_id)
        window = resolve_window(
            window_spec(request_body.time_range, request_body.start, request_body.end),
            now,
        )
        report, cache_hit = cache.get_or_build(transaction_set, window, now)

    except ParseError as e:
        parse_failures_counter.inc()
        logging.warning(f"Unparsable transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except InvalidWindowError as e:
        logging.warning(f"Invalid window: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_dashboard(window.label, len(report.transactions))
    log_dashboard(request_id, request_body.account_id, window.label, len(report.transactions), cache_hit, duration_ms)

    return to_dashboard_response(report)


@router.post("/analytics/export")
def export_csv(
    request_body: ExportRequest,
    request: Request,
    now: datetime = Depends(get_now),
):
    """
    Export the windowed transactions as a CSV download.

    Rows are chronological unless ``chronological`` is false, in which case the
    input order is kept.
    """
    request_id = get_request_id(request)
    escape = request_body.escape or default_escape_policy()

    try:
        transaction_set = parse_transactions(request_body.transactions, account_id=request_body.account_id)
        window = resolve_window(
            window_spec(request_body.time_range, request_body.start, request_body.end),
            now,
        )
    except ParseError as e:
        parse_failures_counter.inc()
        logging.warning(f"Unparsable transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidWindowError as e:
        logging.warning(f"Invalid window: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    rows = filter_transactions(transaction_set, window)
    if request_body.chronological:
        rows = sort_chronologically(rows)

    filename = csv_filename(request_body.account_id, window, rows)
    csv_export_counter.labels(escape_policy=escape.value).inc()
    log_export(request_id, request_body.account_id, filename, len(rows), escape.value)

    return csv_response(render_csv(rows, escape), filename)
