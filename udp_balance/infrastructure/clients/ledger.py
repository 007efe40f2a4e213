"""Ledger API HTTP client for fetching UDP balance history"""

import httpx
from datetime import datetime
from typing import Any, Dict
from udp_balance.domain.models import TransactionSet
from udp_balance.domain.parsing import parse_transactions
from udp_balance.domain.exceptions import LedgerAPIError
from udp_balance.config import settings
from udp_balance.infrastructure.observability.metrics import (
    ledger_fetch_failures_counter,
    ledger_fetch_latency_histogram,
)


class LedgerClient:
    """Client for the backend that stores UDP balance history"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ledger_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_balance_history(
        self,
        udp_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> TransactionSet:
        """
        Fetch balance history for a UDP account, optionally bounded by date.

        Raises:
            LedgerAPIError: On timeout, HTTP errors, or a malformed payload
            ParseError: When a record carries an unparsable field
        """
        params: Dict[str, Any] = {}
        if start is not None:
            params["startDate"] = start.strftime("%Y-%m-%dT%H:%M:%S")
        if end is not None:
            params["endDate"] = end.strftime("%Y-%m-%dT%H:%M:%S")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with ledger_fetch_latency_histogram.time():
                    response = await client.get(
                        f"{self.base_url}/udp/{udp_id}/balance-history",
                        params=params,
                    )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                ledger_fetch_failures_counter.inc()
                raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                ledger_fetch_failures_counter.inc()
                raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                ledger_fetch_failures_counter.inc()
                raise LedgerAPIError(f"Ledger API unreachable: {e}") from e
            except ValueError as e:
                ledger_fetch_failures_counter.inc()
                raise LedgerAPIError(f"Invalid JSON from ledger: {e}") from e

        records = data.get("transactions") if isinstance(data, dict) else data
        if not isinstance(records, list):
            ledger_fetch_failures_counter.inc()
            raise LedgerAPIError("Ledger response carries no transaction list")

        return parse_transactions(records, account_id=str(udp_id))
