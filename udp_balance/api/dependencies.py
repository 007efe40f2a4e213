"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from fastapi import Request
from udp_balance.infrastructure.cache import DashboardCache, dashboard_cache
from udp_balance.infrastructure.clients.ledger import LedgerClient
from udp_balance.utils.date_utils import utc_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_client() -> LedgerClient:
    """Provide Ledger API client instance"""
    return LedgerClient()


def get_dashboard_cache() -> DashboardCache:
    """Provide the process-wide dashboard cache"""
    return dashboard_cache


def get_now() -> datetime:
    """Reference instant for named ranges; the cache buckets it by minute, the window does not"""
    return utc_now()
