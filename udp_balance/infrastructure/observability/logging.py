"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

from udp_balance.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_dashboard(
    request_id: str,
    account_id: str | None,
    window_label: str,
    transaction_count: int,
    cache_hit: bool,
    duration_ms: float,
) -> None:
    """Log structured dashboard computation outcome"""
    logging.info(
        "Dashboard built",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "dashboard_complete",
            "window": window_label,
            "transaction_count": transaction_count,
            "cache_hit": cache_hit,
            "duration_ms": duration_ms,
        },
    )


def log_export(
    request_id: str,
    account_id: str | None,
    filename: str,
    row_count: int,
    escape_policy: str,
) -> None:
    """Log structured CSV export outcome"""
    logging.info(
        "CSV exported",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "export_complete",
            "export_filename": filename,
            "row_count": row_count,
            "escape_policy": escape_policy,
        },
    )
