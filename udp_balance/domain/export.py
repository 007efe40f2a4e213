"""CSV export of a transaction sequence"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from udp_balance.domain.models import Transaction

CSV_HEADER = ("Date", "Type", "Amount", "BalanceAfter", "Description")
CSV_MEDIA_TYPE = "text/csv"
DEFAULT_DATE_FORMAT = "%d/%m/%Y %H:%M"


class EscapePolicy(str, Enum):
    """How embedded double quotes in descriptions are written"""

    NONE = "none"  # written verbatim, output is not RFC 4180 safe
    DOUBLE_QUOTES = "double_quotes"  # "" per RFC 4180


def format_decimal(value: Decimal) -> str:
    """Plain fixed-point rendering, never scientific notation"""
    return format(value, "f")


def quote_description(description: str, escape: EscapePolicy = EscapePolicy.NONE) -> str:
    if escape is EscapePolicy.DOUBLE_QUOTES:
        description = description.replace('"', '""')
    return f'"{description}"'


def to_csv(
    transactions: Optional[Iterable[Transaction]],
    escape: EscapePolicy = EscapePolicy.NONE,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """
    Render transactions as comma-separated text, in the order supplied.

    Requirements:
    - Header row Date,Type,Amount,BalanceAfter,Description
    - Description always wrapped in double quotes
    - Amounts as plain decimals, no currency symbol
    - Empty or None input yields the header only
    """
    lines = [",".join(CSV_HEADER)]
    for t in transactions or ():
        lines.append(
            ",".join(
                [
                    t.timestamp.strftime(date_format),
                    t.type,
                    format_decimal(t.amount),
                    format_decimal(t.balance_after),
                    quote_description(t.description, escape),
                ]
            )
        )
    return "\n".join(lines)


def _filename_part(value: date | datetime | None, fallback: str) -> str:
    if value is None:
        return fallback
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def export_filename(
    account_id: Optional[str],
    start: date | datetime | None,
    end: date | datetime | None,
) -> str:
    """Download name built from the account and the selected range"""
    return (
        f"udp_balance_{account_id or 'unknown'}_"
        f"{_filename_part(start, 'start')}_{_filename_part(end, 'end')}.csv"
    )
