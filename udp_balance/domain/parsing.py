"""Normalization of raw ledger records into domain transactions"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from udp_balance.domain.exceptions import ParseError
from udp_balance.domain.models import Transaction, TransactionSet
from udp_balance.utils.date_utils import parse_timestamp

# Backend field name -> accepted aliases, first match wins
FIELD_ALIASES = {
    "id": ("id_UDPBalanceHistory", "id"),
    "timestamp": ("transactionDate", "timestamp"),
    "type": ("transactionType", "type"),
    "amount": ("amount",),
    "balance_after": ("balanceAfterTransaction", "balance_after", "balanceAfter"),
    "description": ("description",),
}


def _lookup(record: Mapping[str, Any], field: str, record_id: Any) -> Any:
    for key in FIELD_ALIASES[field]:
        if key in record:
            return record[key]
    raise ParseError(record_id, field, None, "missing")


def _to_decimal(value: Any, field: str, record_id: Any) -> Decimal:
    if isinstance(value, bool):
        raise ParseError(record_id, field, value, "not a number")
    try:
        # str() first so floats keep their shortest repr instead of binary noise
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ParseError(record_id, field, value, "not a number") from e
    if not result.is_finite():
        raise ParseError(record_id, field, value, "not finite")
    return result


def parse_transaction(record: Mapping[str, Any], position: int = 0) -> Transaction:
    """
    Build a Transaction from a backend JSON record.

    Raises:
        ParseError: naming the record when a field is missing or unparsable
    """
    if not isinstance(record, Mapping):
        raise ParseError(f"#{position}", "record", record, "not an object")

    record_id = next(
        (record[key] for key in FIELD_ALIASES["id"] if key in record),
        f"#{position}",
    )

    raw_timestamp = _lookup(record, "timestamp", record_id)
    try:
        timestamp = parse_timestamp(raw_timestamp)
    except (ValueError, TypeError) as e:
        raise ParseError(record_id, "timestamp", raw_timestamp, str(e)) from e

    type_label = _lookup(record, "type", record_id)
    if type_label is None:
        raise ParseError(record_id, "type", type_label, "missing")

    description = record.get("description")

    return Transaction(
        id=str(record_id),
        timestamp=timestamp,
        type=str(type_label),
        amount=_to_decimal(_lookup(record, "amount", record_id), "amount", record_id),
        balance_after=_to_decimal(
            _lookup(record, "balance_after", record_id), "balance_after", record_id
        ),
        description="" if description is None else str(description),
    )


def parse_transactions(
    records: Optional[Iterable[Mapping[str, Any]]],
    account_id: Optional[str] = None,
) -> TransactionSet:
    """Parse every record; a single bad record fails the whole batch"""
    transactions: List[Transaction] = [
        parse_transaction(record, position) for position, record in enumerate(records or ())
    ]
    return TransactionSet(transactions=tuple(transactions), account_id=account_id)
