"""Data utilities package."""

from .amounts import (
    ZERO,
    AmountLike,
    amount_from_json,
    amount_to_json,
    format_amount,
    to_amount,
    to_decimal,
)
from .dates import parse_ledger_date

__all__ = [
    "ZERO",
    "AmountLike",
    "amount_from_json",
    "amount_to_json",
    "format_amount",
    "parse_ledger_date",
    "to_amount",
    "to_decimal",
]
