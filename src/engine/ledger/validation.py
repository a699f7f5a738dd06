"""Transaction validation.

Shape checks run during replay and on insert; the total check runs only on
insert (replay trusts the caller-supplied total).
"""

from __future__ import annotations

from fractions import Fraction

from src.data.models.enums import TransactionKind
from src.data.models.transaction import Transaction
from src.data.utils.amounts import to_amount
from src.engine.ledger.errors import ErrorKind, LedgerIssue

# Cent rounding applied by entry forms
DEFAULT_TOTAL_TOLERANCE = Fraction(1, 100)


def _issue(tx: Transaction, kind: ErrorKind, message: str) -> LedgerIssue:
    return LedgerIssue(
        kind=kind,
        transaction_id=tx.id,
        transaction_kind=tx.kind,
        asset_id=tx.asset_id,
        message=message,
    )


def check_shape(tx: Transaction) -> LedgerIssue | None:
    """Check sign conventions and non-negative amounts for a transaction.

    Args:
        tx: Transaction to check.

    Returns:
        An INVALID_TRANSACTION issue, or None when the shape is valid.
    """
    q = tx.quantity_change
    if tx.kind.is_increasing and q <= 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, f"{tx.kind.value} requires a positive quantity change, got {q}")
    if tx.kind.is_decreasing and q >= 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, f"{tx.kind.value} requires a negative quantity change, got {q}")
    if tx.kind is TransactionKind.BALANCE_ADJUSTMENT and q == 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, "BalanceAdjustment requires a non-zero quantity change")
    if tx.price_per_unit < 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, f"price_per_unit must be >= 0, got {tx.price_per_unit}")
    if tx.fee < 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, f"fee must be >= 0, got {tx.fee}")
    if (tx.kind.is_increasing or (tx.kind is TransactionKind.BALANCE_ADJUSTMENT and q > 0)) and tx.total < 0:
        return _issue(tx, ErrorKind.INVALID_TRANSACTION, f"total must be >= 0 for {tx.kind.value}, got {tx.total}")
    return None


def check_total(tx: Transaction, tolerance: Fraction | str = DEFAULT_TOTAL_TOLERANCE) -> LedgerIssue | None:
    """Check the caller-supplied total against the expected arithmetic.

    A Dividend with zero quantity carries its cash amount directly and is
    not checked.

    Args:
        tx: Transaction to check.
        tolerance: Maximum accepted absolute difference.

    Returns:
        An INCONSISTENT_TOTAL issue, or None when the total is consistent.
    """
    if tx.kind is TransactionKind.DIVIDEND and tx.quantity_change == 0:
        return None
    expected = tx.expected_total
    if abs(tx.total - expected) > to_amount(tolerance):
        return _issue(
            tx,
            ErrorKind.INCONSISTENT_TOTAL,
            f"total {float(tx.total):.2f} differs from expected {float(expected):.2f}",
        )
    return None


def validate_transaction(
    tx: Transaction,
    tolerance: Fraction | str = DEFAULT_TOTAL_TOLERANCE,
) -> LedgerIssue | None:
    """Run the insert-time checks (shape, then total)."""
    return check_shape(tx) or check_total(tx, tolerance)
