"""Asset and transaction enumerations."""

from enum import Enum


class AssetClass(Enum):
    """Asset class enumeration."""

    STOCK = "STOCK"
    CRYPTO = "CRYPTO"
    FUND = "FUND"
    CASH = "CASH"
    REAL_ESTATE = "REAL_ESTATE"
    LIABILITY = "LIABILITY"
    OTHER = "OTHER"


class TransactionKind(Enum):
    """Financial event kinds recorded in the transaction log."""

    BUY = "BUY"
    SELL = "SELL"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    BORROW = "BORROW"
    REPAY = "REPAY"
    BALANCE_ADJUSTMENT = "BALANCE_ADJUSTMENT"
    DIVIDEND = "DIVIDEND"

    @property
    def is_increasing(self) -> bool:
        """Position-increasing kinds (Buy / Deposit / Borrow)."""
        return self in _INCREASING

    @property
    def is_decreasing(self) -> bool:
        """Position-decreasing kinds (Sell / Withdrawal / Repay)."""
        return self in _DECREASING


_INCREASING = frozenset({TransactionKind.BUY, TransactionKind.DEPOSIT, TransactionKind.BORROW})
_DECREASING = frozenset({TransactionKind.SELL, TransactionKind.WITHDRAWAL, TransactionKind.REPAY})
