"""Ledger error taxonomy.

Per-transaction problems are reported as LedgerIssue values so one bad record
never aborts a projection. The LedgerError hierarchy mirrors the same kinds
for callers that prefer exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.data.models.enums import TransactionKind


class ErrorKind(str, Enum):
    """Kinds of ledger failure."""

    ORPHAN_TRANSACTION = "orphan_transaction"
    INCONSISTENT_TOTAL = "inconsistent_total"
    OVERDRAFT_POSITION = "overdraft_position"
    NON_INVERTIBLE_REVERSAL = "non_invertible_reversal"
    INVALID_TRANSACTION = "invalid_transaction"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"


@dataclass(frozen=True)
class LedgerIssue:
    """A problem attributed to one transaction.

    Attributes:
        kind: Failure kind.
        transaction_id: Offending transaction id.
        transaction_kind: Offending transaction kind (None when unknown).
        asset_id: Asset the transaction references.
        message: Human readable description.
    """

    kind: ErrorKind
    transaction_id: str
    transaction_kind: TransactionKind | None = None
    asset_id: str | None = None
    message: str = ""

    def __str__(self) -> str:
        kind = self.transaction_kind.value if self.transaction_kind else "?"
        return f"[{self.kind.value}] {kind} {self.transaction_id}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "transaction_id": self.transaction_id,
            "transaction_kind": self.transaction_kind.value if self.transaction_kind else None,
            "asset_id": self.asset_id,
            "message": self.message,
        }


class LedgerError(Exception):
    """Base class for ledger failures raised to callers."""

    kind: ErrorKind | None = None

    def __init__(self, message: str, issue: LedgerIssue | None = None):
        super().__init__(message)
        self.issue = issue

    @classmethod
    def from_issue(cls, issue: LedgerIssue) -> "LedgerError":
        """Build the matching LedgerError subclass for an issue."""
        error_cls = _ERRORS_BY_KIND.get(issue.kind, LedgerError)
        return error_cls(str(issue), issue)


class OrphanTransactionError(LedgerError):
    kind = ErrorKind.ORPHAN_TRANSACTION


class InconsistentTotalError(LedgerError):
    kind = ErrorKind.INCONSISTENT_TOTAL


class OverdraftPositionError(LedgerError):
    kind = ErrorKind.OVERDRAFT_POSITION


class InvalidTransactionError(LedgerError):
    kind = ErrorKind.INVALID_TRANSACTION


class DuplicateTransactionError(LedgerError):
    kind = ErrorKind.DUPLICATE_TRANSACTION


class UnknownTransactionError(LedgerError):
    kind = ErrorKind.UNKNOWN_TRANSACTION


class NonInvertibleReversal(LedgerError):
    """A fold step cannot be undone algebraically.

    Internal routing signal: the coordinator catches it and replays the log.
    """

    kind = ErrorKind.NON_INVERTIBLE_REVERSAL


_ERRORS_BY_KIND: dict[ErrorKind, type[LedgerError]] = {
    cls.kind: cls
    for cls in (
        OrphanTransactionError,
        InconsistentTotalError,
        OverdraftPositionError,
        InvalidTransactionError,
        DuplicateTransactionError,
        UnknownTransactionError,
        NonInvertibleReversal,
    )
}
