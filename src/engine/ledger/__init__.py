"""Cost-basis ledger: fold rules, projection and the error taxonomy."""

from src.engine.ledger.errors import (
    DuplicateTransactionError,
    ErrorKind,
    InconsistentTotalError,
    InvalidTransactionError,
    LedgerError,
    LedgerIssue,
    NonInvertibleReversal,
    OrphanTransactionError,
    OverdraftPositionError,
    UnknownTransactionError,
)
from src.engine.ledger.fold import (
    DEFAULT_POSITION_EPSILON,
    FoldOutcome,
    FoldStep,
    LedgerRules,
    OverdraftPolicy,
    PositionState,
    apply_transaction,
    reverse_transaction,
)
from src.engine.ledger.projection import ProjectionResult, canonical_order, project
from src.engine.ledger.validation import (
    DEFAULT_TOTAL_TOLERANCE,
    check_shape,
    check_total,
    validate_transaction,
)

__all__ = [
    "DEFAULT_POSITION_EPSILON",
    "DEFAULT_TOTAL_TOLERANCE",
    "DuplicateTransactionError",
    "ErrorKind",
    "FoldOutcome",
    "FoldStep",
    "InconsistentTotalError",
    "InvalidTransactionError",
    "LedgerError",
    "LedgerIssue",
    "LedgerRules",
    "NonInvertibleReversal",
    "OrphanTransactionError",
    "OverdraftPolicy",
    "OverdraftPositionError",
    "PositionState",
    "ProjectionResult",
    "UnknownTransactionError",
    "apply_transaction",
    "canonical_order",
    "check_shape",
    "check_total",
    "project",
    "reverse_transaction",
    "validate_transaction",
]
