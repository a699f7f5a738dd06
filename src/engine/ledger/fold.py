"""Fold rules for weighted-average cost accounting.

apply_transaction is the single forward rule used by projection.
reverse_transaction is its algebraic inverse, used by the coordinator to undo
the most recent step of an asset without replaying the log.

All amounts are Fractions, so a reversed step restores the prior state
exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

from src.data.models.asset import Asset, AssetMetadata
from src.data.models.enums import TransactionKind
from src.data.models.transaction import Transaction
from src.data.utils.amounts import ZERO
from src.engine.ledger.errors import ErrorKind, LedgerIssue, NonInvertibleReversal

# Quantities at or below this are treated as a closed position
DEFAULT_POSITION_EPSILON = Fraction(1, 10**6)


class OverdraftPolicy(str, Enum):
    """What to do when a decrease exceeds the held quantity."""

    REJECT = "reject"  # skip the transaction
    CLAMP = "clamp"  # close the position and flag it


class FoldOutcome(str, Enum):
    """How a transaction affected its asset."""

    APPLIED = "applied"
    CLOSED = "closed"  # position snapped to zero
    CLAMPED = "clamped"  # overdraft closed under the clamp policy
    SKIPPED = "skipped"  # overdraft rejected, state unchanged


@dataclass(frozen=True)
class LedgerRules:
    """Numeric rules shared by projection and reversal.

    Attributes:
        position_epsilon: Close threshold for decreasing steps.
        overdraft_policy: Reject or clamp overdrafts.
    """

    position_epsilon: Fraction = DEFAULT_POSITION_EPSILON
    overdraft_policy: OverdraftPolicy = OverdraftPolicy.REJECT


@dataclass(frozen=True)
class PositionState:
    """Position facts of one asset at a point in the fold."""

    quantity: Fraction = ZERO
    avg_cost: Fraction = ZERO
    total_cost_basis: Fraction = ZERO
    realized_pnl: Fraction = ZERO

    @classmethod
    def from_asset(cls, asset: Asset) -> "PositionState":
        return cls(asset.quantity, asset.avg_cost, asset.total_cost_basis, asset.realized_pnl)

    def to_asset(self, metadata: AssetMetadata) -> Asset:
        return Asset(
            metadata=metadata,
            quantity=self.quantity,
            avg_cost=self.avg_cost,
            total_cost_basis=self.total_cost_basis,
            realized_pnl=self.realized_pnl,
        )

    def closed(self, realized_pnl: Fraction) -> "PositionState":
        """Zero position carrying the given realized P&L."""
        return PositionState(realized_pnl=realized_pnl)


@dataclass(frozen=True)
class FoldStep:
    """Result of applying one transaction."""

    state: PositionState
    outcome: FoldOutcome
    issue: LedgerIssue | None = None


def _average(total_cost_basis: Fraction, quantity: Fraction) -> Fraction:
    return total_cost_basis / quantity if quantity > 0 else ZERO


def _overdraft_issue(tx: Transaction, held: Fraction, policy: OverdraftPolicy) -> LedgerIssue:
    action = "rejected" if policy is OverdraftPolicy.REJECT else "clamped to zero"
    return LedgerIssue(
        kind=ErrorKind.OVERDRAFT_POSITION,
        transaction_id=tx.id,
        transaction_kind=tx.kind,
        asset_id=tx.asset_id,
        message=f"decrease of {float(tx.quantity):g} exceeds held quantity {float(held):g}; {action}",
    )


def apply_transaction(
    state: PositionState,
    tx: Transaction,
    rules: LedgerRules = LedgerRules(),
) -> FoldStep:
    """Fold one transaction into a position.

    Args:
        state: Position before the transaction.
        tx: Shape-valid transaction for this asset.
        rules: Epsilon and overdraft policy.

    Returns:
        FoldStep with the new state, outcome and any overdraft issue.
    """
    if tx.kind is TransactionKind.DIVIDEND:
        return FoldStep(
            PositionState(state.quantity, state.avg_cost, state.total_cost_basis, state.realized_pnl + tx.total),
            FoldOutcome.APPLIED,
        )

    q = tx.quantity_change
    if q > 0:
        # Buy / Deposit / Borrow and positive adjustments
        quantity = state.quantity + q
        tcb = state.total_cost_basis + tx.total
        return FoldStep(
            PositionState(quantity, _average(tcb, quantity), tcb, state.realized_pnl),
            FoldOutcome.APPLIED,
        )

    removed_qty = -q
    eps = rules.position_epsilon
    is_adjustment = tx.kind is TransactionKind.BALANCE_ADJUSTMENT

    if removed_qty - state.quantity > eps:
        issue = _overdraft_issue(tx, state.quantity, rules.overdraft_policy)
        if rules.overdraft_policy is OverdraftPolicy.REJECT:
            return FoldStep(state, FoldOutcome.SKIPPED, issue)
        realized = state.realized_pnl
        if not is_adjustment:
            realized += tx.total - state.total_cost_basis
        return FoldStep(state.closed(realized), FoldOutcome.CLAMPED, issue)

    if is_adjustment:
        if state.quantity == 0:
            return FoldStep(state.closed(state.realized_pnl), FoldOutcome.CLOSED)
        # Pro-rata write-down, no realized P&L
        tcb = state.total_cost_basis - state.total_cost_basis * (removed_qty / state.quantity)
        realized = state.realized_pnl
    else:
        removed_cost = removed_qty * state.avg_cost
        tcb = state.total_cost_basis - removed_cost
        realized = state.realized_pnl + tx.total - removed_cost

    quantity = state.quantity - removed_qty
    if quantity <= eps:
        return FoldStep(state.closed(realized), FoldOutcome.CLOSED)
    return FoldStep(
        PositionState(quantity, _average(tcb, quantity), tcb, realized),
        FoldOutcome.APPLIED,
    )


def reverse_transaction(state: PositionState, tx: Transaction, outcome: FoldOutcome) -> PositionState:
    """Undo the most recent fold step of a position.

    Only valid when ``tx`` is the last transaction folded into ``state``.

    Args:
        state: Position after ``tx`` was applied.
        tx: The transaction to remove.
        outcome: Outcome recorded when ``tx`` was applied.

    Returns:
        The position before ``tx``.

    Raises:
        NonInvertibleReversal: If the step closed or clamped the position,
            which discards the prior quantity and basis.
    """
    if outcome is FoldOutcome.SKIPPED:
        return state
    if outcome in (FoldOutcome.CLOSED, FoldOutcome.CLAMPED):
        raise NonInvertibleReversal(f"transaction {tx.id} {outcome.value} its position; replay required")

    if tx.kind is TransactionKind.DIVIDEND:
        return PositionState(state.quantity, state.avg_cost, state.total_cost_basis, state.realized_pnl - tx.total)

    q = tx.quantity_change
    if q > 0:
        quantity = state.quantity - q
        tcb = state.total_cost_basis - tx.total
        if quantity == 0:
            return PositionState(ZERO, ZERO, ZERO, state.realized_pnl)
        return PositionState(quantity, _average(tcb, quantity), tcb, state.realized_pnl)

    removed_qty = -q
    quantity = state.quantity + removed_qty
    if tx.kind is TransactionKind.BALANCE_ADJUSTMENT:
        # avg_cost is unchanged by a pro-rata write-down
        return PositionState(quantity, state.avg_cost, state.avg_cost * quantity, state.realized_pnl)

    removed_cost = removed_qty * state.avg_cost
    return PositionState(
        quantity,
        state.avg_cost,
        state.total_cost_basis + removed_cost,
        state.realized_pnl - (tx.total - removed_cost),
    )
