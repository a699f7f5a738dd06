"""Tests for the weighted-average fold rules and their inverse."""

from fractions import Fraction

import pytest

from src.data.models import Transaction, TransactionKind
from src.engine.ledger import (
    ErrorKind,
    FoldOutcome,
    LedgerRules,
    NonInvertibleReversal,
    OverdraftPolicy,
    PositionState,
    apply_transaction,
    reverse_transaction,
)

CLAMP = LedgerRules(overdraft_policy=OverdraftPolicy.CLAMP)


def make_tx(kind, quantity, price=0, fee=0, total=None, tx_id=None):
    return Transaction.create(
        asset_id="a1",
        kind=kind,
        date="2024-01-01",
        quantity_change=quantity,
        price_per_unit=price,
        fee=fee,
        total=total,
        id=tx_id,
    )


def fold(*txs, rules=LedgerRules()):
    state = PositionState()
    steps = []
    for tx in txs:
        step = apply_transaction(state, tx, rules)
        steps.append(step)
        state = step.state
    return state, steps


class TestIncreasingKinds:
    """Tests for Buy / Deposit / Borrow."""

    def test_buy_sets_average(self):
        state, _ = fold(make_tx(TransactionKind.BUY, 10, 100))
        assert state.quantity == 10
        assert state.avg_cost == 100
        assert state.total_cost_basis == 1000

    def test_second_buy_reweights_average(self):
        state, _ = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.BUY, 10, 200),
        )
        assert state.quantity == 20
        assert state.avg_cost == 150
        assert state.total_cost_basis == 3000

    def test_fee_is_part_of_cost(self):
        state, _ = fold(make_tx(TransactionKind.BUY, 3, 10, fee=1))
        assert state.total_cost_basis == 31
        assert state.avg_cost == Fraction(31, 3)

    @pytest.mark.parametrize("kind", [TransactionKind.DEPOSIT, TransactionKind.BORROW])
    def test_deposit_and_borrow_behave_like_buy(self, kind):
        state, steps = fold(make_tx(kind, 500, 1))
        assert state.quantity == 500
        assert state.avg_cost == 1
        assert steps[0].outcome is FoldOutcome.APPLIED


class TestDecreasingKinds:
    """Tests for Sell / Withdrawal / Repay."""

    def test_partial_sell_realizes_against_average(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.BUY, 10, 200),
            make_tx(TransactionKind.SELL, -5, 180),
        )
        assert state.quantity == 15
        assert state.avg_cost == 150
        assert state.total_cost_basis == 2250
        # 180*5 - 150*5
        assert state.realized_pnl == 150
        assert steps[-1].outcome is FoldOutcome.APPLIED

    def test_full_close_resets_cost(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.BUY, 10, 200),
            make_tx(TransactionKind.SELL, -5, 180),
            make_tx(TransactionKind.SELL, -15, 160),
        )
        assert state.quantity == 0
        assert state.avg_cost == 0
        assert state.total_cost_basis == 0
        assert state.realized_pnl == 300
        assert steps[-1].outcome is FoldOutcome.CLOSED

    def test_sell_fee_reduces_proceeds(self):
        state, _ = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.SELL, -5, 110, fee=2),
        )
        # (550 - 2) - 500
        assert state.realized_pnl == 48

    def test_residual_within_epsilon_closes(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.SELL, "-9.9999995", 100),
        )
        assert state.quantity == 0
        assert state.total_cost_basis == 0
        assert steps[-1].outcome is FoldOutcome.CLOSED

    @pytest.mark.parametrize("kind", [TransactionKind.WITHDRAWAL, TransactionKind.REPAY])
    def test_withdrawal_and_repay_behave_like_sell(self, kind):
        state, _ = fold(
            make_tx(TransactionKind.DEPOSIT, 100, 1),
            make_tx(kind, -40, 1),
        )
        assert state.quantity == 60
        assert state.total_cost_basis == 60
        assert state.realized_pnl == 0


class TestOverdraft:
    """Tests for decreases beyond the held quantity."""

    def test_reject_policy_skips_and_reports(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.SELL, -15, 120, tx_id="oversell"),
        )
        assert state.quantity == 10
        assert state.total_cost_basis == 1000
        assert steps[-1].outcome is FoldOutcome.SKIPPED
        assert steps[-1].issue.kind is ErrorKind.OVERDRAFT_POSITION
        assert steps[-1].issue.transaction_id == "oversell"

    def test_clamp_policy_closes_and_flags(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.SELL, -15, 10),
            rules=CLAMP,
        )
        assert state.quantity == 0
        assert state.total_cost_basis == 0
        # proceeds 150 against the whole basis of 1000
        assert state.realized_pnl == -850
        assert steps[-1].outcome is FoldOutcome.CLAMPED
        assert steps[-1].issue.kind is ErrorKind.OVERDRAFT_POSITION

    def test_overshoot_within_epsilon_is_not_overdraft(self):
        _, steps = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.SELL, "-10.0000005", 100),
        )
        assert steps[-1].issue is None
        assert steps[-1].outcome is FoldOutcome.CLOSED

    def test_sell_from_empty_position(self):
        state, steps = fold(make_tx(TransactionKind.SELL, -1, 10))
        assert state == PositionState()
        assert steps[0].outcome is FoldOutcome.SKIPPED


class TestBalanceAdjustment:
    """Tests for quantity corrections."""

    def test_negative_adjustment_writes_down_pro_rata(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 20, 100),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, -5),
        )
        assert state.quantity == 15
        assert state.total_cost_basis == 1500
        assert state.avg_cost == 100
        assert state.realized_pnl == 0
        assert steps[-1].outcome is FoldOutcome.APPLIED

    def test_positive_adjustment_is_a_buy(self):
        state, _ = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, 10, 50),
        )
        assert state.quantity == 20
        assert state.total_cost_basis == 1500
        assert state.avg_cost == 75

    def test_adjustment_to_zero_closes(self):
        state, steps = fold(
            make_tx(TransactionKind.BUY, 3, 7),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, -3),
        )
        assert state.quantity == 0
        assert state.total_cost_basis == 0
        assert steps[-1].outcome is FoldOutcome.CLOSED

    def test_write_down_stays_exact_on_thirds(self):
        state, _ = fold(
            make_tx(TransactionKind.BUY, 3, 10, fee=1),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, -1),
        )
        assert state.total_cost_basis == Fraction(62, 3)
        assert state.avg_cost == state.total_cost_basis / state.quantity


class TestDividend:
    """Tests for dividend cash inflows."""

    def test_dividend_only_touches_realized(self):
        state, _ = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.DIVIDEND, 0, total=25),
        )
        assert state.quantity == 10
        assert state.avg_cost == 100
        assert state.realized_pnl == 25


class TestReverseTransaction:
    """Tests for the algebraic inverse of a fold step."""

    @pytest.mark.parametrize(
        "last",
        [
            make_tx(TransactionKind.BUY, 7, 130, fee=3),
            make_tx(TransactionKind.SELL, -4, 155, fee=1),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, -3),
            make_tx(TransactionKind.BALANCE_ADJUSTMENT, 2, 90),
            make_tx(TransactionKind.DIVIDEND, 0, total=12),
            make_tx(TransactionKind.WITHDRAWAL, -99, 1),
        ],
        ids=["buy", "sell", "write_down", "adjust_up", "dividend", "overdraft_skip"],
    )
    def test_reverse_restores_prior_state(self, last):
        before, _ = fold(
            make_tx(TransactionKind.BUY, 10, 100),
            make_tx(TransactionKind.BUY, 5, 117, fee=2),
            make_tx(TransactionKind.SELL, -2, 140),
        )
        step = apply_transaction(before, last)
        assert reverse_transaction(step.state, last, step.outcome) == before

    def test_reverse_first_buy_returns_empty_position(self):
        tx = make_tx(TransactionKind.BUY, 10, 100)
        step = apply_transaction(PositionState(), tx)
        assert reverse_transaction(step.state, tx, step.outcome) == PositionState()

    def test_closed_step_is_not_invertible(self):
        before, _ = fold(make_tx(TransactionKind.BUY, 10, 100))
        sell = make_tx(TransactionKind.SELL, -10, 120)
        step = apply_transaction(before, sell)
        assert step.outcome is FoldOutcome.CLOSED
        with pytest.raises(NonInvertibleReversal):
            reverse_transaction(step.state, sell, step.outcome)

    def test_clamped_step_is_not_invertible(self):
        before, _ = fold(make_tx(TransactionKind.BUY, 10, 100))
        sell = make_tx(TransactionKind.SELL, -20, 120)
        step = apply_transaction(before, sell, CLAMP)
        with pytest.raises(NonInvertibleReversal):
            reverse_transaction(step.state, sell, step.outcome)
