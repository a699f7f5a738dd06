"""Calculation Engine Layer.

Pure calculations over the data-layer models. Nothing here performs I/O.

Architecture:
- ledger/: Cost-basis ledger
    - fold: Weighted-average fold rules and their algebraic inverse
    - projection: Canonical replay of a transaction log into assets
    - validation: Transaction shape and total checks
    - errors: Issue values and the LedgerError hierarchy

- portfolio/: Portfolio-level aggregates
    - summary: Market value, cost basis, P&L, net worth, allocation
"""

from src.engine.ledger import (
    ErrorKind,
    FoldOutcome,
    LedgerError,
    LedgerIssue,
    LedgerRules,
    OverdraftPolicy,
    ProjectionResult,
    project,
)
from src.engine.portfolio import PortfolioSummary, calc_portfolio_summary

__all__ = [
    "ErrorKind",
    "FoldOutcome",
    "LedgerError",
    "LedgerIssue",
    "LedgerRules",
    "OverdraftPolicy",
    "PortfolioSummary",
    "ProjectionResult",
    "calc_portfolio_summary",
    "project",
]
