"""Ledger projection - the canonical semantics.

project() replays a transaction log over asset metadata and returns one Asset
per metadata entry. It is pure: the inputs are never mutated and equal inputs
always give equal results.

Canonical order: ascending ``date``; ties keep the order of the input log.

Example:
    >>> result = project(metadata, transactions)
    >>> for asset in result.assets:
    ...     print(asset.symbol, asset.quantity, asset.avg_cost)
    >>> for issue in result.issues:
    ...     print(issue)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from src.data.models.asset import Asset, AssetMetadata
from src.data.models.transaction import Transaction
from src.engine.ledger.errors import ErrorKind, LedgerIssue
from src.engine.ledger.fold import (
    FoldOutcome,
    LedgerRules,
    PositionState,
    apply_transaction,
)
from src.engine.ledger.validation import check_shape

logger = logging.getLogger(__name__)


@dataclass
class ProjectionResult:
    """Output of a projection.

    Attributes:
        assets: One Asset per metadata entry, in metadata order.
        issues: Per-transaction problems, in canonical order.
        outcomes: Fold outcome per folded transaction id.
        sequences: Folded transaction ids per asset, in canonical order.
    """

    assets: list[Asset] = field(default_factory=list)
    issues: list[LedgerIssue] = field(default_factory=list)
    outcomes: dict[str, FoldOutcome] = field(default_factory=dict)
    sequences: dict[str, list[str]] = field(default_factory=dict)

    @property
    def assets_by_id(self) -> dict[str, Asset]:
        return {asset.id: asset for asset in self.assets}

    def asset(self, asset_id: str) -> Asset | None:
        """Look up a projected asset by id."""
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    def issues_for(self, transaction_id: str) -> list[LedgerIssue]:
        """Issues attributed to one transaction."""
        return [issue for issue in self.issues if issue.transaction_id == transaction_id]

    def issues_of_kind(self, kind: ErrorKind) -> list[LedgerIssue]:
        return [issue for issue in self.issues if issue.kind is kind]

    def last_transaction_id(self, asset_id: str) -> str | None:
        """Id of the last transaction folded into an asset."""
        sequence = self.sequences.get(asset_id)
        return sequence[-1] if sequence else None

    def to_dict(self, places: int = 8) -> dict[str, Any]:
        return {
            "assets": [asset.to_dict(places) for asset in self.assets],
            "issues": [issue.to_dict() for issue in self.issues],
        }


def canonical_order(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Sort transactions by date, keeping input order for equal dates."""
    indexed = list(enumerate(transactions))
    indexed.sort(key=lambda item: (item[1].date, item[0]))
    return [tx for _, tx in indexed]


def project(
    metadata: Sequence[AssetMetadata],
    transactions: Sequence[Transaction],
    rules: LedgerRules | None = None,
) -> ProjectionResult:
    """Project a transaction log into per-asset positions.

    Args:
        metadata: Asset identity and market facts. The first entry wins when
            ids repeat.
        transactions: Transaction log in insertion order (dates unsorted).
        rules: Epsilon and overdraft policy. Defaults to LedgerRules().

    Returns:
        ProjectionResult with assets, issues and fold bookkeeping. Malformed
        records are reported as issues, never raised.
    """
    rules = rules or LedgerRules()

    metas: dict[str, AssetMetadata] = {}
    for meta in metadata:
        if meta.id in metas:
            logger.warning(f"Duplicate asset metadata {meta.id} ignored")
            continue
        metas[meta.id] = meta

    states = {asset_id: PositionState() for asset_id in metas}
    result = ProjectionResult(sequences={asset_id: [] for asset_id in metas})

    seen: set[str] = set()
    for tx in canonical_order(transactions):
        if tx.id in seen:
            result.issues.append(
                LedgerIssue(
                    kind=ErrorKind.DUPLICATE_TRANSACTION,
                    transaction_id=tx.id,
                    transaction_kind=tx.kind,
                    asset_id=tx.asset_id,
                    message="transaction id already in the log",
                )
            )
            continue
        seen.add(tx.id)
        if tx.asset_id not in metas:
            result.issues.append(
                LedgerIssue(
                    kind=ErrorKind.ORPHAN_TRANSACTION,
                    transaction_id=tx.id,
                    transaction_kind=tx.kind,
                    asset_id=tx.asset_id,
                    message=f"unknown asset {tx.asset_id}",
                )
            )
            continue
        shape_issue = check_shape(tx)
        if shape_issue:
            result.issues.append(shape_issue)
            continue

        step = apply_transaction(states[tx.asset_id], tx, rules)
        states[tx.asset_id] = step.state
        result.outcomes[tx.id] = step.outcome
        result.sequences[tx.asset_id].append(tx.id)
        if step.issue:
            result.issues.append(step.issue)

    result.assets = [states[asset_id].to_asset(meta) for asset_id, meta in metas.items()]

    if result.issues:
        logger.debug(f"Projection of {len(transactions)} transactions reported {len(result.issues)} issue(s)")
    return result
