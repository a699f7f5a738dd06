"""
Legacy Migration - 旧版快照迁移

旧版存储直接保存资产的 quantity / avgCost 快照。迁移后资产只保留元数据，
持仓全部由交易日志推导：没有任何交易的持仓资产会生成一笔
"Migration: Initial Balance" 的 Buy 交易。
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.data.models.asset import AssetMetadata
from src.data.models.enums import TransactionKind
from src.data.models.transaction import Transaction
from src.data.utils.amounts import amount_from_json

logger = logging.getLogger(__name__)

MIGRATION_NOTE = "Migration: Initial Balance"


@dataclass
class MigrationResult:
    """迁移结果"""

    metadata: list[AssetMetadata] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    synthesized: list[str] = field(default_factory=list)  # 生成初始交易的资产 ID


def migrate_legacy_snapshot(
    legacy_assets: list[dict[str, Any]],
    legacy_transactions: list[dict[str, Any]] | None = None,
    now: datetime | None = None,
) -> MigrationResult:
    """将旧版资产快照转换为元数据 + 交易日志

    Args:
        legacy_assets: 旧版资产记录 (含 quantity, avgCost)
        legacy_transactions: 旧版交易记录
        now: 无 dateAcquired 时的初始交易日期 (默认: 当前时间)

    Returns:
        MigrationResult
    """
    result = MigrationResult(
        transactions=[Transaction.from_dict(t) for t in legacy_transactions or []],
    )
    with_transactions = {tx.asset_id for tx in result.transactions}

    for raw in legacy_assets:
        meta = AssetMetadata.from_dict(raw)
        result.metadata.append(meta)

        quantity = amount_from_json(raw.get("quantity", 0))
        if meta.id in with_transactions or quantity <= 0:
            continue

        avg_cost = amount_from_json(raw.get("avg_cost", raw.get("avgCost", 0)))
        acquired = f"{meta.date_acquired}T00:00:00" if meta.date_acquired else (now or datetime.now())
        result.transactions.append(
            Transaction.create(
                asset_id=meta.id,
                kind=TransactionKind.BUY,
                date=acquired,
                quantity_change=quantity,
                price_per_unit=avg_cost,
                total=quantity * avg_cost,
                note=MIGRATION_NOTE,
            )
        )
        result.synthesized.append(meta.id)

    logger.info(
        f"Migrated {len(result.metadata)} assets, "
        f"synthesized {len(result.synthesized)} initial balance transaction(s)"
    )
    return result
