"""
Portfolio Service - 投资组合服务

在账本协调器之上提供资产级操作:
- 新增 / 编辑 / 删除资产 (删除级联其交易)
- 更新市价
- 批量导入资产与交易 (按 ID 覆盖)
- 组合汇总与账本查询 (编辑表单辅助)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from fractions import Fraction
from typing import Iterable

from src.business.config.ledger_config import LedgerConfig
from src.business.ledger.coordinator import LedgerCoordinator
from src.business.ledger.models import MutationResult, MutationStrategy
from src.business.ledger.store import LedgerStore
from src.data.currency.converter import CurrencyConverter
from src.data.models.asset import Asset, AssetMetadata
from src.data.models.enums import AssetClass, TransactionKind
from src.data.models.transaction import Transaction
from src.data.utils.amounts import AmountLike, ZERO, to_amount
from src.data.utils.dates import parse_ledger_date
from src.engine.ledger.errors import ErrorKind, LedgerIssue
from src.engine.ledger.projection import canonical_order
from src.engine.ledger.validation import validate_transaction
from src.engine.portfolio.summary import PortfolioSummary, calc_portfolio_summary

logger = logging.getLogger(__name__)

INITIAL_HOLDING_NOTE = "Initial Holding"

# Buffer before the first known date when fetching price history
HISTORY_BUFFER = timedelta(days=7)
HISTORY_DEFAULT_YEARS = 5


@dataclass
class ImportReport:
    """批量导入结果"""

    added: int = 0
    updated: int = 0
    rejected: list[LedgerIssue] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.added + self.updated


class PortfolioService:
    """投资组合服务

    Usage:
        service = PortfolioService.from_store(LedgerStore())
        service.add_asset(meta, initial_quantity=10, initial_cost=100)
        print(service.summary().net_worth)
    """

    def __init__(
        self,
        coordinator: LedgerCoordinator | None = None,
        config: LedgerConfig | None = None,
        converter: CurrencyConverter | None = None,
    ) -> None:
        self._config = config or (coordinator.config if coordinator else LedgerConfig())
        self._coordinator = coordinator or LedgerCoordinator(config=self._config)
        self._converter = converter or self._config.make_converter()

    @classmethod
    def from_store(cls, store: LedgerStore, config: LedgerConfig | None = None) -> "PortfolioService":
        """从账本文件构建服务"""
        config = config or LedgerConfig()
        snapshot = store.load()
        return cls(LedgerCoordinator(snapshot.metadata, snapshot.transactions, config), config)

    def save(self, store: LedgerStore) -> None:
        """写回账本文件"""
        store.save(self._coordinator.metadata, self._coordinator.transactions)

    @property
    def coordinator(self) -> LedgerCoordinator:
        return self._coordinator

    @property
    def assets(self) -> list[Asset]:
        return self._coordinator.assets

    @property
    def issues(self) -> list[LedgerIssue]:
        return self._coordinator.issues

    # ------------------------------------------------------------------
    # Asset actions
    # ------------------------------------------------------------------

    def add_asset(
        self,
        meta: AssetMetadata,
        initial_quantity: AmountLike = 0,
        initial_cost: AmountLike = 0,
        acquired_at: str | date | datetime | None = None,
    ) -> MutationResult:
        """新增资产

        数量为正时同时插入一笔 "Initial Holding" 交易 (负债为 Borrow, 其余为 Buy)。

        Args:
            meta: 资产元数据
            initial_quantity: 初始数量
            initial_cost: 初始单位成本
            acquired_at: 初始交易日期 (默认: 当前时间)

        Returns:
            MutationResult; 初始交易被拒绝时资产也不会被添加

        Raises:
            ValueError: 资产 ID 已存在
        """
        if self._find_meta(meta.id) is not None:
            raise ValueError(f"Asset {meta.id} already exists")

        previous = self._coordinator.metadata
        self._coordinator.replace_metadata(previous + [meta])
        logger.info(f"Added asset {meta.symbol} ({meta.id})")

        quantity = to_amount(initial_quantity)
        if quantity <= 0:
            return MutationResult(
                success=True,
                assets=self.assets,
                issues=self.issues,
                strategy=MutationStrategy.REPLAY,
            )

        kind = TransactionKind.BORROW if meta.asset_class is AssetClass.LIABILITY else TransactionKind.BUY
        tx = Transaction.create(
            asset_id=meta.id,
            kind=kind,
            date=acquired_at or datetime.now(),
            quantity_change=quantity,
            price_per_unit=initial_cost,
            note=INITIAL_HOLDING_NOTE,
        )
        result = self._coordinator.insert_transaction(tx)
        if not result.success:
            self._coordinator.replace_metadata(previous)
        return result

    def edit_asset(self, meta: AssetMetadata) -> list[Asset]:
        """替换资产元数据 (身份 / 市场字段)

        Raises:
            ValueError: 资产不存在
        """
        if self._find_meta(meta.id) is None:
            raise ValueError(f"Unknown asset {meta.id}")
        self._coordinator.replace_metadata([meta if m.id == meta.id else m for m in self._coordinator.metadata])
        return self.assets

    def delete_asset(self, asset_id: str) -> int:
        """删除资产并级联删除其交易

        Returns:
            删除的交易数量

        Raises:
            ValueError: 资产不存在
        """
        if self._find_meta(asset_id) is None:
            raise ValueError(f"Unknown asset {asset_id}")
        kept = [tx for tx in self._coordinator.transactions if tx.asset_id != asset_id]
        removed = len(self._coordinator.transactions) - len(kept)
        self._coordinator.replace_metadata([m for m in self._coordinator.metadata if m.id != asset_id])
        self._coordinator.replace_transactions(kept)
        logger.info(f"Deleted asset {asset_id} and {removed} transaction(s)")
        return removed

    def update_asset_price(
        self,
        asset_id: str,
        price: AmountLike,
        at: datetime | None = None,
    ) -> Asset:
        """更新资产市价与更新时间

        Raises:
            ValueError: 资产不存在或价格为负
        """
        meta = self._find_meta(asset_id)
        if meta is None:
            raise ValueError(f"Unknown asset {asset_id}")
        updated = meta.with_price(to_amount(price), at or datetime.now())
        self.edit_asset(updated)
        logger.debug(f"Updated price of {meta.symbol}: {float(updated.current_price):g}")
        return self._coordinator.asset(asset_id)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def import_assets(self, metas: Iterable[AssetMetadata]) -> ImportReport:
        """导入资产元数据 (按 ID 原位覆盖, 新资产追加)"""
        report = ImportReport()
        current = self._coordinator.metadata
        positions = {m.id: i for i, m in enumerate(current)}
        for meta in metas:
            if meta.id in positions:
                current[positions[meta.id]] = meta
                report.updated += 1
            else:
                positions[meta.id] = len(current)
                current.append(meta)
                report.added += 1
        self._coordinator.replace_metadata(current)
        logger.info(f"Imported assets: {report.added} added, {report.updated} updated")
        return report

    def import_transactions(self, transactions: Iterable[Transaction]) -> ImportReport:
        """导入交易 (按 ID 原位覆盖, 新交易追加)

        每笔交易单独校验，未通过的交易记录在 report.rejected 中并跳过。
        """
        report = ImportReport()
        known_assets = {m.id for m in self._coordinator.metadata}
        tolerance = to_amount(self._config.total_tolerance)
        log = self._coordinator.transactions
        positions = {tx.id: i for i, tx in enumerate(log)}

        for tx in transactions:
            issue = None
            if tx.asset_id not in known_assets:
                issue = LedgerIssue(
                    kind=ErrorKind.ORPHAN_TRANSACTION,
                    transaction_id=tx.id,
                    transaction_kind=tx.kind,
                    asset_id=tx.asset_id,
                    message=f"unknown asset {tx.asset_id}",
                )
            else:
                issue = validate_transaction(tx, tolerance)
            if issue:
                logger.warning(f"Import skipped: {issue}")
                report.rejected.append(issue)
                continue

            if tx.id in positions:
                log[positions[tx.id]] = tx
                report.updated += 1
            else:
                positions[tx.id] = len(log)
                log.append(tx)
                report.added += 1

        self._coordinator.replace_transactions(log)
        logger.info(
            f"Imported transactions: {report.added} added, {report.updated} updated, "
            f"{len(report.rejected)} rejected"
        )
        return report

    # ------------------------------------------------------------------
    # Summary & queries
    # ------------------------------------------------------------------

    def summary(self, converter: CurrencyConverter | None = None) -> PortfolioSummary:
        """组合汇总 (报告币种)"""
        return calc_portfolio_summary(
            self.assets,
            converter or self._converter,
            self._config.reporting_currency,
        )

    def balance_before(
        self,
        asset_id: str,
        at: str | date | datetime,
        exclude_id: str | None = None,
    ) -> Fraction:
        """某日期之前 (不含) 的持仓数量 (带符号数量之和)"""
        cutoff = parse_ledger_date(at)
        return sum(
            (
                tx.quantity_change
                for tx in self._coordinator.transactions
                if tx.asset_id == asset_id and tx.id != exclude_id and tx.date < cutoff
            ),
            ZERO,
        )

    def last_trade_price(self, asset_id: str, exclude_id: str | None = None) -> Fraction | None:
        """该资产最近一笔交易的单价"""
        txs = [
            tx
            for tx in canonical_order(self._coordinator.transactions)
            if tx.asset_id == asset_id and tx.id != exclude_id
        ]
        return txs[-1].price_per_unit if txs else None

    def history_start_date(self, asset_id: str, today: datetime | None = None) -> datetime:
        """行情历史的起始日期

        优先级: 最早交易日期 - 7 天 > date_acquired - 7 天 > 五年前
        """
        dates = [tx.date for tx in self._coordinator.transactions if tx.asset_id == asset_id]
        if dates:
            return min(dates) - HISTORY_BUFFER

        meta = self._find_meta(asset_id)
        if meta is not None and meta.date_acquired:
            return parse_ledger_date(meta.date_acquired) - HISTORY_BUFFER

        today = today or datetime.now()
        try:
            return today.replace(year=today.year - HISTORY_DEFAULT_YEARS)
        except ValueError:
            # Feb 29 in a non-leap target year
            return today.replace(year=today.year - HISTORY_DEFAULT_YEARS, day=28)

    def _find_meta(self, asset_id: str) -> AssetMetadata | None:
        for meta in self._coordinator.metadata:
            if meta.id == asset_id:
                return meta
        return None
