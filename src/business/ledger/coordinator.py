"""
Ledger Coordinator - 账本变更协调器

对交易日志执行单笔插入 / 编辑 / 删除，并维护资产视图。

计算路径:
- 插入 / 编辑: 全量重放 (权威路径)
- 删除: 若被删交易是该资产按规范顺序的最后一笔，且其折叠结果可逆，
  则用代数逆运算增量撤销；否则全量重放

增量路径与 project() 的结果必须完全一致。
"""

import logging
from collections import Counter
from dataclasses import replace
from typing import Iterable, Sequence

from src.business.config.ledger_config import LedgerConfig
from src.business.ledger.models import MutationResult, MutationStrategy
from src.data.models.asset import Asset, AssetMetadata
from src.data.models.transaction import Transaction
from src.data.utils.amounts import to_amount
from src.engine.ledger.errors import ErrorKind, LedgerIssue, NonInvertibleReversal
from src.engine.ledger.fold import OverdraftPolicy, PositionState, reverse_transaction
from src.engine.ledger.projection import ProjectionResult, project
from src.engine.ledger.validation import validate_transaction

logger = logging.getLogger(__name__)


class LedgerCoordinator:
    """账本变更协调器

    持有交易日志的内存副本与最近一次投影结果。调用方负责串行化写操作。

    Usage:
        coordinator = LedgerCoordinator(metadata, transactions)
        result = coordinator.insert_transaction(tx)
        if not result.success:
            print(result.error)
        coordinator.delete_transaction(tx.id)
    """

    def __init__(
        self,
        metadata: Iterable[AssetMetadata] = (),
        transactions: Iterable[Transaction] = (),
        config: LedgerConfig | None = None,
    ) -> None:
        """初始化协调器

        Args:
            metadata: 资产元数据
            transactions: 交易日志 (插入顺序)
            config: 账本配置 (默认: LedgerConfig())
        """
        self._config = config or LedgerConfig()
        self._rules = self._config.to_rules()
        self._tolerance = to_amount(self._config.total_tolerance)
        self._metadata: list[AssetMetadata] = list(metadata)
        self._log: list[Transaction] = list(transactions)
        self._result = project(self._metadata, self._log, self._rules)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def metadata(self) -> list[AssetMetadata]:
        return list(self._metadata)

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._log)

    @property
    def result(self) -> ProjectionResult:
        """最近一次投影结果"""
        return self._result

    @property
    def assets(self) -> list[Asset]:
        return list(self._result.assets)

    @property
    def issues(self) -> list[LedgerIssue]:
        return list(self._result.issues)

    def asset(self, asset_id: str) -> Asset | None:
        return self._result.asset(asset_id)

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        for tx in self._log:
            if tx.id == transaction_id:
                return tx
        return None

    def project(self) -> ProjectionResult:
        """对当前日志全量重放 (不修改状态)"""
        return project(self._metadata, self._log, self._rules)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert_transaction(self, tx: Transaction) -> MutationResult:
        """插入一笔交易

        Args:
            tx: 新交易

        Returns:
            MutationResult; 被拒绝时日志保持不变
        """
        error = self._check_insert(tx)
        if error:
            return self._reject(error)

        log = self._log + [tx]
        result = project(self._metadata, log, self._rules)

        if self._rules.overdraft_policy is OverdraftPolicy.REJECT:
            overdraft = self._new_overdraft(result)
            if overdraft:
                return self._reject(overdraft, transaction_id=tx.id)

        self._log = log
        self._result = result
        logger.info(f"Inserted {tx.kind.value} {tx.id} for asset {tx.asset_id}")
        return self._accept(tx.id, MutationStrategy.REPLAY)

    def delete_transaction(
        self,
        transaction_id: str,
        strategy: MutationStrategy | str = MutationStrategy.AUTO,
    ) -> MutationResult:
        """删除一笔交易

        Args:
            transaction_id: 交易 ID
            strategy: AUTO / INCREMENTAL 优先增量撤销 (不合法时回退重放);
                REPLAY 强制全量重放

        Returns:
            MutationResult
        """
        strategy = MutationStrategy(strategy)
        tx = self.get_transaction(transaction_id)
        if tx is None:
            return self._reject(
                LedgerIssue(
                    kind=ErrorKind.UNKNOWN_TRANSACTION,
                    transaction_id=transaction_id,
                    message="transaction not found",
                )
            )

        if strategy is not MutationStrategy.REPLAY:
            try:
                self._result = self._reverse(tx)
                self._log = [t for t in self._log if t.id != transaction_id]
                logger.info(f"Deleted {tx.kind.value} {tx.id} incrementally")
                return self._accept(tx.id, MutationStrategy.INCREMENTAL)
            except NonInvertibleReversal as e:
                logger.debug(f"Replaying for delete of {tx.id}: {e}")

        self._log = [t for t in self._log if t.id != transaction_id]
        self._result = project(self._metadata, self._log, self._rules)
        logger.info(f"Deleted {tx.kind.value} {tx.id} by replay")
        return self._accept(tx.id, MutationStrategy.REPLAY)

    def edit_transaction(self, transaction_id: str, new_tx: Transaction) -> MutationResult:
        """编辑一笔交易 (删除旧记录 + 插入新记录)

        编辑后的记录追加到日志末尾 (新的插入顺序)。插入失败，或 reject 策略下
        相对编辑前产生新的超卖时，不做任何修改。

        Args:
            transaction_id: 被编辑的交易 ID
            new_tx: 新交易 (可保留原 ID)

        Returns:
            MutationResult
        """
        if self.get_transaction(transaction_id) is None:
            return self._reject(
                LedgerIssue(
                    kind=ErrorKind.UNKNOWN_TRANSACTION,
                    transaction_id=transaction_id,
                    message="transaction not found",
                )
            )

        scratch = self._copy()
        scratch.delete_transaction(transaction_id, MutationStrategy.REPLAY)
        inserted = scratch.insert_transaction(new_tx)
        if not inserted.success:
            logger.warning(f"Edit of {transaction_id} rejected: {inserted.error}")
            return self._reject(inserted.error, transaction_id=transaction_id, log=False)

        # Overdrafts caused by removing the old record count against the edit
        if self._rules.overdraft_policy is OverdraftPolicy.REJECT:
            overdraft = self._new_overdraft(scratch._result)
            if overdraft:
                return self._reject(overdraft, transaction_id=transaction_id)

        self._log = scratch._log
        self._result = scratch._result
        logger.info(f"Edited transaction {transaction_id} -> {new_tx.id}")
        return self._accept(new_tx.id, MutationStrategy.REPLAY)

    def replace_metadata(self, metadata: Sequence[AssetMetadata]) -> ProjectionResult:
        """替换资产元数据并重放"""
        self._metadata = list(metadata)
        self._result = project(self._metadata, self._log, self._rules)
        return self._result

    def replace_transactions(self, transactions: Sequence[Transaction]) -> ProjectionResult:
        """替换整个交易日志并重放"""
        self._log = list(transactions)
        self._result = project(self._metadata, self._log, self._rules)
        return self._result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_insert(self, tx: Transaction) -> LedgerIssue | None:
        if all(meta.id != tx.asset_id for meta in self._metadata):
            return LedgerIssue(
                kind=ErrorKind.ORPHAN_TRANSACTION,
                transaction_id=tx.id,
                transaction_kind=tx.kind,
                asset_id=tx.asset_id,
                message=f"unknown asset {tx.asset_id}",
            )
        if self.get_transaction(tx.id) is not None:
            return LedgerIssue(
                kind=ErrorKind.DUPLICATE_TRANSACTION,
                transaction_id=tx.id,
                transaction_kind=tx.kind,
                asset_id=tx.asset_id,
                message="transaction id already exists",
            )
        return validate_transaction(tx, self._tolerance)

    def _new_overdraft(self, result: ProjectionResult) -> LedgerIssue | None:
        before = {i.transaction_id for i in self._result.issues_of_kind(ErrorKind.OVERDRAFT_POSITION)}
        for issue in result.issues_of_kind(ErrorKind.OVERDRAFT_POSITION):
            if issue.transaction_id not in before:
                return issue
        return None

    def _reverse(self, tx: Transaction) -> ProjectionResult:
        """增量撤销 tx 的折叠效果

        Raises:
            NonInvertibleReversal: 前置条件不满足或该步不可逆
        """
        if not self._config.incremental_delete:
            raise NonInvertibleReversal("incremental delete disabled")
        if Counter(t.id for t in self._log)[tx.id] != 1:
            raise NonInvertibleReversal(f"transaction id {tx.id} is not unique")
        outcome = self._result.outcomes.get(tx.id)
        if outcome is None:
            raise NonInvertibleReversal(f"transaction {tx.id} was not folded")
        if self._result.last_transaction_id(tx.asset_id) != tx.id:
            raise NonInvertibleReversal(f"later transactions exist for asset {tx.asset_id}")

        asset = self._result.asset(tx.asset_id)
        state = reverse_transaction(PositionState.from_asset(asset), tx, outcome)

        outcomes = dict(self._result.outcomes)
        del outcomes[tx.id]
        sequences = {k: list(v) for k, v in self._result.sequences.items()}
        sequences[tx.asset_id].pop()

        return ProjectionResult(
            assets=[state.to_asset(a.metadata) if a.id == tx.asset_id else a for a in self._result.assets],
            issues=[i for i in self._result.issues if i.transaction_id != tx.id],
            outcomes=outcomes,
            sequences=sequences,
        )

    def _copy(self) -> "LedgerCoordinator":
        clone = LedgerCoordinator.__new__(LedgerCoordinator)
        clone._config = self._config
        clone._rules = self._rules
        clone._tolerance = self._tolerance
        clone._metadata = list(self._metadata)
        clone._log = list(self._log)
        clone._result = replace(self._result)
        return clone

    def _accept(self, transaction_id: str, strategy: MutationStrategy) -> MutationResult:
        return MutationResult(
            success=True,
            assets=self.assets,
            issues=self.issues,
            strategy=strategy,
            transaction_id=transaction_id,
        )

    def _reject(
        self,
        error: LedgerIssue,
        transaction_id: str | None = None,
        log: bool = True,
    ) -> MutationResult:
        if log:
            logger.warning(f"Mutation rejected: {error}")
        return MutationResult(
            success=False,
            assets=self.assets,
            issues=self.issues,
            strategy=MutationStrategy.NONE,
            error=error,
            transaction_id=transaction_id or error.transaction_id,
        )
