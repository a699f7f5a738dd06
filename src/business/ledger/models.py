"""
Ledger Mutation Models - 账本变更数据模型

定义:
- MutationStrategy: 结果的计算路径 (增量撤销 / 全量重放)
- MutationResult: 单次插入 / 编辑 / 删除的结果
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.data.models.asset import Asset
from src.engine.ledger.errors import LedgerError, LedgerIssue


class MutationStrategy(str, Enum):
    """变更计算路径"""

    AUTO = "auto"  # 可增量则增量, 否则重放
    INCREMENTAL = "incremental"  # 代数逆运算撤销最后一步
    REPLAY = "replay"  # 全量重放
    NONE = "none"  # 变更被拒绝, 未计算


@dataclass
class MutationResult:
    """变更结果

    Attributes:
        success: 变更是否被接受
        assets: 变更后的资产视图 (失败时为变更前视图)
        issues: 当前日志的全部问题
        strategy: 实际采用的计算路径
        error: 失败原因 (成功时为 None)
        transaction_id: 目标交易 ID
    """

    success: bool
    assets: list[Asset] = field(default_factory=list)
    issues: list[LedgerIssue] = field(default_factory=list)
    strategy: MutationStrategy = MutationStrategy.NONE
    error: LedgerIssue | None = None
    transaction_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def raise_for_error(self) -> "MutationResult":
        """失败时抛出对应的 LedgerError 子类

        Raises:
            LedgerError: 变更被拒绝
        """
        if not self.success and self.error is not None:
            raise LedgerError.from_issue(self.error)
        return self

    def to_dict(self, places: int = 8) -> dict[str, Any]:
        """转换为字典"""
        return {
            "success": self.success,
            "transaction_id": self.transaction_id,
            "strategy": self.strategy.value,
            "error": self.error.to_dict() if self.error else None,
            "assets": [asset.to_dict(places) for asset in self.assets],
            "issues": [issue.to_dict() for issue in self.issues],
            "timestamp": self.timestamp.isoformat(),
        }
