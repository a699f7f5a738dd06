"""
Ledger - 账本

- LedgerCoordinator: 交易插入 / 编辑 / 删除
- LedgerStore: JSON 文件存储
- MutationResult: 变更结果
"""

from src.business.ledger.coordinator import LedgerCoordinator
from src.business.ledger.models import MutationResult, MutationStrategy
from src.business.ledger.store import LedgerSnapshot, LedgerStore

__all__ = [
    "LedgerCoordinator",
    "LedgerSnapshot",
    "LedgerStore",
    "MutationResult",
    "MutationStrategy",
]
