"""
Ledger Store - 账本存储

使用单个 JSON 文件持久化资产元数据与交易日志。

文件结构:
    data/ledger/ledger.json
    {
        "metadata": [...],
        "transactions": [...],
        "updated_at": "..."
    }

写入先落临时文件再原子替换。
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from src.business.config.ledger_config import LedgerConfig
from src.data.models.asset import AssetMetadata
from src.data.models.transaction import Transaction

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """账本文件内容"""

    metadata: list[AssetMetadata] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)


class LedgerStore:
    """账本存储

    Usage:
        store = LedgerStore()
        snapshot = store.load()
        store.save(snapshot.metadata, snapshot.transactions)
    """

    def __init__(self, path: str | Path | None = None, config: LedgerConfig | None = None) -> None:
        """初始化账本存储

        Args:
            path: 账本文件路径 (默认: config.ledger_path)
            config: 账本配置
        """
        self._config = config or LedgerConfig()
        self._path = Path(path or self._config.ledger_path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> LedgerSnapshot:
        """读取账本文件

        文件不存在时返回空账本。

        Raises:
            ValueError: 文件内容无法解析
        """
        if not self._path.exists():
            logger.debug(f"Ledger file {self._path} not found, starting empty")
            return LedgerSnapshot()

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            snapshot = LedgerSnapshot(
                metadata=[AssetMetadata.from_dict(m) for m in data.get("metadata", [])],
                transactions=[Transaction.from_dict(t) for t in data.get("transactions", [])],
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load ledger {self._path}: {e}")
            raise

        logger.debug(
            f"Loaded {len(snapshot.metadata)} assets and "
            f"{len(snapshot.transactions)} transactions from {self._path}"
        )
        return snapshot

    def save(self, metadata: list[AssetMetadata], transactions: list[Transaction]) -> None:
        """写入账本文件

        Args:
            metadata: 资产元数据
            transactions: 交易日志 (按插入顺序保存)
        """
        payload = {
            "metadata": [m.to_dict() for m in metadata],
            "transactions": [t.to_dict() for t in transactions],
            "updated_at": datetime.now().isoformat(),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".ledger-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
            logger.debug(f"Ledger saved: {self._path}")
        except Exception as e:
            logger.error(f"Failed to save ledger {self._path}: {e}")
            raise
