"""
Configuration Management - 配置管理

加载和管理业务层配置：
- LedgerConfig: 账本配置 (YAML + 环境变量)
"""

from src.business.config.ledger_config import LedgerConfig, LedgerConfigError

__all__ = ["LedgerConfig", "LedgerConfigError"]
