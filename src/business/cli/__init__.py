"""
Business Layer CLI - 业务层命令行工具

提供命令：
- project: 重放交易日志，输出资产视图
- summary: 组合汇总
- add-asset / set-price: 资产管理
- add-tx / edit-tx / delete-tx: 交易变更
- migrate: 旧版快照迁移
"""

from src.business.cli.main import cli

__all__ = ["cli"]
