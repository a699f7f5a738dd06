"""
Portfolio - 投资组合

- PortfolioService: 资产级操作、导入、汇总与查询
- migrate_legacy_snapshot: 旧版快照迁移
"""

from src.business.portfolio.migration import MigrationResult, migrate_legacy_snapshot
from src.business.portfolio.service import ImportReport, PortfolioService

__all__ = [
    "ImportReport",
    "MigrationResult",
    "PortfolioService",
    "migrate_legacy_snapshot",
]
