"""
Migrate Command - 旧版数据迁移命令

读取旧版快照 JSON ({"assets": [...], "transactions": [...]})，
转换为元数据 + 交易日志并写入账本文件。
"""

import json
import logging
import sys
from typing import Optional

import click

from src.business.cli.context import echo_assets, echo_issues, setup_logging
from src.business.config.ledger_config import LedgerConfig
from src.business.ledger.coordinator import LedgerCoordinator
from src.business.ledger.store import LedgerStore
from src.business.portfolio.migration import migrate_legacy_snapshot

logger = logging.getLogger(__name__)


@click.command()
@click.argument("legacy_file", type=click.Path(exists=True))
@click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径")
@click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径")
@click.option("--force", is_flag=True, help="覆盖已存在的账本文件")
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
def migrate(
    legacy_file: str,
    ledger: Optional[str],
    config: Optional[str],
    force: bool,
    verbose: bool,
) -> None:
    """迁移旧版资产快照

    无交易但有持仓的资产会生成一笔 "Migration: Initial Balance" 交易。
    """
    setup_logging(verbose)

    try:
        cfg = LedgerConfig.load(config)
        store = LedgerStore(ledger, config=cfg)
        if store.exists() and not force:
            click.echo(f"❌ Ledger {store.path} already exists (use --force)", err=True)
            sys.exit(1)

        with open(legacy_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        result = migrate_legacy_snapshot(data.get("assets", []), data.get("transactions", []))
        coordinator = LedgerCoordinator(result.metadata, result.transactions, cfg)
        store.save(coordinator.metadata, coordinator.transactions)
    except Exception as e:
        logger.exception("迁移过程出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    click.echo(
        f"✅ Migrated {len(result.metadata)} assets, "
        f"{len(result.synthesized)} initial balance transaction(s) -> {store.path}"
    )
    echo_assets(coordinator.assets, cfg.display_places)
    echo_issues(coordinator.issues)
