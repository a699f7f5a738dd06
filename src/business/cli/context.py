"""
CLI Context - 命令行公共工具

日志配置、配置加载、账本读写与输出格式化。
"""

import logging
from pathlib import Path
from typing import Optional

import click

from src.business.config.ledger_config import LedgerConfig
from src.business.ledger.store import LedgerStore
from src.business.portfolio.service import PortfolioService
from src.data.models.asset import Asset
from src.data.utils.amounts import format_amount
from src.engine.ledger.errors import LedgerIssue


def setup_logging(verbose: bool) -> None:
    """配置日志"""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def open_ledger(
    ledger: Optional[str],
    config_path: Optional[str],
) -> tuple[PortfolioService, LedgerStore, LedgerConfig]:
    """加载配置与账本文件

    Args:
        ledger: 账本文件路径 (默认: config.ledger_path)
        config_path: YAML 配置文件路径

    Returns:
        (service, store, config)
    """
    config = LedgerConfig.load(config_path)
    store = LedgerStore(Path(ledger) if ledger else None, config=config)
    return PortfolioService.from_store(store, config), store, config


def echo_assets(assets: list[Asset], places: int) -> None:
    """资产表格输出"""
    if not assets:
        click.echo("(no assets)")
        return

    click.echo(
        f"{'Symbol':<10} {'Class':<12} {'Cur':<4} {'Quantity':>14} {'Avg Cost':>12} "
        f"{'Value':>14} {'Unrealized':>12} {'Realized':>12}"
    )
    click.echo("-" * 98)
    for asset in assets:
        click.echo(
            f"{asset.symbol:<10} {asset.asset_class.value:<12} {asset.currency:<4} "
            f"{format_amount(asset.quantity, 4):>14} {format_amount(asset.avg_cost, places):>12} "
            f"{format_amount(asset.current_value, places):>14} "
            f"{format_amount(asset.unrealized_pnl, places):>12} "
            f"{format_amount(asset.realized_pnl, places):>12}"
        )


def echo_issues(issues: list[LedgerIssue]) -> None:
    """问题列表输出"""
    if not issues:
        return
    click.echo()
    click.echo(f"⚠️ Issues ({len(issues)}):")
    for issue in issues:
        click.echo(f"   {issue}")
