"""
Project Command - 账本投影命令

重放交易日志，输出每个资产的持仓、成本与盈亏，以及组合汇总。
"""

import json
import logging
import sys
from typing import Optional

import click

from src.business.cli.context import echo_assets, echo_issues, open_ledger, setup_logging
from src.data.utils.amounts import format_amount

logger = logging.getLogger(__name__)


@click.command()
@click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径")
@click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["text", "json"]),
    default="text",
    help="输出格式",
)
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
def project(ledger: Optional[str], config: Optional[str], output: str, verbose: bool) -> None:
    """重放交易日志并输出资产视图

    \b
    退出码：
      0  无问题
      1  存在孤立 / 无效 / 超卖交易
      3  运行错误
    """
    setup_logging(verbose)

    try:
        service, _, cfg = open_ledger(ledger, config)
        result = service.coordinator.result

        if output == "json":
            click.echo(json.dumps(result.to_dict(cfg.display_places), ensure_ascii=False, indent=2))
        else:
            echo_assets(result.assets, cfg.display_places)
            echo_issues(result.issues)

    except Exception as e:
        logger.exception("投影过程出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    sys.exit(1 if result.issues else 0)


@click.command()
@click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径")
@click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径")
@click.option("--currency", type=str, help="报告币种 (默认: 配置 reporting_currency)")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["text", "json"]),
    default="text",
    help="输出格式",
)
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
def summary(
    ledger: Optional[str],
    config: Optional[str],
    currency: Optional[str],
    output: str,
    verbose: bool,
) -> None:
    """组合汇总 (市值、成本、盈亏、净值、负债率、配置比例)"""
    setup_logging(verbose)

    try:
        service, _, cfg = open_ledger(ledger, config)
        if currency:
            cfg.reporting_currency = currency.upper()
        result = service.summary()
        places = cfg.display_places

        if output == "json":
            click.echo(json.dumps(result.to_dict(places), ensure_ascii=False, indent=2))
            return

        click.echo(f"📊 Portfolio summary ({result.currency})")
        click.echo("-" * 50)
        click.echo(f"   Market value:     {format_amount(result.total_market_value, places):>18}")
        click.echo(f"   Cost basis:       {format_amount(result.total_cost_basis, places):>18}")
        click.echo(
            f"   Unrealized P&L:   {format_amount(result.total_unrealized_pnl, places):>18}"
            f" ({format_amount(result.total_unrealized_pnl_percent, 2)}%)"
        )
        click.echo(f"   Realized P&L:     {format_amount(result.total_realized_pnl, places):>18}")
        click.echo(f"   Total assets:     {format_amount(result.total_assets, places):>18}")
        click.echo(f"   Total liabilities:{format_amount(result.total_liabilities, places):>18}")
        click.echo(f"   Net worth:        {format_amount(result.net_worth, places):>18}")
        click.echo(f"   Debt ratio:       {format_amount(result.debt_ratio, 2):>17}%")
        allocation = result.allocation_percent()
        if allocation:
            click.echo()
            click.echo("   Allocation:")
            for asset_class, pct in sorted(allocation.items(), key=lambda item: item[1], reverse=True):
                click.echo(f"     {asset_class.value:<12} {format_amount(pct, 2):>8}%")

    except Exception as e:
        logger.exception("汇总过程出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)
