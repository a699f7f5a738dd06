"""
Asset Commands - 资产命令

新增资产 (可带初始持仓) 与手动更新市价。
"""

import logging
import sys
import uuid
from typing import Optional

import click

from src.business.cli.context import echo_assets, open_ledger, setup_logging
from src.data.models.asset import AssetMetadata, parse_asset_class
from src.data.models.enums import AssetClass

logger = logging.getLogger(__name__)


@click.command("add-asset")
@click.option("--symbol", "-s", required=True, help="代码 / 名称")
@click.option("--name", default="", help="显示名称")
@click.option(
    "--class",
    "asset_class",
    type=click.Choice([c.value for c in AssetClass], case_sensitive=False),
    default=AssetClass.STOCK.value,
    show_default=True,
    help="资产类别",
)
@click.option("--currency", default="USD", show_default=True, help="计价币种")
@click.option("--price", "-p", default="0", show_default=True, help="当前市价")
@click.option("--quantity", "-q", default="0", show_default=True, help="初始数量")
@click.option("--cost", default="0", show_default=True, help="初始单位成本")
@click.option("--date", "-d", "acquired", default=None, help="取得日期 ISO-8601")
@click.option("--id", "asset_id", default=None, help="资产 ID (默认: 自动生成)")
@click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径")
@click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
def add_asset(
    symbol: str,
    name: str,
    asset_class: str,
    currency: str,
    price: str,
    quantity: str,
    cost: str,
    acquired: Optional[str],
    asset_id: Optional[str],
    ledger: Optional[str],
    config: Optional[str],
    verbose: bool,
) -> None:
    """新增资产

    \b
    示例：
      ledger add-asset -s AAPL -p 190 -q 10 --cost 150 -d 2024-01-05
      ledger add-asset -s Mortgage --class LIABILITY -q 300000 --cost 1
    """
    setup_logging(verbose)

    try:
        service, store, cfg = open_ledger(ledger, config)
        meta = AssetMetadata(
            id=asset_id or str(uuid.uuid4()),
            symbol=symbol,
            name=name or symbol,
            asset_class=parse_asset_class(asset_class),
            currency=currency,
            current_price=price,
            date_acquired=acquired[:10] if acquired else None,
        )
        result = service.add_asset(meta, quantity, cost, acquired)
    except Exception as e:
        logger.exception("新增资产出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    if not result.success:
        click.echo(f"❌ Rejected: {result.error}", err=True)
        sys.exit(1)

    service.save(store)
    click.echo(f"✅ Added {meta.symbol} ({meta.id})")
    echo_assets(result.assets, cfg.display_places)


@click.command("set-price")
@click.argument("asset_id")
@click.argument("price")
@click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径")
@click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
def set_price(
    asset_id: str,
    price: str,
    ledger: Optional[str],
    config: Optional[str],
    verbose: bool,
) -> None:
    """手动更新资产市价"""
    setup_logging(verbose)

    try:
        service, store, cfg = open_ledger(ledger, config)
        asset = service.update_asset_price(asset_id, price)
        service.save(store)
    except Exception as e:
        logger.exception("更新市价出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    echo_assets([asset], cfg.display_places)
