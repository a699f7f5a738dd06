"""
Transaction Commands - 交易命令

新增、编辑、删除交易。变更被接受后写回账本文件。

数量按绝对值输入，方向由交易类型决定 (Sell / Withdrawal / Repay 为负)；
BalanceAdjustment 按输入的符号记录。
"""

import json
import logging
import sys
from datetime import datetime
from fractions import Fraction
from typing import Optional

import click

from src.business.cli.context import echo_assets, echo_issues, open_ledger, setup_logging
from src.business.ledger.models import MutationResult, MutationStrategy
from src.data.models.enums import TransactionKind
from src.data.models.transaction import Transaction, parse_transaction_kind
from src.data.utils.amounts import AmountLike, to_amount

logger = logging.getLogger(__name__)

KIND_CHOICES = [kind.value for kind in TransactionKind]


def signed_quantity(kind: TransactionKind, quantity: AmountLike) -> Fraction:
    """按交易类型确定数量符号"""
    value = to_amount(quantity)
    if kind.is_decreasing:
        return -abs(value)
    if kind.is_increasing:
        return abs(value)
    return value


def _common_options(func):
    for option in reversed(
        [
            click.option("--ledger", "-L", type=click.Path(), help="账本 JSON 文件路径"),
            click.option("--config", "-c", type=click.Path(exists=True), help="账本配置文件路径"),
            click.option(
                "--output",
                "-o",
                type=click.Choice(["text", "json"]),
                default="text",
                help="输出格式",
            ),
            click.option("--verbose", "-v", is_flag=True, help="显示详细日志"),
        ]
    ):
        func = option(func)
    return func


def _finish(result: MutationResult, service, store, places: int, output: str) -> None:
    """输出结果，成功时保存账本；失败退出码 1"""
    if result.success:
        service.save(store)

    if output == "json":
        click.echo(json.dumps(result.to_dict(places), ensure_ascii=False, indent=2))
    elif result.success:
        click.echo(f"✅ {result.transaction_id} ({result.strategy.value})")
        echo_assets(result.assets, places)
        echo_issues(result.issues)
    else:
        click.echo(f"❌ Rejected: {result.error}", err=True)

    sys.exit(0 if result.success else 1)


@click.command("add-tx")
@click.option("--asset", "-a", "asset_id", required=True, help="资产 ID")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(KIND_CHOICES, case_sensitive=False),
    required=True,
    help="交易类型",
)
@click.option("--quantity", "-q", required=True, help="数量")
@click.option("--price", "-p", default="0", show_default=True, help="单价")
@click.option("--fee", "-f", default="0", show_default=True, help="手续费")
@click.option("--total", "-t", default=None, help="总额 (默认按类型计算)")
@click.option("--date", "-d", "tx_date", default=None, help="日期 ISO-8601 (默认: 当前时间)")
@click.option("--note", "-n", default="", help="备注")
@click.option("--id", "tx_id", default=None, help="交易 ID (默认: 自动生成)")
@_common_options
def add_tx(
    asset_id: str,
    kind: str,
    quantity: str,
    price: str,
    fee: str,
    total: Optional[str],
    tx_date: Optional[str],
    note: str,
    tx_id: Optional[str],
    ledger: Optional[str],
    config: Optional[str],
    output: str,
    verbose: bool,
) -> None:
    """新增交易

    \b
    示例：
      ledger add-tx -a aapl -k BUY -q 10 -p 150 -d 2024-01-05
      ledger add-tx -a aapl -k SELL -q 5 -p 180 -f 1
      ledger add-tx -a aapl -k BALANCE_ADJUSTMENT --quantity=-2
    """
    setup_logging(verbose)

    try:
        service, store, cfg = open_ledger(ledger, config)
        tx_kind = parse_transaction_kind(kind)
        tx = Transaction.create(
            id=tx_id,
            asset_id=asset_id,
            kind=tx_kind,
            date=tx_date or datetime.now(),
            quantity_change=signed_quantity(tx_kind, quantity),
            price_per_unit=price,
            fee=fee,
            total=total,
            note=note,
        )
        result = service.coordinator.insert_transaction(tx)
    except Exception as e:
        logger.exception("新增交易出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    _finish(result, service, store, cfg.display_places, output)


@click.command("edit-tx")
@click.argument("transaction_id")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(KIND_CHOICES, case_sensitive=False),
    default=None,
    help="交易类型",
)
@click.option("--quantity", "-q", default=None, help="数量")
@click.option("--price", "-p", default=None, help="单价")
@click.option("--fee", "-f", default=None, help="手续费")
@click.option("--total", "-t", default=None, help="总额 (默认按类型重新计算)")
@click.option("--date", "-d", "tx_date", default=None, help="日期 ISO-8601")
@click.option("--note", "-n", default=None, help="备注")
@_common_options
def edit_tx(
    transaction_id: str,
    kind: Optional[str],
    quantity: Optional[str],
    price: Optional[str],
    fee: Optional[str],
    total: Optional[str],
    tx_date: Optional[str],
    note: Optional[str],
    ledger: Optional[str],
    config: Optional[str],
    output: str,
    verbose: bool,
) -> None:
    """编辑交易 (删除旧记录 + 插入新记录, 保留 ID)

    未指定的字段沿用原值；未指定 --total 时按类型重新计算。
    """
    setup_logging(verbose)

    try:
        service, store, cfg = open_ledger(ledger, config)
        old = service.coordinator.get_transaction(transaction_id)
        if old is None:
            result = service.coordinator.edit_transaction(transaction_id, None)
        else:
            tx_kind = parse_transaction_kind(kind) if kind else old.kind
            if quantity is not None:
                new_quantity = signed_quantity(tx_kind, quantity)
            else:
                new_quantity = signed_quantity(tx_kind, old.quantity_change)
            new_tx = Transaction.create(
                id=old.id,
                asset_id=old.asset_id,
                kind=tx_kind,
                date=tx_date or old.date,
                quantity_change=new_quantity,
                price_per_unit=price if price is not None else old.price_per_unit,
                fee=fee if fee is not None else old.fee,
                total=total,
                note=note if note is not None else old.note,
            )
            result = service.coordinator.edit_transaction(transaction_id, new_tx)
    except Exception as e:
        logger.exception("编辑交易出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    _finish(result, service, store, cfg.display_places, output)


@click.command("delete-tx")
@click.argument("transaction_id")
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in (MutationStrategy.AUTO, MutationStrategy.INCREMENTAL, MutationStrategy.REPLAY)]),
    default=MutationStrategy.AUTO.value,
    show_default=True,
    help="计算路径",
)
@_common_options
def delete_tx(
    transaction_id: str,
    strategy: str,
    ledger: Optional[str],
    config: Optional[str],
    output: str,
    verbose: bool,
) -> None:
    """删除交易"""
    setup_logging(verbose)

    try:
        service, store, cfg = open_ledger(ledger, config)
        result = service.coordinator.delete_transaction(transaction_id, MutationStrategy(strategy))
    except Exception as e:
        logger.exception("删除交易出错")
        click.echo(f"❌ 错误: {e}", err=True)
        sys.exit(3)

    _finish(result, service, store, cfg.display_places, output)
