"""
CLI Main Entry Point - 命令行主入口

使用 Click 库构建命令行工具。
"""

import click

from src.business.cli.commands.asset import add_asset, set_price
from src.business.cli.commands.migrate import migrate
from src.business.cli.commands.project import project, summary
from src.business.cli.commands.transaction import add_tx, delete_tx, edit_tx


@click.group()
@click.version_option(version="0.1.0", prog_name="ledger")
def cli() -> None:
    """成本账本 - 业务层命令行工具

    由交易日志推导持仓、加权平均成本与盈亏。
    """
    pass


# 注册子命令
cli.add_command(project)
cli.add_command(summary)
cli.add_command(add_asset)
cli.add_command(set_price)
cli.add_command(add_tx)
cli.add_command(edit_tx)
cli.add_command(delete_tx)
cli.add_command(migrate)


if __name__ == "__main__":
    cli()
