"""
CLI Commands - 命令行子命令
"""

from src.business.cli.commands.asset import add_asset, set_price
from src.business.cli.commands.migrate import migrate
from src.business.cli.commands.project import project, summary
from src.business.cli.commands.transaction import add_tx, delete_tx, edit_tx

__all__ = [
    "add_asset",
    "add_tx",
    "delete_tx",
    "edit_tx",
    "migrate",
    "project",
    "set_price",
    "summary",
]
