#!/usr/bin/env python3
"""Cost-Basis Ledger Demo.

Walks through projection, incremental deletes, edits and the portfolio
summary using in-memory data.
"""

import argparse
import logging

from src.business.config import LedgerConfig
from src.business.ledger import LedgerCoordinator
from src.business.portfolio import PortfolioService
from src.data.models import AssetClass, AssetMetadata, Transaction, TransactionKind
from src.data.utils import format_amount
from src.engine import project

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def log_asset(asset):
    logger.info(
        f"{asset.symbol:<6} qty={format_amount(asset.quantity, 4)} "
        f"avg={format_amount(asset.avg_cost)} basis={format_amount(asset.total_cost_basis)} "
        f"realized={format_amount(asset.realized_pnl)} unrealized={format_amount(asset.unrealized_pnl)}"
    )


def demo_projection():
    """Demonstrate weighted-average projection."""
    logger.info("=" * 60)
    logger.info("Projection")
    logger.info("=" * 60)

    metadata = [AssetMetadata(id="aapl", symbol="AAPL", asset_class=AssetClass.STOCK, current_price=170)]
    transactions = [
        Transaction.create("aapl", TransactionKind.SELL, "2024-01-03", -5, 180),
        Transaction.create("aapl", TransactionKind.BUY, "2024-01-01", 10, 100),
        Transaction.create("aapl", TransactionKind.BUY, "2024-01-02", 10, 200),
        Transaction.create("ghost", TransactionKind.BUY, "2024-01-02", 1, 1),
    ]
    result = project(metadata, transactions)
    for asset in result.assets:
        log_asset(asset)
    for issue in result.issues:
        logger.info(f"Issue: {issue}")


def demo_mutations():
    """Demonstrate insert / delete / edit routing."""
    logger.info("=" * 60)
    logger.info("Mutations")
    logger.info("=" * 60)

    coordinator = LedgerCoordinator(
        [AssetMetadata(id="btc", symbol="BTC", asset_class=AssetClass.CRYPTO, current_price=60000)],
        config=LedgerConfig(),
    )
    buy = Transaction.create("btc", TransactionKind.BUY, "2024-01-01", "0.5", 30000, fee=15)
    sell = Transaction.create("btc", TransactionKind.SELL, "2024-03-01", "-0.2", 50000, fee=10)
    coordinator.insert_transaction(buy)
    coordinator.insert_transaction(sell)
    log_asset(coordinator.asset("btc"))

    result = coordinator.delete_transaction(sell.id)
    logger.info(f"Deleted latest sell via {result.strategy.value}")
    log_asset(coordinator.asset("btc"))

    coordinator.insert_transaction(sell)
    result = coordinator.delete_transaction(buy.id)
    logger.info(f"Deleted first buy via {result.strategy.value}; issues: {len(result.issues)}")

    rejected = coordinator.insert_transaction(
        Transaction.create("btc", TransactionKind.BUY, "2024-04-01", 1, 100, total=5)
    )
    logger.info(f"Inconsistent total rejected: {rejected.error}")


def demo_summary():
    """Demonstrate the multi-currency portfolio summary."""
    logger.info("=" * 60)
    logger.info("Portfolio summary")
    logger.info("=" * 60)

    service = PortfolioService(config=LedgerConfig(reporting_currency="USD"))
    service.add_asset(AssetMetadata(id="spy", symbol="SPY", asset_class=AssetClass.FUND, current_price=500), 20, 420)
    service.add_asset(
        AssetMetadata(id="flat", symbol="Flat", asset_class=AssetClass.REAL_ESTATE, currency="HKD", current_price=7800000),
        1,
        6500000,
    )
    service.add_asset(
        AssetMetadata(id="loan", symbol="Mortgage", asset_class=AssetClass.LIABILITY, currency="HKD", current_price=1),
        3900000,
        1,
    )
    summary = service.summary()
    logger.info(f"Total assets:      {format_amount(summary.total_assets)} {summary.currency}")
    logger.info(f"Total liabilities: {format_amount(summary.total_liabilities)} {summary.currency}")
    logger.info(f"Net worth:         {format_amount(summary.net_worth)} {summary.currency}")
    logger.info(f"Debt ratio:        {format_amount(summary.debt_ratio)}%")
    for asset_class, pct in summary.allocation_percent().items():
        logger.info(f"  {asset_class.value:<12} {format_amount(pct)}%")


def main():
    """Run all demos."""
    parser = argparse.ArgumentParser(description="Cost-Basis Ledger Demo")
    parser.add_argument(
        "--module",
        choices=["projection", "mutations", "summary", "all"],
        default="all",
        help="Which module to demo",
    )
    args = parser.parse_args()

    if args.module in ("projection", "all"):
        demo_projection()

    if args.module in ("mutations", "all"):
        demo_mutations()

    if args.module in ("summary", "all"):
        demo_summary()

    logger.info("\n" + "=" * 60)
    logger.info("Demo completed!")


if __name__ == "__main__":
    main()
