"""Tests for PortfolioService asset-level operations and queries."""

from datetime import datetime
from fractions import Fraction

import pytest

from src.business.config.ledger_config import LedgerConfig
from src.business.ledger import LedgerCoordinator, LedgerStore
from src.business.portfolio import PortfolioService
from src.business.portfolio.service import INITIAL_HOLDING_NOTE
from src.data.models import AssetClass, AssetMetadata, Transaction, TransactionKind
from src.engine.ledger import ErrorKind


def make_meta(asset_id="a1", price=0, asset_class=AssetClass.STOCK, currency="USD", date_acquired=None):
    return AssetMetadata(
        id=asset_id,
        symbol=asset_id.upper(),
        asset_class=asset_class,
        currency=currency,
        current_price=price,
        date_acquired=date_acquired,
    )


def make_tx(kind, quantity, price=0, date="2024-01-01", asset_id="a1", tx_id=None, total=None):
    return Transaction.create(
        asset_id=asset_id,
        kind=kind,
        date=date,
        quantity_change=quantity,
        price_per_unit=price,
        total=total,
        id=tx_id,
    )


@pytest.fixture
def service():
    return PortfolioService(config=LedgerConfig())


class TestAssetActions:
    """Tests for add / edit / delete / price update."""

    def test_add_asset_with_initial_holding(self, service):
        result = service.add_asset(make_meta(price=120), 10, 100, "2024-01-05")
        assert result.success
        tx = service.coordinator.transactions[0]
        assert tx.kind is TransactionKind.BUY
        assert tx.note == INITIAL_HOLDING_NOTE
        assert tx.total == 1000
        asset = service.coordinator.asset("a1")
        assert asset.quantity == 10
        assert asset.unrealized_pnl == 200

    def test_add_liability_uses_borrow(self, service):
        service.add_asset(make_meta("loan", 1, AssetClass.LIABILITY), 5000, 1)
        assert service.coordinator.transactions[0].kind is TransactionKind.BORROW

    def test_add_asset_without_quantity(self, service):
        result = service.add_asset(make_meta())
        assert result.success
        assert service.coordinator.transactions == []
        assert [a.id for a in service.assets] == ["a1"]

    def test_add_duplicate_asset(self, service):
        service.add_asset(make_meta())
        with pytest.raises(ValueError):
            service.add_asset(make_meta())

    def test_edit_asset_keeps_position(self, service):
        service.add_asset(make_meta(price=10), 2, 10)
        service.edit_asset(AssetMetadata(id="a1", symbol="NEW", current_price=15))
        asset = service.coordinator.asset("a1")
        assert asset.symbol == "NEW"
        assert asset.quantity == 2
        assert asset.current_value == 30

    def test_delete_asset_cascades(self, service):
        service.add_asset(make_meta("a1"), 1, 1)
        service.add_asset(make_meta("a2"), 1, 1)
        removed = service.delete_asset("a1")
        assert removed == 1
        assert [a.id for a in service.assets] == ["a2"]
        assert all(tx.asset_id == "a2" for tx in service.coordinator.transactions)
        assert service.issues == []

    def test_update_asset_price(self, service):
        service.add_asset(make_meta(), 4, 10)
        at = datetime(2024, 6, 1, 12)
        asset = service.update_asset_price("a1", "12.5", at)
        assert asset.current_price == Fraction(25, 2)
        assert asset.last_price_update == at
        assert asset.current_value == 50

    def test_update_unknown_asset(self, service):
        with pytest.raises(ValueError):
            service.update_asset_price("missing", 1)


class TestImports:
    """Tests for import_assets / import_transactions."""

    def test_import_assets_upserts_in_place(self, service):
        service.import_assets([make_meta("a1", 1), make_meta("a2", 2)])
        report = service.import_assets([make_meta("a1", 9), make_meta("a3", 3)])
        assert (report.added, report.updated) == (1, 1)
        assert [m.id for m in service.coordinator.metadata] == ["a1", "a2", "a3"]
        assert service.coordinator.metadata[0].current_price == 9

    def test_import_transactions_validates_each(self, service):
        service.import_assets([make_meta("a1")])
        report = service.import_transactions(
            [
                make_tx(TransactionKind.BUY, 10, 100, tx_id="t1"),
                make_tx(TransactionKind.BUY, 1, 1, asset_id="ghost", tx_id="t2"),
                make_tx(TransactionKind.BUY, 1, 100, tx_id="t3", total=5),
                make_tx(TransactionKind.SELL, -2, 120, date="2024-02-01", tx_id="t4"),
            ]
        )
        assert report.added == 2
        assert [i.kind for i in report.rejected] == [
            ErrorKind.ORPHAN_TRANSACTION,
            ErrorKind.INCONSISTENT_TOTAL,
        ]
        assert service.coordinator.asset("a1").quantity == 8

    def test_import_transactions_replaces_by_id(self, service):
        service.import_assets([make_meta("a1")])
        service.import_transactions([make_tx(TransactionKind.BUY, 10, 100, tx_id="t1")])
        report = service.import_transactions([make_tx(TransactionKind.BUY, 4, 100, tx_id="t1")])
        assert (report.added, report.updated) == (0, 1)
        assert len(service.coordinator.transactions) == 1
        assert service.coordinator.asset("a1").quantity == 4


class TestSummary:
    """Tests for the portfolio summary in the reporting currency."""

    def test_summary_uses_configured_currency(self):
        config = LedgerConfig(reporting_currency="CNY", exchange_rates={"CNY": "7"})
        service = PortfolioService(config=config)
        service.add_asset(make_meta("us", 10), 10, 10)
        service.add_asset(make_meta("cn", 7, currency="CNY"), 10, 7)
        summary = service.summary()
        assert summary.currency == "CNY"
        # 100 USD -> 700 CNY, plus 70 CNY
        assert summary.total_market_value == 770


class TestQueries:
    """Tests for the edit-form helper queries."""

    @pytest.fixture
    def populated(self, service):
        service.import_assets([make_meta("a1", date_acquired="2023-03-10"), make_meta("a2", date_acquired="2023-03-10")])
        service.import_transactions(
            [
                make_tx(TransactionKind.BUY, 10, 100, date="2024-01-10", tx_id="t1"),
                make_tx(TransactionKind.SELL, -4, 110, date="2024-02-10", tx_id="t2"),
                make_tx(TransactionKind.BUY, 2, 105, date="2024-03-10", tx_id="t3"),
            ]
        )
        return service

    def test_balance_before(self, populated):
        assert populated.balance_before("a1", "2024-02-10") == 10
        assert populated.balance_before("a1", "2024-02-11") == 6
        assert populated.balance_before("a1", "2024-12-31", exclude_id="t2") == 12
        assert populated.balance_before("a2", "2024-12-31") == 0

    def test_last_trade_price(self, populated):
        assert populated.last_trade_price("a1") == 105
        assert populated.last_trade_price("a1", exclude_id="t3") == 110
        assert populated.last_trade_price("a2") is None

    def test_history_start_date(self, populated):
        assert populated.history_start_date("a1") == datetime(2024, 1, 3)
        assert populated.history_start_date("a2") == datetime(2023, 3, 3)
        populated.import_assets([make_meta("a3")])
        assert populated.history_start_date("a3", today=datetime(2024, 2, 29)) == datetime(2019, 2, 28)


class TestPersistence:
    """Tests for loading from and saving to a LedgerStore."""

    def test_round_trip_through_store(self, tmp_path):
        store = LedgerStore(tmp_path / "ledger.json")
        service = PortfolioService(LedgerCoordinator())
        service.add_asset(make_meta(price=3), 3, "1.5", "2024-01-01")
        service.save(store)

        reloaded = PortfolioService.from_store(store)
        assert reloaded.assets == service.assets
