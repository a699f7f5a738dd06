"""Tests for the JSON ledger store."""

import json
from datetime import datetime
from fractions import Fraction

import pytest

from src.business.ledger import LedgerStore
from src.data.models import AssetClass, AssetMetadata, Transaction, TransactionKind


class TestLedgerStore:
    """Tests for LedgerStore."""

    def test_missing_file_is_empty(self, tmp_path):
        snapshot = LedgerStore(tmp_path / "none.json").load()
        assert snapshot.metadata == []
        assert snapshot.transactions == []

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "ledger.json"
        store = LedgerStore(path)
        metas = [
            AssetMetadata(
                id="a1",
                symbol="AAPL",
                asset_class=AssetClass.STOCK,
                current_price="190.5",
                last_price_update=datetime(2024, 5, 1, 16),
            )
        ]
        txs = [
            Transaction.create("a1", TransactionKind.BUY, "2024-01-05", 3, Fraction(1, 3), id="t1"),
            Transaction.create("a1", TransactionKind.SELL, "2024-02-05", -1, "0.5", "0.01", id="t2"),
        ]
        store.save(metas, txs)

        assert store.exists()
        snapshot = store.load()
        assert snapshot.metadata == metas
        assert snapshot.transactions == txs
        assert list(path.parent.glob(".ledger-*")) == []

    def test_file_layout(self, tmp_path):
        store = LedgerStore(tmp_path / "ledger.json")
        store.save([AssetMetadata(id="a1", symbol="X")], [])
        data = json.loads((tmp_path / "ledger.json").read_text(encoding="utf-8"))
        assert set(data) == {"metadata", "transactions", "updated_at"}
        assert data["metadata"][0]["id"] == "a1"

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            LedgerStore(path).load()
