"""Tests for the ledger command line interface."""

import json

import pytest
from click.testing import CliRunner

from src.business.cli.main import cli
from src.business.ledger import LedgerStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def ledger(tmp_path, runner, monkeypatch):
    monkeypatch.delenv("LEDGER_CONFIG_PATH", raising=False)
    monkeypatch.delenv("LEDGER_OVERDRAFT_POLICY", raising=False)
    path = tmp_path / "ledger.json"
    result = runner.invoke(
        cli,
        [
            "add-asset", "-s", "AAPL", "--id", "aapl", "-p", "170",
            "-q", "10", "--cost", "100", "-d", "2024-01-01", "-L", str(path),
        ],
    )
    assert result.exit_code == 0, result.output
    return path


def invoke(runner, ledger, *args):
    return runner.invoke(cli, [*args, "-L", str(ledger)])


class TestLedgerCli:
    """Tests for the ledger CLI commands."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "ledger" in result.output

    def test_add_asset_writes_ledger(self, ledger):
        snapshot = LedgerStore(ledger).load()
        assert [m.id for m in snapshot.metadata] == ["aapl"]
        assert snapshot.transactions[0].note == "Initial Holding"

    def test_add_tx_and_project(self, runner, ledger):
        result = invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "buy", "-q", "10", "-p", "200", "-d", "2024-01-02", "--id", "b2")
        assert result.exit_code == 0, result.output
        result = invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "SELL", "-q", "5", "-p", "180", "-d", "2024-01-03", "--id", "s1")
        assert result.exit_code == 0, result.output

        result = invoke(runner, ledger, "project", "-o", "json")
        assert result.exit_code == 0, result.output
        asset = json.loads(result.output)["assets"][0]
        assert asset["quantity"] == "15.00"
        assert asset["avg_cost"] == "150.00"
        assert asset["realized_pnl"] == "150.00"

    def test_rejected_insert_exits_1(self, runner, ledger):
        result = invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "BUY", "-q", "1", "-p", "10", "-t", "99")
        assert result.exit_code == 1
        assert "inconsistent_total" in result.output
        assert len(LedgerStore(ledger).load().transactions) == 1

    def test_overdraft_rejected(self, runner, ledger):
        result = invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "SELL", "-q", "11", "-p", "10", "-d", "2024-02-01")
        assert result.exit_code == 1
        assert "overdraft_position" in result.output

    def test_delete_tx_incremental(self, runner, ledger):
        invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "SELL", "-q", "5", "-p", "180", "-d", "2024-01-03", "--id", "s1")
        result = invoke(runner, ledger, "delete-tx", "s1", "-o", "json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["strategy"] == "incremental"
        assert data["assets"][0]["realized_pnl"] == "0.00"

    def test_delete_unknown(self, runner, ledger):
        result = invoke(runner, ledger, "delete-tx", "missing")
        assert result.exit_code == 1

    def test_edit_tx_recomputes_total(self, runner, ledger):
        invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "SELL", "-q", "5", "-p", "180", "-d", "2024-01-03", "--id", "s1")
        result = invoke(runner, ledger, "edit-tx", "s1", "-p", "120")
        assert result.exit_code == 0, result.output
        tx = next(t for t in LedgerStore(ledger).load().transactions if t.id == "s1")
        assert tx.total == 600
        assert tx.quantity_change == -5

    def test_balance_adjustment_keeps_sign(self, runner, ledger):
        result = invoke(runner, ledger, "add-tx", "-a", "aapl", "-k", "BALANCE_ADJUSTMENT", "--quantity=-2", "-d", "2024-01-05")
        assert result.exit_code == 0, result.output
        result = invoke(runner, ledger, "project", "-o", "json")
        asset = json.loads(result.output)["assets"][0]
        assert asset["quantity"] == "8.00"
        assert asset["total_cost_basis"] == "800.00"

    def test_summary_json(self, runner, ledger):
        result = invoke(runner, ledger, "summary", "-o", "json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_market_value"] == "1700.00"
        assert data["total_unrealized_pnl"] == "700.00"

    def test_set_price(self, runner, ledger):
        result = invoke(runner, ledger, "set-price", "aapl", "200")
        assert result.exit_code == 0, result.output
        assert LedgerStore(ledger).load().metadata[0].current_price == 200

    def test_migrate(self, runner, tmp_path, monkeypatch):
        monkeypatch.delenv("LEDGER_CONFIG_PATH", raising=False)
        legacy = tmp_path / "legacy.json"
        legacy.write_text(
            json.dumps({"assets": [{"id": "x", "symbol": "X", "type": "STOCK", "quantity": 2, "avgCost": 5}]}),
            encoding="utf-8",
        )
        target = tmp_path / "migrated.json"
        result = runner.invoke(cli, ["migrate", str(legacy), "-L", str(target)])
        assert result.exit_code == 0, result.output
        snapshot = LedgerStore(target).load()
        assert snapshot.transactions[0].total == 10

        again = runner.invoke(cli, ["migrate", str(legacy), "-L", str(target)])
        assert again.exit_code == 1
