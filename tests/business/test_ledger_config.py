"""Tests for LedgerConfig loading and validation."""

from fractions import Fraction

import pytest

from src.business.config import LedgerConfig, LedgerConfigError
from src.engine.ledger import OverdraftPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LEDGER_CONFIG_PATH",
        "LEDGER_OVERDRAFT_POLICY",
        "LEDGER_INCREMENTAL_DELETE",
        "LEDGER_EXCHANGE_RATES",
        "LEDGER_DISPLAY_PLACES",
        "LEDGER_LEDGER_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


class TestLedgerConfig:
    """Tests for LedgerConfig."""

    def test_defaults(self):
        config = LedgerConfig()
        assert config.overdraft_policy == "reject"
        assert config.incremental_delete is True
        assert config.validate() == []

    def test_to_rules(self):
        rules = LedgerConfig.from_dict({"overdraft_policy": "clamp", "position_epsilon": 0.001}).to_rules()
        assert rules.overdraft_policy is OverdraftPolicy.CLAMP
        assert rules.position_epsilon == Fraction(1, 1000)

    def test_from_dict_ignores_unknown_keys(self):
        config = LedgerConfig.from_dict({"display_places": 4, "unknown": 1})
        assert config.display_places == 4

    def test_from_yaml_with_section(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text(
            "ledger:\n"
            "  overdraft_policy: clamp\n"
            "  reporting_currency: CNY\n"
            "  exchange_rates:\n"
            "    cny: 7.1\n",
            encoding="utf-8",
        )
        config = LedgerConfig.from_yaml(path)
        assert config.overdraft_policy == "clamp"
        assert config.exchange_rates == {"CNY": "7.1"}
        assert config.make_converter().convert("7.1", "CNY") == 1

    def test_load_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "ledger.yaml"
        path.write_text("overdraft_policy: clamp\nincremental_delete: true\n", encoding="utf-8")
        monkeypatch.setenv("LEDGER_CONFIG_PATH", str(path))
        monkeypatch.setenv("LEDGER_INCREMENTAL_DELETE", "false")
        monkeypatch.setenv("LEDGER_EXCHANGE_RATES", "eur=0.9, jpy=150")
        config = LedgerConfig.load()
        assert config.overdraft_policy == "clamp"
        assert config.incremental_delete is False
        assert config.exchange_rates["EUR"] == "0.9"
        assert config.exchange_rates["JPY"] == "150"

    def test_load_missing_explicit_path(self, tmp_path):
        with pytest.raises(LedgerConfigError):
            LedgerConfig.load(tmp_path / "missing.yaml")

    def test_load_rejects_invalid_env(self, monkeypatch):
        monkeypatch.setenv("LEDGER_OVERDRAFT_POLICY", "ignore")
        with pytest.raises(LedgerConfigError, match="overdraft_policy"):
            LedgerConfig.load()

    def test_validate_collects_errors(self):
        config = LedgerConfig(
            position_epsilon="-1",
            total_tolerance="abc",
            exchange_rates={"CNY": "0"},
            display_places=20,
        )
        errors = config.validate()
        assert len(errors) == 4

    def test_to_dict_round_trip(self):
        config = LedgerConfig(overdraft_policy="clamp", exchange_rates={"HKD": "7.8"})
        assert LedgerConfig.from_dict(config.to_dict()) == config
