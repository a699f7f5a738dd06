"""
Ledger Configuration - 账本配置

账本引擎与 CLI 的配置参数。

配置来源 (优先级高→低):
1. 环境变量 (前缀: LEDGER_, 支持 .env 文件)
2. YAML 配置文件 (LEDGER_CONFIG_PATH 或 config/ledger.yaml)
3. dataclass 默认值

配置文件: config/ledger.yaml
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.data.currency.converter import CurrencyConverter
from src.data.utils.amounts import to_amount
from src.engine.ledger.fold import LedgerRules, OverdraftPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent.parent.parent / "config" / "ledger.yaml"


class LedgerConfigError(ValueError):
    """Invalid ledger configuration."""


@dataclass
class LedgerConfig:
    """账本配置

    示例:
        # 从 YAML + 环境变量加载
        config = LedgerConfig.load()

        # 从字典加载 (用于测试)
        config = LedgerConfig.from_dict({"overdraft_policy": "clamp"})

        # 环境变量覆盖
        export LEDGER_OVERDRAFT_POLICY=clamp
        export LEDGER_EXCHANGE_RATES="CNY=7.1,HKD=7.8"
    """

    # 数值规则 (字符串保存, 精确解析)
    position_epsilon: str = "0.000001"  # 数量小于等于此值视为清仓
    total_tolerance: str = "0.01"  # total 校验容差 (分)

    # 超卖处理: reject (拒绝) 或 clamp (清仓并标记)
    overdraft_policy: str = OverdraftPolicy.REJECT.value

    # 允许增量撤销 (仅对资产最后一笔交易生效)
    incremental_delete: bool = True

    # 汇总币种与汇率 (每 1 USD 兑换的单位数)
    reporting_currency: str = "USD"
    exchange_rates: dict[str, str] = field(default_factory=dict)

    # 存储与展示
    ledger_path: str = "data/ledger/ledger.json"
    display_places: int = 2

    _ENV_PREFIX = "LEDGER_"

    @classmethod
    def load(cls, path: str | Path | None = None) -> "LedgerConfig":
        """加载配置

        优先级: 环境变量 > YAML > dataclass 字段默认值
        环境变量命名规则: LEDGER_ + 字段名大写，如 LEDGER_OVERDRAFT_POLICY

        Args:
            path: YAML 文件路径 (默认: LEDGER_CONFIG_PATH 或 config/ledger.yaml)

        Returns:
            LedgerConfig 实例

        Raises:
            LedgerConfigError: 配置校验失败
        """
        load_dotenv()

        config_file = Path(path or os.getenv("LEDGER_CONFIG_PATH") or DEFAULT_CONFIG_FILE)
        if config_file.exists():
            config = cls.from_yaml(config_file)
        else:
            if path:
                raise LedgerConfigError(f"Config file not found: {config_file}")
            config = cls()

        config._apply_env()

        errors = config.validate()
        if errors:
            raise LedgerConfigError("; ".join(errors))
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LedgerConfig":
        """从 YAML 文件加载配置

        支持顶层 ``ledger:`` 节或扁平结构。
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded ledger config from {path}")
        return cls.from_dict(data.get("ledger", data))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerConfig":
        """从字典创建配置

        只覆盖字典中存在的字段，缺失字段使用 dataclass 默认值。
        """
        valid_fields = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in valid_fields}
        if "exchange_rates" in kwargs:
            kwargs["exchange_rates"] = {
                str(k).upper(): str(v) for k, v in (kwargs["exchange_rates"] or {}).items()
            }
        for name in ("position_epsilon", "total_tolerance"):
            if name in kwargs:
                kwargs[name] = str(kwargs[name])
        return cls(**kwargs)

    def _apply_env(self) -> None:
        for f in fields(self):
            val = os.getenv(f"{self._ENV_PREFIX}{f.name.upper()}")
            if val is None:
                continue
            if f.name == "incremental_delete":
                self.incremental_delete = val.lower() in ("true", "1", "yes")
            elif f.name == "display_places":
                try:
                    self.display_places = int(val)
                except ValueError:
                    logger.warning(f"Ignoring non-integer LEDGER_DISPLAY_PLACES={val}")
            elif f.name == "exchange_rates":
                self.exchange_rates.update(_parse_rates(val))
            else:
                setattr(self, f.name, val)

    def validate(self) -> list[str]:
        """验证配置

        Returns:
            错误信息列表 (空表示验证通过)
        """
        errors = []

        for name in ("position_epsilon", "total_tolerance"):
            try:
                if to_amount(getattr(self, name)) < 0:
                    errors.append(f"{name} must be non-negative")
            except ValueError:
                errors.append(f"{name} must be a number, got {getattr(self, name)!r}")

        if self.overdraft_policy not in {p.value for p in OverdraftPolicy}:
            errors.append(f"overdraft_policy must be 'reject' or 'clamp', got {self.overdraft_policy!r}")

        for currency, rate in self.exchange_rates.items():
            try:
                if to_amount(rate) <= 0:
                    errors.append(f"exchange rate for {currency} must be positive")
            except ValueError:
                errors.append(f"exchange rate for {currency} must be a number, got {rate!r}")

        if not self.reporting_currency:
            errors.append("reporting_currency is required")
        if not 0 <= self.display_places <= 12:
            errors.append("display_places must be between 0 and 12")

        return errors

    def to_rules(self) -> LedgerRules:
        """Numeric rules for projection and reversal."""
        return LedgerRules(
            position_epsilon=to_amount(self.position_epsilon),
            overdraft_policy=OverdraftPolicy(self.overdraft_policy),
        )

    def make_converter(self) -> CurrencyConverter:
        """Currency converter seeded with the configured rates."""
        return CurrencyConverter(self.exchange_rates)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "position_epsilon": self.position_epsilon,
            "total_tolerance": self.total_tolerance,
            "overdraft_policy": self.overdraft_policy,
            "incremental_delete": self.incremental_delete,
            "reporting_currency": self.reporting_currency,
            "exchange_rates": dict(self.exchange_rates),
            "ledger_path": self.ledger_path,
            "display_places": self.display_places,
        }


def _parse_rates(value: str) -> dict[str, str]:
    """Parse "CNY=7.2,HKD=7.8" into a rate mapping."""
    rates = {}
    for pair in value.split(","):
        if not pair.strip():
            continue
        currency, _, rate = pair.partition("=")
        rates[currency.strip().upper()] = rate.strip()
    return rates
