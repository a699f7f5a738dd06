"""Portfolio summary - aggregates over projected assets.

Each asset's amounts are in its native currency; they are converted to the
reporting currency before summation.

Example:
    >>> from src.engine.portfolio.summary import calc_portfolio_summary
    >>> summary = calc_portfolio_summary(result.assets, CurrencyConverter(), "USD")
    >>> print(f"Net worth: {summary.net_worth}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Sequence

from src.data.currency.converter import CurrencyConverter
from src.data.models.asset import Asset
from src.data.models.enums import AssetClass
from src.data.utils.amounts import ONE_HUNDRED, ZERO, to_decimal


@dataclass
class PortfolioSummary:
    """Portfolio-level aggregates in one reporting currency.

    Attributes:
        currency: Reporting currency.
        total_market_value: Sum of current values (liabilities included).
        total_cost_basis: Sum of cost bases.
        total_unrealized_pnl: Sum of unrealized P&L.
        total_realized_pnl: Sum of realized P&L.
        total_assets: Current value of non-liability assets.
        total_liabilities: Current value of liabilities.
        allocation: Non-liability value per asset class.
    """

    currency: str
    total_market_value: Fraction = ZERO
    total_cost_basis: Fraction = ZERO
    total_unrealized_pnl: Fraction = ZERO
    total_realized_pnl: Fraction = ZERO
    total_assets: Fraction = ZERO
    total_liabilities: Fraction = ZERO
    allocation: dict[AssetClass, Fraction] = field(default_factory=dict)

    @property
    def total_unrealized_pnl_percent(self) -> Fraction:
        """Unrealized P&L over cost basis (0 when basis is 0)."""
        if self.total_cost_basis == 0:
            return ZERO
        return self.total_unrealized_pnl / self.total_cost_basis * ONE_HUNDRED

    @property
    def net_worth(self) -> Fraction:
        return self.total_assets - self.total_liabilities

    @property
    def debt_ratio(self) -> Fraction:
        """Liabilities as a percentage of assets (0 without assets)."""
        if self.total_assets == 0:
            return ZERO
        return self.total_liabilities / self.total_assets * ONE_HUNDRED

    def allocation_percent(self) -> dict[AssetClass, Fraction]:
        """Share of non-liability value per asset class, in percent."""
        if self.total_assets == 0:
            return {}
        return {cls: value / self.total_assets * ONE_HUNDRED for cls, value in self.allocation.items()}

    def to_dict(self, places: int = 2) -> dict[str, Any]:
        def fmt(value: Fraction) -> str:
            return str(to_decimal(value, places))

        return {
            "currency": self.currency,
            "total_market_value": fmt(self.total_market_value),
            "total_cost_basis": fmt(self.total_cost_basis),
            "total_unrealized_pnl": fmt(self.total_unrealized_pnl),
            "total_unrealized_pnl_percent": fmt(self.total_unrealized_pnl_percent),
            "total_realized_pnl": fmt(self.total_realized_pnl),
            "total_assets": fmt(self.total_assets),
            "total_liabilities": fmt(self.total_liabilities),
            "net_worth": fmt(self.net_worth),
            "debt_ratio": fmt(self.debt_ratio),
            "allocation": {cls.value: fmt(value) for cls, value in self.allocation.items()},
        }


def calc_portfolio_summary(
    assets: Sequence[Asset],
    converter: CurrencyConverter | None = None,
    reporting_currency: str = "USD",
) -> PortfolioSummary:
    """Aggregate projected assets into a portfolio summary.

    Args:
        assets: Projected assets (each in its native currency).
        converter: Currency collaborator. Defaults to CurrencyConverter().
        reporting_currency: Currency of the summary.

    Returns:
        PortfolioSummary in ``reporting_currency``.
    """
    converter = converter or CurrencyConverter()
    summary = PortfolioSummary(currency=reporting_currency.upper())

    for asset in assets:
        rate = converter.get_rate(asset.currency, summary.currency)
        value = asset.current_value * rate

        summary.total_market_value += value
        summary.total_cost_basis += asset.total_cost_basis * rate
        summary.total_unrealized_pnl += asset.unrealized_pnl * rate
        summary.total_realized_pnl += asset.realized_pnl * rate

        if asset.is_liability:
            summary.total_liabilities += value
        else:
            summary.total_assets += value
            if value:
                summary.allocation[asset.asset_class] = summary.allocation.get(asset.asset_class, ZERO) + value

    return summary
