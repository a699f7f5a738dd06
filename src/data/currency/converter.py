"""Currency conversion utilities.

Provides the exchange-rate collaborator used to consolidate per-asset
amounts (always in the asset's native currency) into one reporting currency.
The ledger itself never converts.
"""

from __future__ import annotations

import logging
from datetime import datetime
from fractions import Fraction
from typing import Mapping

from src.data.utils.amounts import AmountLike, to_amount

logger = logging.getLogger(__name__)


class CurrencyConverter:
    """Currency converter over USD-based quotes.

    Rates are expressed as units of the currency per 1 USD (USD = 1,
    CNY = 7.2 means 1 USD buys 7.2 CNY). Conversion goes through USD:
    ``amount / rate[from] * rate[to]``. Amounts stay exact.

    Example:
        >>> converter = CurrencyConverter()
        >>> converter.convert(72, "CNY", "USD")
        Fraction(10, 1)
    """

    # Fallback quotes when no rates are configured
    DEFAULT_RATES: dict[str, str] = {
        "USD": "1",
        "CNY": "7.2",
        "HKD": "7.8",
    }

    def __init__(self, rates: Mapping[str, AmountLike] | None = None):
        """Initialize currency converter.

        Args:
            rates: Units-per-USD quotes. Missing currencies fall back to
                DEFAULT_RATES.
        """
        self._rates: dict[str, Fraction] = {k: to_amount(v) for k, v in self.DEFAULT_RATES.items()}
        self._last_refresh: datetime | None = None
        if rates:
            self.set_rates(rates)

    def set_rates(self, rates: Mapping[str, AmountLike]) -> None:
        """Replace or add quotes.

        Args:
            rates: Units-per-USD quotes keyed by currency code.

        Raises:
            ValueError: If a rate is not positive.
        """
        for currency, value in rates.items():
            rate = to_amount(value)
            if rate <= 0:
                raise ValueError(f"Exchange rate for {currency} must be positive, got {value}")
            self._rates[currency.upper()] = rate
            logger.debug(f"Updated {currency.upper()} rate: {rate}")
        self._last_refresh = datetime.now()

    def get_rate(self, currency: str, to_currency: str = "USD") -> Fraction:
        """Get exchange rate.

        Args:
            currency: Source currency code.
            to_currency: Target currency code (default: USD).

        Returns:
            Exchange rate (1 source = X target).
        """
        currency = currency.upper()
        to_currency = to_currency.upper()

        if currency == to_currency:
            return Fraction(1)

        from_rate = self._quote(currency)
        to_rate = self._quote(to_currency)
        return to_rate / from_rate

    def convert(
        self,
        amount: AmountLike,
        from_currency: str,
        to_currency: str = "USD",
    ) -> Fraction:
        """Convert amount between currencies.

        Args:
            amount: Amount to convert.
            from_currency: Source currency code.
            to_currency: Target currency code (default: USD).

        Returns:
            Converted amount.
        """
        return to_amount(amount) * self.get_rate(from_currency, to_currency)

    def get_all_rates(self) -> dict[str, Fraction]:
        """Get all current quotes (units per USD)."""
        return dict(self._rates)

    @property
    def last_refresh(self) -> datetime | None:
        """When rates were last set explicitly."""
        return self._last_refresh

    def _quote(self, currency: str) -> Fraction:
        rate = self._rates.get(currency)
        if rate is None:
            logger.warning(f"No exchange rate for {currency}, treating as 1 per USD")
            return Fraction(1)
        return rate
