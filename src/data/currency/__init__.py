"""Currency conversion collaborator."""

from src.data.currency.converter import CurrencyConverter

__all__ = ["CurrencyConverter"]
