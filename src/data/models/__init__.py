"""Data models for the transaction ledger."""

from src.data.models.asset import Asset, AssetMetadata, parse_asset_class
from src.data.models.enums import AssetClass, TransactionKind
from src.data.models.transaction import Transaction, expected_total, parse_transaction_kind

__all__ = [
    "Asset",
    "AssetClass",
    "AssetMetadata",
    "Transaction",
    "TransactionKind",
    "expected_total",
    "parse_asset_class",
    "parse_transaction_kind",
]
