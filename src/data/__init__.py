"""Data layer: ledger models, amounts and the currency collaborator."""

from src.data.models import (
    Asset,
    AssetClass,
    AssetMetadata,
    Transaction,
    TransactionKind,
)

__all__ = [
    "Asset",
    "AssetClass",
    "AssetMetadata",
    "Transaction",
    "TransactionKind",
]
