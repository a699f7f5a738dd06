"""Transaction model.

A transaction is an immutable financial event in the ledger. It is never
patched in place: an edit is a delete of the old record followed by an insert
of the new one.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from fractions import Fraction
from typing import Any

from src.data.models.enums import TransactionKind
from src.data.utils.amounts import ZERO, AmountLike, amount_from_json, amount_to_json, to_amount
from src.data.utils.dates import parse_ledger_date

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_enum_name(value: str) -> str:
    """Normalize "BalanceAdjustment" / "balance-adjustment" to "BALANCE_ADJUSTMENT"."""
    text = _CAMEL_BOUNDARY.sub("_", value.strip())
    return text.replace("-", "_").replace(" ", "_").upper()


def parse_transaction_kind(value: TransactionKind | str) -> TransactionKind:
    """Parse a transaction kind from its enum or any common spelling."""
    if isinstance(value, TransactionKind):
        return value
    return TransactionKind(normalize_enum_name(value))


@dataclass(frozen=True)
class Transaction:
    """Single ledger event.

    Attributes:
        id: Unique transaction id.
        asset_id: Id of the AssetMetadata this event belongs to.
        kind: Event kind (Buy, Sell, ...).
        date: Ordering key (naive UTC datetime).
        quantity_change: Signed quantity. Positive increases the position,
            negative decreases it.
        price_per_unit: Trade price (Buy/Sell), valuation price
            (BalanceAdjustment), ignored for Dividend.
        fee: Transaction fee (>= 0).
        total: Monetary effect: cost for inflows, proceeds for outflows,
            cash amount for dividends.
        note: Free text.
    """

    id: str
    asset_id: str
    kind: TransactionKind
    date: datetime
    quantity_change: Fraction = ZERO
    price_per_unit: Fraction = ZERO
    fee: Fraction = ZERO
    total: Fraction = ZERO
    note: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", parse_transaction_kind(self.kind))
        object.__setattr__(self, "date", parse_ledger_date(self.date))
        for name in ("quantity_change", "price_per_unit", "fee", "total"):
            object.__setattr__(self, name, to_amount(getattr(self, name)))

    @classmethod
    def create(
        cls,
        asset_id: str,
        kind: TransactionKind | str,
        date: str | date | datetime,
        quantity_change: AmountLike = 0,
        price_per_unit: AmountLike = 0,
        fee: AmountLike = 0,
        total: AmountLike = None,
        note: str = "",
        id: str | None = None,
    ) -> "Transaction":
        """Build a transaction from loose inputs.

        When ``total`` is omitted it is computed with :func:`expected_total`,
        which is what the entry forms do.
        """
        kind = parse_transaction_kind(kind)
        qty = to_amount(quantity_change)
        price = to_amount(price_per_unit)
        fee_amt = to_amount(fee)
        total_amt = expected_total(kind, qty, price, fee_amt) if total is None else to_amount(total)
        return cls(
            id=id or str(uuid.uuid4()),
            asset_id=asset_id,
            kind=kind,
            date=parse_ledger_date(date),
            quantity_change=qty,
            price_per_unit=price,
            fee=fee_amt,
            total=total_amt,
            note=note or "",
        )

    @property
    def quantity(self) -> Fraction:
        """Absolute quantity moved by this event."""
        return abs(self.quantity_change)

    @property
    def expected_total(self) -> Fraction:
        """Total implied by quantity, price and fee for this kind."""
        return expected_total(self.kind, self.quantity_change, self.price_per_unit, self.fee)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (amounts serialized losslessly)."""
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "kind": self.kind.value,
            "date": self.date.isoformat(),
            "quantity_change": amount_to_json(self.quantity_change),
            "price_per_unit": amount_to_json(self.price_per_unit),
            "fee": amount_to_json(self.fee),
            "total": amount_to_json(self.total),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create instance from dictionary.

        Accepts both snake_case keys and the camelCase keys of the browser
        storage format (assetId, quantityChange, pricePerUnit, type).
        """
        kind = data.get("kind", data.get("type"))
        if kind is None:
            raise ValueError("transaction kind is required")
        total = data.get("total")
        return cls.create(
            id=data.get("id") or None,
            asset_id=data.get("asset_id", data.get("assetId", "")),
            kind=kind,
            date=data["date"],
            quantity_change=amount_from_json(data.get("quantity_change", data.get("quantityChange", 0))),
            price_per_unit=amount_from_json(data.get("price_per_unit", data.get("pricePerUnit", 0))),
            fee=amount_from_json(data.get("fee", 0)),
            total=None if total is None else amount_from_json(total),
            note=data.get("note") or "",
        )


def expected_total(
    kind: TransactionKind,
    quantity_change: Fraction,
    price_per_unit: Fraction,
    fee: Fraction,
) -> Fraction:
    """Monetary total the ledger expects for a transaction.

    - Buy / Deposit / Borrow: quantity * price + fee (cost including fee)
    - Sell / Withdrawal / Repay / Dividend: quantity * price - fee (net proceeds)
    - BalanceAdjustment: quantity * price (valuation, no fee)
    """
    gross = abs(quantity_change) * price_per_unit
    if kind.is_increasing:
        return gross + fee
    if kind.is_decreasing or kind is TransactionKind.DIVIDEND:
        return gross - fee
    return gross

