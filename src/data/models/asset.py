"""Asset metadata and projected asset models.

AssetMetadata carries identity and market facts supplied by the caller.
Asset is the ledger's materialized view: metadata plus the position facts
derived from the transaction log. Assets are never the source of truth and
are rebuilt whenever the log changes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from fractions import Fraction
from typing import Any

from src.data.models.enums import AssetClass
from src.data.models.transaction import normalize_enum_name
from src.data.utils.amounts import (
    ONE_HUNDRED,
    ZERO,
    amount_from_json,
    amount_to_json,
    to_amount,
    to_decimal,
)
from src.data.utils.dates import parse_ledger_date


def parse_asset_class(value: AssetClass | str | None) -> AssetClass:
    """Parse an asset class from its enum or any common spelling."""
    if isinstance(value, AssetClass):
        return value
    if not value:
        return AssetClass.OTHER
    return AssetClass(normalize_enum_name(value))


@dataclass(frozen=True)
class AssetMetadata:
    """Identity and market facts for one asset.

    Attributes:
        id: Unique asset id.
        symbol: Ticker, currency code, or free label (e.g. "AAPL", "BTC", "Apt 4B").
        name: Display name.
        asset_class: Stock, Crypto, Fund, Cash, RealEstate, Liability or Other.
        currency: Native currency code of prices and amounts.
        current_price: Latest market price or manual valuation (>= 0).
        last_price_update: When current_price was last refreshed.
        date_acquired: Optional acquisition date (ISO), used by migration
            and history queries.
    """

    id: str
    symbol: str
    name: str = ""
    asset_class: AssetClass = AssetClass.OTHER
    currency: str = "USD"
    current_price: Fraction = ZERO
    last_price_update: datetime | None = None
    date_acquired: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "current_price", to_amount(self.current_price))
        if self.current_price < 0:
            raise ValueError(f"current_price must be non-negative for asset {self.id}")
        object.__setattr__(self, "currency", (self.currency or "USD").strip().upper())

    def with_price(self, price: Fraction, at: datetime) -> "AssetMetadata":
        """Copy with a new market price and timestamp."""
        return replace(self, current_price=price, last_price_update=at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "asset_class": self.asset_class.value,
            "currency": self.currency,
            "current_price": amount_to_json(self.current_price),
            "last_price_update": self.last_price_update.isoformat() if self.last_price_update else None,
            "date_acquired": self.date_acquired,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssetMetadata":
        """Create instance from dictionary.

        Accepts the browser storage keys as well (type, currentPrice,
        lastUpdated as epoch milliseconds, dateAcquired).
        """
        last_update = data.get("last_price_update", data.get("lastUpdated"))
        if isinstance(last_update, (int, float)) and not isinstance(last_update, bool):
            last_update = datetime.fromtimestamp(last_update / 1000, tz=timezone.utc).replace(tzinfo=None)
        elif last_update:
            last_update = parse_ledger_date(last_update)
        else:
            last_update = None

        return cls(
            id=data["id"],
            symbol=data.get("symbol", ""),
            name=data.get("name") or "",
            asset_class=parse_asset_class(data.get("asset_class", data.get("type"))),
            currency=data.get("currency") or "USD",
            current_price=amount_from_json(data.get("current_price", data.get("currentPrice", 0))),
            last_price_update=last_update,
            date_acquired=data.get("date_acquired", data.get("dateAcquired")),
        )


@dataclass(frozen=True)
class Asset:
    """Projected position for one asset.

    Position fields come from folding the transaction log; market fields come
    from the metadata. Derived values are computed on access so they can never
    drift from the fields they depend on.

    Attributes:
        metadata: Identity and market facts.
        quantity: Units currently held (>= 0).
        avg_cost: Weighted average cost per held unit (>= 0).
        total_cost_basis: Cost attributed to held units (>= 0).
        realized_pnl: Cumulative realized profit/loss.
    """

    metadata: AssetMetadata
    quantity: Fraction = ZERO
    avg_cost: Fraction = ZERO
    total_cost_basis: Fraction = ZERO
    realized_pnl: Fraction = ZERO

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def symbol(self) -> str:
        return self.metadata.symbol

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def asset_class(self) -> AssetClass:
        return self.metadata.asset_class

    @property
    def currency(self) -> str:
        return self.metadata.currency

    @property
    def current_price(self) -> Fraction:
        return self.metadata.current_price

    @property
    def last_price_update(self) -> datetime | None:
        return self.metadata.last_price_update

    @property
    def current_value(self) -> Fraction:
        """Market value: quantity * current_price."""
        return self.quantity * self.metadata.current_price

    @property
    def unrealized_pnl(self) -> Fraction:
        """Paper gain/loss: current_value - total_cost_basis."""
        return self.current_value - self.total_cost_basis

    @property
    def unrealized_pnl_percent(self) -> Fraction:
        """Unrealized P&L as a percentage of cost basis (0 when basis is 0)."""
        if self.total_cost_basis == 0:
            return ZERO
        return self.unrealized_pnl / self.total_cost_basis * ONE_HUNDRED

    @property
    def is_liability(self) -> bool:
        return self.metadata.asset_class is AssetClass.LIABILITY

    def to_dict(self, places: int = 8) -> dict[str, Any]:
        """Convert to dictionary with amounts rendered as decimal strings."""
        data = self.metadata.to_dict()
        data.update(
            {
                "current_price": str(to_decimal(self.current_price, places)),
                "quantity": str(to_decimal(self.quantity, places)),
                "avg_cost": str(to_decimal(self.avg_cost, places)),
                "total_cost_basis": str(to_decimal(self.total_cost_basis, places)),
                "realized_pnl": str(to_decimal(self.realized_pnl, places)),
                "current_value": str(to_decimal(self.current_value, places)),
                "unrealized_pnl": str(to_decimal(self.unrealized_pnl, places)),
                "unrealized_pnl_percent": str(to_decimal(self.unrealized_pnl_percent, places)),
            }
        )
        return data
