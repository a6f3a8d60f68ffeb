"""
Asset model - represents a single holding in the portfolio.
"""

import uuid
from enum import Enum
from typing import List, Optional, Union
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class ProductType(str, Enum):
    """Kind of product an asset represents."""
    STOCK = "Stock"
    ETF = "ETF"
    CRYPTO = "Crypto"
    DERIVATIVES = "Derivatives"
    COMMODITIES = "Commodities"
    CASH_YIELD = "Cash / Yield"
    OTHER = "Other"


# Fields whose edits are recorded in an asset's update history
TRACKED_FIELDS = ("quantity", "unit_price", "notes", "platform")


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex[:12]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FieldChange(SQLModel):
    """A single field-level delta produced by an edit."""
    field: str
    old_value: Optional[Union[float, str]] = None
    new_value: Optional[Union[float, str]] = None


class UpdateRecord(SQLModel):
    """One entry of an asset's append-only audit trail."""
    timestamp: datetime = Field(default_factory=utc_now)
    changes: List[FieldChange] = Field(default_factory=list)


class Asset(SQLModel):
    """Represents a holding (stock, ETF, token, cash position...)."""
    id: str = Field(default_factory=new_id)
    platform: str = "Other"  # e.g., "Robinhood", "Coinbase", "Wallet"
    product_type: ProductType = ProductType.OTHER
    symbol: str  # e.g., "AAPL", "BTC"
    quantity: float = 0.0
    unit_price: float = 0.0
    total_value: float = 0.0
    currency: str = "USD"
    exposure_tags: List[str] = Field(default_factory=list)  # e.g., ["AI Hardware", "Growth"]
    expected_yield_apy: Optional[float] = None  # %
    notes: Optional[str] = None
    change24h: Optional[float] = None  # simulated daily change, %
    created_at: datetime = Field(default_factory=utc_now)

    # Chain-sourced assets only
    wallet_address: Optional[str] = None
    is_auto_synced: bool = False

    update_history: List[UpdateRecord] = Field(default_factory=list)

    @property
    def is_wallet_asset(self) -> bool:
        return self.wallet_address is not None
