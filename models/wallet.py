"""
Wallet model - a connected on-chain address.
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from models.asset import new_id


class Chain(str, Enum):
    ETHEREUM = "Ethereum"
    SOLANA = "Solana"
    BITCOIN = "Bitcoin"
    POLYGON = "Polygon"


class Wallet(SQLModel):
    """Represents a wallet address whose holdings are synced into the portfolio."""
    id: str = Field(default_factory=new_id)
    address: str
    chain: Chain
    last_synced: Optional[datetime] = None
