"""
MarketEvent model - a past or upcoming occurrence with an assessed impact.
"""

from enum import Enum
from typing import List
from sqlmodel import SQLModel, Field

from models.asset import new_id


class EventType(str, Enum):
    PAST = "past"
    UPCOMING = "upcoming"


class ImpactStrength(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImpactDirection(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MIXED = "mixed"
    NEUTRAL = "neutral"


class MarketEvent(SQLModel):
    """Market commentary item. Never modified after creation."""
    id: str = Field(default_factory=new_id)
    type: EventType
    title: str
    date: str  # ISO date or "Ongoing"
    affected_assets: List[str] = Field(default_factory=list)  # Symbols or exposure tags
    impact_strength: ImpactStrength = ImpactStrength.MEDIUM
    direction: ImpactDirection = ImpactDirection.NEUTRAL
    reasoning: str = ""
