"""
Data models for UniAsset.
All SQLModel data classes are centralized here.
"""

from models.asset import Asset, ProductType, FieldChange, UpdateRecord, TRACKED_FIELDS, new_id
from models.market_event import MarketEvent, EventType, ImpactStrength, ImpactDirection
from models.wallet import Wallet, Chain
from models.chat_message import ChatMessage, ChatRole

__all__ = [
    'Asset',
    'ProductType',
    'FieldChange',
    'UpdateRecord',
    'TRACKED_FIELDS',
    'new_id',
    'MarketEvent',
    'EventType',
    'ImpactStrength',
    'ImpactDirection',
    'Wallet',
    'Chain',
    'ChatMessage',
    'ChatRole',
]
