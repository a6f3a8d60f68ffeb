"""
State stores for UniAsset.
Session state lives here; views read it and mutate it only through store methods.
"""

from store.portfolio_store import PortfolioStore
from store.event_store import EventStore

__all__ = [
    'PortfolioStore',
    'EventStore',
]
