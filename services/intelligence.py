"""
Intelligence feed service.
Pulls AI-generated market insights for the current holdings into the event store.
"""

import logging
from typing import List, Sequence

from exceptions import AIUnavailableError
from models import Asset, MarketEvent
from services.ai_gateway import AIGateway
from store import EventStore

logger = logging.getLogger(__name__)


class IntelligenceFeed:
    """Refreshes the market event collection from the AI gateway."""

    def __init__(self, gateway: AIGateway, events: EventStore):
        self.gateway = gateway
        self.events = events

    def refresh(self, portfolio: Sequence[Asset]) -> List[MarketEvent]:
        """
        Generate insights for the holdings and merge the new ones.

        Returns:
            Events added to the store; empty when nothing new arrived or the
            gateway was unavailable
        """
        if not portfolio:
            return []
        try:
            insights = self.gateway.generate_market_insights(portfolio)
        except AIUnavailableError as e:
            logger.warning(f"Insight generation skipped: {e}")
            return []
        return self.events.merge(insights)
