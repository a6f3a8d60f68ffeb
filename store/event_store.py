"""
Market event store.
The collection only grows; events are unique by title.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from models import EventType, MarketEvent

logger = logging.getLogger(__name__)


class EventStore:
    """In-memory collection of market events."""

    def __init__(self, events: Optional[Iterable[MarketEvent]] = None):
        self._events: Tuple[MarketEvent, ...] = ()
        if events:
            self.merge(events)

    @property
    def events(self) -> Tuple[MarketEvent, ...]:
        return self._events

    def past(self) -> List[MarketEvent]:
        return [e for e in self._events if e.type == EventType.PAST]

    def upcoming(self) -> List[MarketEvent]:
        return [e for e in self._events if e.type == EventType.UPCOMING]

    def merge(self, events: Iterable[MarketEvent]) -> List[MarketEvent]:
        """
        Append events whose title is not already known.

        Args:
            events: Candidate events, e.g. a batch of AI insights

        Returns:
            The events that were actually added
        """
        titles = {e.title for e in self._events}
        accepted = []
        for event in events:
            if event.title in titles:
                continue
            titles.add(event.title)
            accepted.append(event)

        if accepted:
            self._events = self._events + tuple(accepted)
            logger.info(f"Added {len(accepted)} market events")
        return accepted
