"""
Advisory chat service.
Keeps the conversation transcript and relays questions to the AI gateway.
"""

import logging
from typing import List, Sequence, Tuple

from exceptions import AIUnavailableError
from models import Asset, ChatMessage, ChatRole, MarketEvent
from services.ai_gateway import AIGateway

logger = logging.getLogger(__name__)


CONNECTION_LOST_MESSAGE = "Connection lost. Please check your network."


def welcome_text(portfolio: Sequence[Asset]) -> str:
    """Opening line of a new conversation."""
    focus = "markets"
    if portfolio and portfolio[0].exposure_tags:
        focus = portfolio[0].exposure_tags[0]
    return (
        f"Hello. I've analyzed your {len(portfolio)} assets. "
        f"I see exposure in {focus}. How can I help?"
    )


class AdvisoryChat:
    """
    Append-only chat transcript between the user and the advisor.
    Messages are never edited or removed.
    """

    def __init__(self, gateway: AIGateway, portfolio: Sequence[Asset] = ()):
        self.gateway = gateway
        self._messages: List[ChatMessage] = [
            ChatMessage(role=ChatRole.MODEL, text=welcome_text(portfolio))
        ]

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def send(
        self,
        text: str,
        portfolio: Sequence[Asset],
        events: Sequence[MarketEvent]
    ) -> List[ChatMessage]:
        """
        Ask the advisor a question.

        Args:
            text: User's message
            portfolio: Current holdings
            events: Known market events

        Returns:
            The messages appended by this call (user then model), or an empty
            list when the input is blank
        """
        text = (text or "").strip()
        if not text:
            return []

        history = list(self._messages)
        user_message = ChatMessage(role=ChatRole.USER, text=text)
        self._messages.append(user_message)

        try:
            reply = self.gateway.get_advisory_response(text, portfolio, events, history)
        except AIUnavailableError as e:
            logger.error(f"Advisory response failed: {e}")
            reply = CONNECTION_LOST_MESSAGE

        model_message = ChatMessage(role=ChatRole.MODEL, text=reply)
        self._messages.append(model_message)
        return [user_message, model_message]
