"""
AI gateway for UniAsset.
Wraps the generative model behind three operations: parsing a free-form
asset description, answering advisory questions and generating market
insights. Model output is validated against strict schemas before anything
reaches application state.
"""

import re
import json
import logging
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config import get_settings
from exceptions import AIUnavailableError
from llm_engine import LLMClient
from models import (
    Asset, ChatMessage, EventType, ImpactDirection, ImpactStrength, MarketEvent, ProductType
)
from prompts import EXTRACTION_SYSTEM_PROMPT, render_prompt
from services.common import normalize_symbol
from services.market_data import MarketDataService, MarketQuote

logger = logging.getLogger(__name__)


NO_API_KEY_MESSAGE = "I need an API Key to provide advice. Please configure it."
EMPTY_RESPONSE_MESSAGE = "I couldn't generate a response at this time."

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

_PRODUCT_TYPE_ALIASES = {
    "cash": ProductType.CASH_YIELD,
    "yield": ProductType.CASH_YIELD,
    "cash/yield": ProductType.CASH_YIELD,
    "cash / yield": ProductType.CASH_YIELD,
    "stock": ProductType.STOCK,
    "etf": ProductType.ETF,
    "crypto": ProductType.CRYPTO,
    "derivatives": ProductType.DERIVATIVES,
    "commodities": ProductType.COMMODITIES,
    "other": ProductType.OTHER,
}


def _non_negative(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number < 0:
        return None
    return number


def _tag_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    tags = []
    for item in value:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class ParsedAsset(BaseModel):
    """Partial asset returned by the parser. A draft, never a complete asset."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    platform: Optional[str] = None
    product_type: Optional[ProductType] = Field(default=None, alias="productType")
    symbol: str
    quantity: Optional[float] = None
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")
    total_value: Optional[float] = Field(default=None, alias="totalValue")
    currency: Optional[str] = None
    exposure_tags: Optional[List[str]] = Field(default=None, alias="exposureTags")

    @field_validator("symbol", mode="before")
    @classmethod
    def _symbol(cls, value):
        symbol = normalize_symbol(value if isinstance(value, str) else None)
        if not symbol:
            raise ValueError("symbol is required")
        return symbol

    @field_validator("product_type", mode="before")
    @classmethod
    def _product_type(cls, value):
        if value is None:
            return None
        return _PRODUCT_TYPE_ALIASES.get(str(value).strip().lower(), ProductType.OTHER)

    @field_validator("quantity", "unit_price", "total_value", mode="before")
    @classmethod
    def _amount(cls, value):
        return _non_negative(value)

    @field_validator("platform", mode="before")
    @classmethod
    def _platform(cls, value):
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, value):
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip().upper()

    @field_validator("exposure_tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return _tag_list(value) or None


class GeneratedEvent(BaseModel):
    """Schema for one AI-generated market event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: EventType
    title: str = Field(min_length=1)
    date: str = "Ongoing"
    affected_assets: List[str] = Field(default_factory=list, alias="affectedAssets")
    impact_strength: ImpactStrength = Field(default=ImpactStrength.MEDIUM, alias="impactStrength")
    direction: ImpactDirection = ImpactDirection.NEUTRAL
    reasoning: str = ""

    @field_validator("type", "impact_strength", "direction", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("title", "date", "reasoning", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("affected_assets", mode="before")
    @classmethod
    def _assets(cls, value):
        return _tag_list(value)

    def to_event(self) -> MarketEvent:
        return MarketEvent(
            type=self.type,
            title=self.title,
            date=self.date or "Ongoing",
            affected_assets=self.affected_assets,
            impact_strength=self.impact_strength,
            direction=self.direction,
            reasoning=self.reasoning,
        )


def extract_json(text: str) -> Any:
    """
    Decode the JSON payload of a model response.
    Tolerates markdown code fences and prose around a single object or array.

    Raises:
        ValueError: if no JSON value can be decoded
    """
    if not text or not text.strip():
        raise ValueError("empty response")
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i != -1]
    if not starts:
        raise ValueError("no JSON found in response")
    start = min(starts)
    closer = "}" if cleaned[start] == "{" else "]"
    end = cleaned.rfind(closer)
    if end <= start:
        raise ValueError("unterminated JSON in response")
    return json.loads(cleaned[start:end + 1])


def summarize_portfolio(portfolio: Sequence[Asset]) -> str:
    """Compact one-line summary of holdings for prompts."""
    return "; ".join(
        f"{a.quantity:g} {a.symbol} (${a.total_value:,.2f}) [{', '.join(a.exposure_tags)}]"
        for a in portfolio
    )


def summarize_events(events: Sequence[MarketEvent]) -> str:
    """One line per event for prompts."""
    return "\n".join(
        f"[{e.type.value.upper()}] {e.title} ({e.date}): Impacts {', '.join(e.affected_assets)}"
        for e in events
    )


def summarize_history(history: Sequence[ChatMessage], turns: int) -> str:
    """The last few chat turns for prompts."""
    if turns <= 0:
        return ""
    return "\n".join(f"{m.role.value}: {m.text}" for m in list(history)[-turns:])


class AIGateway:
    """
    Adapter between the application and the generative model.

    The client is created lazily from settings; when no credentials are
    configured every operation degrades instead of failing the session.
    """

    def __init__(self, llm_client: Optional[LLMClient] = None, market_data: Optional[MarketDataService] = None):
        self._client = llm_client
        self.market_data = market_data or MarketDataService()

    @property
    def is_available(self) -> bool:
        return self._client is not None or get_settings().is_ai_configured

    def _get_client(self) -> LLMClient:
        if self._client is None:
            if not get_settings().is_ai_configured:
                raise AIUnavailableError("AI features are unavailable: no API key configured")
            try:
                self._client = LLMClient()
            except ValueError as e:
                raise AIUnavailableError(str(e)) from e
        return self._client

    def _invoke(self, message: str, system_message: Optional[str] = None, **kwargs) -> str:
        client = self._get_client()
        try:
            return client.invoke(message, system_message=system_message, **kwargs)
        except Exception as e:
            logger.error(f"LLM call failed: {e}")
            raise AIUnavailableError("AI service call failed") from e

    def parse_asset_entry(
        self,
        free_text: str,
        image_b64: Optional[str] = None,
        image_mime: str = "image/png"
    ) -> ParsedAsset:
        """
        Turn a free-form description and/or screenshot into draft asset fields.

        Args:
            free_text: e.g. "bought 10 AAPL at 190 on Robinhood"
            image_b64: Optional base64 image (data URL prefix allowed)
            image_mime: MIME type of the image

        Returns:
            ParsedAsset with whichever fields the model could determine

        Raises:
            ValueError: if neither text nor image is given
            AIUnavailableError: on missing credentials, call failure or unusable output
        """
        free_text = (free_text or "").strip()
        if image_b64 and image_b64.startswith("data:") and "," in image_b64:
            header, image_b64 = image_b64.split(",", 1)
            image_mime = header[5:].split(";")[0] or image_mime
        if not free_text and not image_b64:
            raise ValueError("Provide a description or an image to parse")

        prompt = render_prompt("parse_asset.txt", user_input=free_text)
        text = self._invoke(prompt, system_message=EXTRACTION_SYSTEM_PROMPT,
                            image_b64=image_b64 or None, image_mime=image_mime)
        try:
            payload = extract_json(text)
            if isinstance(payload, list) and payload:
                payload = payload[0]
            parsed = ParsedAsset.model_validate(payload)
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to parse asset data from model output: {e}")
            raise AIUnavailableError("Failed to interpret asset. Please try again.") from e

        logger.info(f"Parsed asset entry: {parsed.symbol}")
        return parsed

    def get_advisory_response(
        self,
        query: str,
        portfolio: Sequence[Asset],
        events: Sequence[MarketEvent],
        history: Sequence[ChatMessage]
    ) -> str:
        """
        Answer an advisory question in the context of the user's holdings.

        Args:
            query: The user's question
            portfolio: Current holdings
            events: Known market events
            history: Chat transcript before this question

        Returns:
            Answer text, bounded in length

        Raises:
            AIUnavailableError: if the model call fails
        """
        if not self.is_available:
            return NO_API_KEY_MESSAGE

        settings = get_settings()
        prompt = render_prompt(
            "advisory_query.txt",
            portfolio_summary=summarize_portfolio(portfolio) or "Empty Portfolio",
            event_summary=summarize_events(events) or "None",
            history_context=summarize_history(history, settings.advisory_history_turns) or "None",
            query=query,
        )
        answer = self._invoke(prompt).strip()
        if not answer:
            return EMPTY_RESPONSE_MESSAGE
        if len(answer) > settings.advisory_max_chars:
            answer = answer[:settings.advisory_max_chars].rstrip() + "…"
        return answer

    def generate_market_insights(self, portfolio: Sequence[Asset]) -> List[MarketEvent]:
        """
        Generate a small batch of plausible events tied to the holdings.
        The caller deduplicates against known events.

        Returns:
            Validated events; empty for an empty portfolio or without credentials

        Raises:
            AIUnavailableError: if the model call fails or returns no JSON array
        """
        if not portfolio or not self.is_available:
            return []

        holdings = ", ".join(dict.fromkeys(a.symbol for a in portfolio))
        prompt = render_prompt("market_insights.txt", holdings=holdings)
        text = self._invoke(prompt, system_message=EXTRACTION_SYSTEM_PROMPT)

        try:
            payload = extract_json(text)
        except ValueError as e:
            logger.error(f"Market insights response was not JSON: {e}")
            raise AIUnavailableError("Failed to generate market insights") from e
        if isinstance(payload, dict):
            payload = payload.get("events", [payload])
        if not isinstance(payload, list):
            raise AIUnavailableError("Failed to generate market insights")

        events = []
        for item in payload:
            try:
                events.append(GeneratedEvent.model_validate(item).to_event())
            except ValidationError as e:
                logger.warning(f"Dropping invalid generated event: {e.error_count()} errors")
        logger.info(f"Generated {len(events)} market insights")
        return events

    def get_asset_market_data(self, symbol: str, product_type: Optional[ProductType] = None) -> Optional[MarketQuote]:
        """Current price and name for a symbol, or None if unavailable."""
        return self.market_data.get_quote(normalize_symbol(symbol), product_type)
