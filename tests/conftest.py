"""Shared fixtures for the UniAsset test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from config import reload_settings
from llm_engine import LLMClient
from models import Asset, EventType, ImpactDirection, ImpactStrength, MarketEvent, ProductType
from services.ai_gateway import AIGateway
from services.wallet_service import WalletService
from store import EventStore, PortfolioStore

DEMO_ETH_ADDRESS = "0x1111111111111111111111111111111111111111"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """No credentials and no sync latency unless a test asks for them."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("LLM_MODE", "cloud")
    monkeypatch.setenv("WALLET_SYNC_DELAY_SECONDS", "0")
    settings = reload_settings()
    settings.openai_api_key = None
    yield settings
    reload_settings()


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def manual_asset() -> Asset:
    """A hand-entered NVDA position."""
    return Asset(
        id="nvda-1",
        platform="Fidelity",
        product_type=ProductType.STOCK,
        symbol="NVDA",
        quantity=10,
        unit_price=100,
        total_value=1000,
        exposure_tags=["AI Hardware", "Growth"],
        created_at=datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def treasury_asset() -> Asset:
    return Asset(
        id="tlt-1",
        platform="Robinhood",
        product_type=ProductType.ETF,
        symbol="TLT",
        quantity=200,
        unit_price=94,
        total_value=18800,
        exposure_tags=["US Treasury", "Defensive"],
    )


@pytest.fixture
def nvda_event() -> MarketEvent:
    return MarketEvent(
        id="e2",
        type=EventType.UPCOMING,
        title="NVIDIA Earnings Report",
        date="2024-05-22",
        affected_assets=["NVDA", "AI Hardware", "Nasdaq"],
        impact_strength=ImpactStrength.HIGH,
        direction=ImpactDirection.NEUTRAL,
        reasoning="Expectations are extremely high.",
    )


# ---------------------------------------------------------------------------
# Store / service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def wallet_service() -> WalletService:
    return WalletService(delay_seconds=0)


@pytest.fixture
def store(manual_asset: Asset, treasury_asset: Asset, wallet_service: WalletService) -> PortfolioStore:
    """Store holding two manual assets and no wallets."""
    return PortfolioStore(assets=[manual_asset, treasury_asset], wallet_service=wallet_service)


@pytest.fixture
def event_store(nvda_event: MarketEvent) -> EventStore:
    return EventStore([nvda_event])


def make_gateway(*responses: str) -> AIGateway:
    """Gateway backed by a fake chat model returning the given responses in order."""
    client = LLMClient(llm=FakeListChatModel(responses=list(responses)))
    return AIGateway(llm_client=client)


@pytest.fixture
def fake_gateway():
    """Factory fixture: ``fake_gateway('{"symbol": "AAPL"}')``."""
    return make_gateway
