"""
Seed data and lookup tables for UniAsset.
"""

from datetime import datetime, timezone

from models import (
    Asset, ProductType, MarketEvent, EventType, ImpactStrength, ImpactDirection
)


COMMON_SYMBOLS = [
    {"symbol": "AAPL", "name": "Apple Inc.", "type": ProductType.STOCK},
    {"symbol": "NVDA", "name": "NVIDIA Corp.", "type": ProductType.STOCK},
    {"symbol": "MSFT", "name": "Microsoft Corp.", "type": ProductType.STOCK},
    {"symbol": "AMZN", "name": "Amazon.com Inc.", "type": ProductType.STOCK},
    {"symbol": "GOOGL", "name": "Alphabet Inc.", "type": ProductType.STOCK},
    {"symbol": "TSLA", "name": "Tesla Inc.", "type": ProductType.STOCK},
    {"symbol": "META", "name": "Meta Platforms", "type": ProductType.STOCK},
    {"symbol": "AMD", "name": "Advanced Micro Devices", "type": ProductType.STOCK},
    {"symbol": "COIN", "name": "Coinbase Global", "type": ProductType.STOCK},
    {"symbol": "PLTR", "name": "Palantir Technologies", "type": ProductType.STOCK},
    {"symbol": "BTC", "name": "Bitcoin", "type": ProductType.CRYPTO},
    {"symbol": "ETH", "name": "Ethereum", "type": ProductType.CRYPTO},
    {"symbol": "SOL", "name": "Solana", "type": ProductType.CRYPTO},
    {"symbol": "DOGE", "name": "Dogecoin", "type": ProductType.CRYPTO},
    {"symbol": "SPY", "name": "SPDR S&P 500 ETF", "type": ProductType.ETF},
    {"symbol": "QQQ", "name": "Invesco QQQ", "type": ProductType.ETF},
    {"symbol": "VOO", "name": "Vanguard S&P 500", "type": ProductType.ETF},
    {"symbol": "TLT", "name": "iShares 20+ Year Treasury", "type": ProductType.ETF},
    {"symbol": "GLD", "name": "SPDR Gold Shares", "type": ProductType.COMMODITIES},
    {"symbol": "USDC", "name": "USD Coin", "type": ProductType.CASH_YIELD},
]

COMMON_PLATFORMS = [
    "Robinhood", "Fidelity", "Coinbase", "Binance", "E*TRADE",
    "Charles Schwab", "Interactive Brokers", "Webull", "Kraken", "Vanguard",
]


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def initial_assets() -> list[Asset]:
    """Demo holdings a fresh session starts with."""
    return [
        Asset(
            id="1",
            platform="Fidelity",
            product_type=ProductType.STOCK,
            symbol="NVDA",
            quantity=50,
            unit_price=850,
            total_value=42500,
            exposure_tags=["AI Hardware", "Semiconductors", "Growth"],
            change24h=3.2,
            created_at=_ts("2024-01-15T09:00:00"),
        ),
        Asset(
            id="2",
            platform="Coinbase",
            product_type=ProductType.CRYPTO,
            symbol="ETH",
            quantity=4.5,
            unit_price=3200,
            total_value=14400,
            exposure_tags=["Crypto Layer 1", "Risk-on", "DeFi"],
            change24h=-1.5,
            created_at=_ts("2024-02-20T14:30:00"),
        ),
        Asset(
            id="3",
            platform="Robinhood",
            product_type=ProductType.ETF,
            symbol="TLT",
            quantity=200,
            unit_price=94,
            total_value=18800,
            exposure_tags=["US Treasury", "Interest Rate Sensitive", "Defensive"],
            change24h=0.4,
            created_at=_ts("2024-03-10T11:15:00"),
        ),
    ]


def initial_events() -> list[MarketEvent]:
    """Demo market events a fresh session starts with."""
    return [
        MarketEvent(
            id="e1",
            type=EventType.PAST,
            title="Fed Holds Interest Rates Steady",
            date="2024-05-01",
            affected_assets=["TLT", "Growth Stocks"],
            impact_strength=ImpactStrength.HIGH,
            direction=ImpactDirection.MIXED,
            reasoning=(
                "Jerome Powell signaled rates will stay higher for longer, suppressing "
                "bond prices but removing the immediate fear of a hike."
            ),
        ),
        MarketEvent(
            id="e2",
            type=EventType.UPCOMING,
            title="NVIDIA Earnings Report",
            date="2024-05-22",
            affected_assets=["NVDA", "AI Hardware", "Nasdaq"],
            impact_strength=ImpactStrength.HIGH,
            direction=ImpactDirection.NEUTRAL,
            reasoning=(
                "Market expectations are extremely high. Any miss in guidance could "
                "trigger a sector-wide correction in AI stocks."
            ),
        ),
        MarketEvent(
            id="e3",
            type=EventType.UPCOMING,
            title="Ethereum ETF Decision Deadline",
            date="2024-05-23",
            affected_assets=["ETH", "Crypto"],
            impact_strength=ImpactStrength.MEDIUM,
            direction=ImpactDirection.POSITIVE,
            reasoning=(
                "Speculation is mounting regarding the SEC approval of Spot ETH ETFs. "
                "Approval would likely lead to significant inflows."
            ),
        ),
    ]
