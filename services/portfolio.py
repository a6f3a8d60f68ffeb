"""
Portfolio service for aggregate values, allocation and event exposure.
Everything here is derived on demand from the store; nothing is cached.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from models import Asset, EventType, ImpactStrength, MarketEvent

logger = logging.getLogger(__name__)


def match_event_assets(event: MarketEvent, assets: Sequence[Asset]) -> List[Asset]:
    """
    Holdings affected by a market event.

    An asset matches when its symbol is listed in the event's affected assets
    or one of its exposure tags is.

    Args:
        event: Market event
        assets: Holdings to check, in display order

    Returns:
        Matching assets, in the order given
    """
    affected = set(event.affected_assets)
    return [
        asset for asset in assets
        if asset.symbol in affected or any(tag in affected for tag in asset.exposure_tags)
    ]


def exposure_value(event: MarketEvent, assets: Sequence[Asset]) -> float:
    """Total value of the holdings affected by an event."""
    return sum(asset.total_value for asset in match_event_assets(event, assets))


class PortfolioService:
    """
    Service for portfolio calculations and analysis.
    Feeds the dashboard and the intelligence feed.
    """

    @staticmethod
    def total_value(assets: Sequence[Asset]) -> float:
        """Sum of the total value of every holding."""
        return sum(asset.total_value for asset in assets)

    @staticmethod
    def upcoming_risks(events: Sequence[MarketEvent], limit: Optional[int] = 3) -> List[MarketEvent]:
        """Upcoming high-impact events, in collection order."""
        risks = [
            e for e in events
            if e.type == EventType.UPCOMING and e.impact_strength == ImpactStrength.HIGH
        ]
        return risks if limit is None else risks[:limit]

    @staticmethod
    def holdings_frame(assets: Sequence[Asset]) -> pd.DataFrame:
        """
        Tabular view of holdings for display.

        Returns:
            DataFrame with one row per asset
        """
        columns = [
            "Symbol", "Platform", "Type", "Quantity", "Unit Price",
            "Total Value", "24h %", "Tags", "Source",
        ]
        rows = [
            {
                "Symbol": a.symbol,
                "Platform": a.platform,
                "Type": a.product_type.value,
                "Quantity": a.quantity,
                "Unit Price": a.unit_price,
                "Total Value": a.total_value,
                "24h %": round(a.change24h, 2) if a.change24h is not None else None,
                "Tags": ", ".join(a.exposure_tags),
                "Source": "Wallet sync" if a.is_auto_synced else "Manual",
            }
            for a in assets
        ]
        return pd.DataFrame(rows, columns=columns)

    @staticmethod
    def allocation_by_type(assets: Sequence[Asset]) -> pd.DataFrame:
        """
        Value and portfolio weight per product type.

        Returns:
            DataFrame with columns 'Type', 'Value', 'Weight %', largest first
        """
        if not assets:
            return pd.DataFrame(columns=["Type", "Value", "Weight %"])

        df = pd.DataFrame(
            {"Type": [a.product_type.value for a in assets], "Value": [a.total_value for a in assets]}
        )
        grouped = df.groupby("Type", as_index=False)["Value"].sum()
        total = grouped["Value"].sum()
        grouped["Weight %"] = (grouped["Value"] / total * 100).round(2) if total > 0 else 0.0
        return grouped.sort_values("Value", ascending=False).reset_index(drop=True)

    @staticmethod
    def event_exposure_frame(events: Sequence[MarketEvent], assets: Sequence[Asset]) -> pd.DataFrame:
        """Matched holdings count and exposure value per event."""
        rows = []
        for event in events:
            matched = match_event_assets(event, assets)
            rows.append({
                "Event": event.title,
                "Type": event.type.value,
                "Impact": event.impact_strength.value,
                "Direction": event.direction.value,
                "Matched": len(matched),
                "Exposure": sum(a.total_value for a in matched),
            })
        return pd.DataFrame(rows, columns=["Event", "Type", "Impact", "Direction", "Matched", "Exposure"])

    @staticmethod
    def simulated_value_history(current_value: float, days: int = 30, seed: Optional[int] = None) -> pd.Series:
        """
        Mock value history for the dashboard chart.
        Starts at 80% of the current value, drifts randomly and ends exactly at it.

        Args:
            current_value: Portfolio value today
            days: Number of points
            seed: Optional seed for a reproducible series

        Returns:
            Series indexed 'Day 1'..'Day N'
        """
        if days <= 0:
            return pd.Series(dtype=float)
        rng = np.random.default_rng(seed)
        steps = (rng.random(days) - 0.45) * (current_value * 0.05)
        values = current_value * 0.8 + np.cumsum(steps)
        values[-1] = current_value
        return pd.Series(values, index=[f"Day {i + 1}" for i in range(days)], name="Value")
