"""
Market data service for looking up the current price of a symbol.
Used to prefill the unit price when a symbol is picked in the asset form.
Yahoo Finance calls are retried with tenacity and results cached per symbol.
"""

import yfinance as yf
import logging
from functools import lru_cache
from typing import Dict, Optional

from sqlmodel import SQLModel
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from models import ProductType
from services.common import lookup_product_type, normalize_symbol, to_quote_symbol

logger = logging.getLogger(__name__)

# Transient Yahoo failures: three attempts, 2s then 4s apart
yahoo_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(Exception),
    reraise=True
)


class MarketQuote(SQLModel):
    """Latest price information for a symbol."""
    symbol: str
    price: float
    name: Optional[str] = None
    product_type: Optional[ProductType] = None
    currency: str = "USD"


class MarketDataService:
    """
    Service for fetching market prices.
    Lookups are retried with exponential backoff and cached per symbol.
    """

    @staticmethod
    @yahoo_retry
    def _fetch_ticker_info(quote_symbol: str) -> Dict:
        """Raw ticker metadata from Yahoo Finance."""
        ticker = yf.Ticker(quote_symbol)
        return ticker.info or {}

    @staticmethod
    @yahoo_retry
    def _fetch_last_close(quote_symbol: str) -> Optional[float]:
        """Most recent daily close, for tickers whose info carries no live price."""
        hist = yf.Ticker(quote_symbol).history(period="1d")
        if hist.empty:
            return None
        return float(hist['Close'].iloc[-1])

    @staticmethod
    @lru_cache(maxsize=256)
    def get_quote(symbol: str, product_type: Optional[ProductType] = None) -> Optional[MarketQuote]:
        """
        Fetch the current price of a symbol.

        Args:
            symbol: Asset symbol (e.g., "AAPL", "BTC")
            product_type: Product type, used to pick the quote format

        Returns:
            MarketQuote, or None when no price is available
        """
        symbol = normalize_symbol(symbol)
        if not symbol:
            return None
        product_type = product_type or lookup_product_type(symbol)
        quote_symbol = to_quote_symbol(symbol, product_type)

        try:
            info = MarketDataService._fetch_ticker_info(quote_symbol)

            price = info.get('currentPrice') or info.get('regularMarketPrice') or info.get('lastPrice')
            if price is None:
                price = MarketDataService._fetch_last_close(quote_symbol)

            if not price or price <= 0:
                logger.warning(f"No price available for {symbol}")
                return None

            return MarketQuote(
                symbol=symbol,
                price=float(price),
                name=info.get('longName') or info.get('shortName'),
                product_type=product_type,
                currency=(info.get('currency') or "USD").upper(),
            )

        except Exception as e:
            logger.error(f"Error fetching price for {symbol}: {e}")
            return None

    @staticmethod
    def get_current_price(symbol: str, product_type: Optional[ProductType] = None) -> Optional[float]:
        """Fetch just the current price of a symbol."""
        quote = MarketDataService.get_quote(symbol, product_type)
        return quote.price if quote else None
