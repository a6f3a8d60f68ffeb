"""
Common utilities and shared functions.
Wallet address classification, symbol normalization and numeric helpers.
"""

import re
import logging
from typing import Any, List, Optional

from constants import COMMON_PLATFORMS, COMMON_SYMBOLS
from models import Chain, ProductType

logger = logging.getLogger(__name__)


# Demonstration addresses resolve to a chain before any pattern rule applies
DEMO_ADDRESS_CHAINS = {
    "0x1111111111111111111111111111111111111111": Chain.ETHEREUM,
    "SolanaDemoAddress123456789": Chain.SOLANA,
    "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh": Chain.BITCOIN,
}

# Order matters: EVM addresses are reported as Ethereum (Polygon shares the format)
ADDRESS_PATTERNS = [
    (re.compile(r"^0x[a-fA-F0-9]{40}$"), Chain.ETHEREUM),
    (re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$"), Chain.SOLANA),
    (re.compile(r"^(bc1|[13])[a-zA-HJ-NP-Z0-9]{25,39}$"), Chain.BITCOIN),
]


def classify_address(address: Any) -> Optional[Chain]:
    """
    Infer the chain a wallet address belongs to.

    Args:
        address: Wallet address as entered by the user

    Returns:
        The matching Chain, or None when the address fits no known format

    Examples:
        >>> classify_address("0x" + "ab" * 20)
        <Chain.ETHEREUM: 'Ethereum'>
        >>> classify_address("not-an-address") is None
        True
    """
    if not isinstance(address, str):
        return None

    address = address.strip()
    if address in DEMO_ADDRESS_CHAINS:
        return DEMO_ADDRESS_CHAINS[address]

    for pattern, chain in ADDRESS_PATTERNS:
        if pattern.match(address):
            return chain
    return None


def normalize_symbol(symbol: Optional[str]) -> str:
    """Strip and uppercase a ticker or token symbol."""
    return (symbol or "").strip().upper()


def to_quote_symbol(symbol: str, product_type: Optional[ProductType] = None) -> str:
    """
    Convert an asset symbol to the format used for market quotes.

    Args:
        symbol: Asset symbol (e.g., "AAPL", "BTC")
        product_type: Product type of the asset, if known

    Returns:
        Quote symbol, e.g. "BTC-USD" for crypto

    Examples:
        >>> to_quote_symbol("btc", ProductType.CRYPTO)
        'BTC-USD'
        >>> to_quote_symbol("AAPL", ProductType.STOCK)
        'AAPL'
    """
    symbol = normalize_symbol(symbol)
    if product_type == ProductType.CRYPTO and not symbol.endswith("-USD"):
        return f"{symbol}-USD"
    return symbol


def suggest_symbols(query: str, limit: int = 5) -> List[dict]:
    """Return well-known symbols whose ticker or name contains the query."""
    query = normalize_symbol(query)
    if not query:
        return []
    matches = [
        s for s in COMMON_SYMBOLS
        if query in s["symbol"] or query in s["name"].upper()
    ]
    return matches[:limit]


def suggest_platforms(query: str, limit: int = 5) -> List[str]:
    """Return well-known platforms whose name contains the query."""
    query = (query or "").strip().lower()
    if not query:
        return []
    return [p for p in COMMON_PLATFORMS if query in p.lower()][:limit]


def lookup_product_type(symbol: str) -> Optional[ProductType]:
    """Product type of a well-known symbol, if listed."""
    symbol = normalize_symbol(symbol)
    for item in COMMON_SYMBOLS:
        if item["symbol"] == symbol:
            return item["type"]
    return None


def to_number(value: Any) -> float:
    """
    Coerce a form value to a non-negative float.
    Blank, missing, invalid or negative input becomes 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Could not coerce {value!r} to a number")
        return 0.0
    if number != number or number < 0:  # NaN or negative
        return 0.0
    return number


def round_quantity(value: float) -> float:
    """Round a quantity to 4 decimal places."""
    return round(value, 4)


def round_money(value: float) -> float:
    """Round a monetary amount to 2 decimal places."""
    return round(value, 2)
