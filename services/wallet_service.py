"""
Wallet data service.
Simulates a blockchain explorer: demo addresses return a fixed token list,
any other address gets a deterministic set of holdings derived from the
address itself, so re-syncing the same wallet always yields the same assets.
"""

import asyncio
import random
import logging
from typing import Dict, List, Optional

from config import get_settings
from exceptions import WalletSyncError
from models import Asset, Chain, ProductType, Wallet
from services.common import round_money, round_quantity

logger = logging.getLogger(__name__)


# Predefined demo wallets
DEMO_WALLETS: Dict[str, List[Dict]] = {
    # Ethereum whale
    "0x1111111111111111111111111111111111111111": [
        {"symbol": "ETH", "price": 3250.00, "qty": 150.5, "tags": ["Layer 1", "Staked"]},
        {"symbol": "USDC", "price": 1.00, "qty": 500000, "tags": ["Stablecoin", "Cash"]},
        {"symbol": "MKR", "price": 2800.00, "qty": 45, "tags": ["DeFi", "Governance"]},
        {"symbol": "AAVE", "price": 115.20, "qty": 300, "tags": ["DeFi", "Lending"]},
    ],
    # Solana degen
    "SolanaDemoAddress123456789": [
        {"symbol": "SOL", "price": 148.50, "qty": 1250, "tags": ["Layer 1", "High Speed"]},
        {"symbol": "JUP", "price": 1.25, "qty": 50000, "tags": ["DEX", "Aggregator"]},
        {"symbol": "BONK", "price": 0.000025, "qty": 100000000, "tags": ["Meme", "Solana"]},
    ],
    # Bitcoin holder
    "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh": [
        {"symbol": "BTC", "price": 68500.00, "qty": 5.25, "tags": ["Store of Value", "Layer 1"]},
    ],
}

MOCK_TOKENS: Dict[Chain, List[Dict]] = {
    Chain.ETHEREUM: [
        {"symbol": "ETH", "price": 3200, "tags": ["Layer 1", "Smart Contracts"]},
        {"symbol": "USDC", "price": 1.00, "tags": ["Stablecoin", "Cash Equivalent"]},
        {"symbol": "LINK", "price": 18.50, "tags": ["Oracle", "Infrastructure"]},
        {"symbol": "UNI", "price": 12.20, "tags": ["DeFi", "DEX"]},
        {"symbol": "PEPE", "price": 0.000008, "tags": ["Meme", "Speculative"]},
    ],
    Chain.SOLANA: [
        {"symbol": "SOL", "price": 145.00, "tags": ["Layer 1", "High Speed"]},
        {"symbol": "JUP", "price": 1.20, "tags": ["DeFi", "Aggregator"]},
        {"symbol": "WIF", "price": 3.50, "tags": ["Meme", "Solana Ecosystem"]},
        {"symbol": "PYTH", "price": 0.45, "tags": ["Oracle", "Data"]},
    ],
    Chain.BITCOIN: [
        {"symbol": "BTC", "price": 68500, "tags": ["Store of Value", "Layer 1"]},
    ],
    Chain.POLYGON: [
        {"symbol": "MATIC", "price": 0.85, "tags": ["Layer 2", "Scaling"]},
        {"symbol": "WETH", "price": 3200, "tags": ["Wrapped", "DeFi"]},
    ],
}

QUANTITY_SCALE = 0.123
QUANTITY_CAP = 1000
EXPENSIVE_TOKEN_PRICE = 1000


def address_seed(address: str) -> int:
    """Sum of the code points of every character in the address."""
    return sum(ord(char) for char in address)


def seeded_quantity(seed: int, index: int, price: float) -> float:
    """
    Deterministic token quantity for the index-th holding of a wallet.
    Tokens priced above 1000 are scaled down 100x to keep notionals plausible.
    """
    quantity = (seed * (index + 1) * QUANTITY_SCALE) % QUANTITY_CAP
    if price > EXPENSIVE_TOKEN_PRICE:
        return quantity / 100
    return quantity


def chain_catalog(chain: Chain) -> List[Dict]:
    """Token catalog for a chain, falling back to Ethereum."""
    return MOCK_TOKENS.get(chain, MOCK_TOKENS[Chain.ETHEREUM])


def _chain_name(chain) -> str:
    return chain.value if isinstance(chain, Chain) else str(chain)


def build_demo_assets(wallet: Wallet, tokens: List[Dict]) -> List[Asset]:
    """Map a demo wallet's token list 1:1 onto synced assets."""
    rng = random.Random(address_seed(wallet.address))
    assets = []
    for idx, token in enumerate(tokens):
        assets.append(Asset(
            id=f"{wallet.address}-{token['symbol']}-{idx}",
            platform="Wallet",
            product_type=ProductType.CRYPTO,
            symbol=token["symbol"],
            quantity=token["qty"],
            unit_price=token["price"],
            total_value=token["qty"] * token["price"],
            exposure_tags=["Crypto", *token["tags"]],
            change24h=round(rng.uniform(-5, 5), 2),
            wallet_address=wallet.address,
            is_auto_synced=True,
            notes=f"{_chain_name(wallet.chain)} Wallet Import",
            update_history=[],
        ))
    return assets


def build_seeded_assets(wallet: Wallet) -> List[Asset]:
    """
    Derive a deterministic holding set from the wallet address.

    Args:
        wallet: Wallet to simulate

    Returns:
        Between 1 and 4 synced assets drawn from the chain's token catalog
    """
    catalog = chain_catalog(wallet.chain)
    seed = address_seed(wallet.address)
    count = (seed % 4) + 1

    assets = []
    for i in range(count):
        token = catalog[(seed + i) % len(catalog)]
        quantity = seeded_quantity(seed, i, token["price"])
        assets.append(Asset(
            id=f"{wallet.address}-{token['symbol']}-{i}",
            platform="Wallet",
            product_type=ProductType.CRYPTO,
            symbol=token["symbol"],
            quantity=round_quantity(quantity),
            unit_price=token["price"],
            total_value=round_money(quantity * token["price"]),
            exposure_tags=["Crypto", *token["tags"]],
            change24h=float((seed % 10) - 5),
            wallet_address=wallet.address,
            is_auto_synced=True,
            notes=f"{_chain_name(wallet.chain)} Wallet Import",
            update_history=[],
        ))
    return assets


class WalletService:
    """
    Service for fetching the holdings of a connected wallet.
    Latency is simulated with an awaitable delay taken from configuration.
    """

    def __init__(self, delay_seconds: Optional[float] = None):
        if delay_seconds is None:
            delay_seconds = get_settings().wallet_sync_delay_seconds
        self.delay_seconds = delay_seconds

    async def fetch_assets(self, wallet: Wallet) -> List[Asset]:
        """
        Fetch the holdings of a wallet.

        Args:
            wallet: Connected wallet

        Returns:
            List of auto-synced assets tagged with the wallet address

        Raises:
            WalletSyncError: if the holdings cannot be produced
        """
        logger.info(f"Fetching assets for {_chain_name(wallet.chain)} wallet {wallet.address}")
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        try:
            demo_tokens = DEMO_WALLETS.get(wallet.address)
            if demo_tokens is not None:
                assets = build_demo_assets(wallet, demo_tokens)
            else:
                assets = build_seeded_assets(wallet)
        except Exception as e:
            logger.error(f"Error fetching assets for wallet {wallet.address}: {e}")
            raise WalletSyncError(f"Failed to sync wallet {wallet.address}") from e

        logger.info(f"Fetched {len(assets)} assets for wallet {wallet.address}")
        return assets
