"""
Portfolio state store.
Owns the Asset and Wallet collections for a session. Every mutation builds
a new collection and swaps it in with a single assignment, so readers always
see either the previous or the next consistent state.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from exceptions import (
    AssetNotFoundError, DuplicateWalletError, InvalidAddressError, WalletSyncError
)
from models import Asset, Chain, Wallet
from services.common import classify_address
from services.reconciliation import AssetDraft, apply_edit, finalize_draft
from services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class PortfolioStore:
    """
    In-memory store for holdings and connected wallets.

    Wallet syncs are coroutines. Each wallet has a sync generation that is
    bumped whenever the wallet is removed or a newer sync starts; a fetch
    that completes under an outdated generation is discarded.
    """

    def __init__(
        self,
        assets: Optional[Iterable[Asset]] = None,
        wallets: Optional[Iterable[Wallet]] = None,
        wallet_service: Optional[WalletService] = None
    ):
        self._assets: Tuple[Asset, ...] = tuple(assets or ())
        self._wallets: Tuple[Wallet, ...] = tuple(wallets or ())
        self._generations: Dict[str, int] = {w.id: 0 for w in self._wallets}
        self.wallet_service = wallet_service or WalletService()

    # ==================== Reads ====================
    @property
    def assets(self) -> Tuple[Asset, ...]:
        return self._assets

    @property
    def wallets(self) -> Tuple[Wallet, ...]:
        return self._wallets

    def find_asset(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self._assets if a.id == asset_id), None)

    def find_wallet(self, wallet_id: str) -> Optional[Wallet]:
        return next((w for w in self._wallets if w.id == wallet_id), None)

    def wallet_assets(self, address: str) -> List[Asset]:
        return [a for a in self._assets if a.wallet_address == address]

    def manual_assets(self) -> List[Asset]:
        return [a for a in self._assets if a.wallet_address is None]

    def total_value(self) -> float:
        return sum(a.total_value for a in self._assets)

    # ==================== Assets ====================
    def add_asset(self, asset: Asset) -> Asset:
        """Append a fully formed asset."""
        self._assets = self._assets + (asset,)
        logger.info(f"Added asset {asset.symbol} ({asset.id})")
        return asset

    def submit_draft(self, draft: AssetDraft) -> Optional[Asset]:
        """
        Create an asset from a submitted form.

        Returns:
            The new asset, or None when the draft lacks a symbol or quantity
        """
        asset = finalize_draft(draft)
        if asset is None:
            return None
        return self.add_asset(asset)

    def edit_asset(self, asset_id: str, draft: AssetDraft) -> Asset:
        """
        Apply an edit to a stored asset, recording tracked field changes.

        Raises:
            AssetNotFoundError: if no asset has this id
        """
        current = self.find_asset(asset_id)
        if current is None:
            raise AssetNotFoundError(asset_id)

        updated = apply_edit(current, draft)
        self._assets = tuple(updated if a.id == asset_id else a for a in self._assets)
        if len(updated.update_history) > len(current.update_history):
            fields = [c.field for c in updated.update_history[-1].changes]
            logger.info(f"Edited asset {updated.symbol} ({asset_id}): {', '.join(fields)}")
        return updated

    def delete_asset(self, asset_id: str) -> bool:
        """Delete an asset. Returns True if something was removed."""
        remaining = tuple(a for a in self._assets if a.id != asset_id)
        if len(remaining) == len(self._assets):
            return False
        self._assets = remaining
        logger.info(f"Deleted asset {asset_id}")
        return True

    # ==================== Wallets ====================
    def connect_wallet(self, address: str, chain: Optional[Chain] = None) -> Wallet:
        """
        Register a wallet address. Does not sync it.

        Args:
            address: Wallet address as entered
            chain: Optional explicit chain; only honored for a valid address

        Returns:
            The new Wallet

        Raises:
            InvalidAddressError: if the address matches no supported format
            DuplicateWalletError: if the address is already connected
        """
        address = (address or "").strip()
        detected = classify_address(address)
        if detected is None:
            logger.warning(f"Rejected wallet address with unknown format: {address!r}")
            raise InvalidAddressError(address)
        if any(w.address == address for w in self._wallets):
            raise DuplicateWalletError(address)

        wallet = Wallet(address=address, chain=chain or detected)
        self._wallets = self._wallets + (wallet,)
        self._generations[wallet.id] = 0
        logger.info(f"Connected {wallet.chain.value} wallet {address}")
        return wallet

    def remove_wallet(self, wallet_id: str) -> int:
        """
        Remove a wallet and every asset synced from it.

        Returns:
            Number of assets removed alongside the wallet
        """
        wallet = self.find_wallet(wallet_id)
        if wallet is None:
            return 0

        remaining = tuple(a for a in self._assets if a.wallet_address != wallet.address)
        removed = len(self._assets) - len(remaining)
        self._wallets = tuple(w for w in self._wallets if w.id != wallet_id)
        self._assets = remaining
        # Any in-flight sync for this wallet is now stale
        self._generations.pop(wallet_id, None)
        logger.info(f"Removed wallet {wallet.address} and {removed} synced assets")
        return removed

    def _begin_sync(self, wallet_id: str) -> int:
        generation = self._generations.get(wallet_id, 0) + 1
        self._generations[wallet_id] = generation
        return generation

    def _is_current(self, wallet_id: str, generation: int) -> bool:
        return self._generations.get(wallet_id) == generation

    def _replace_wallet_assets(self, fetched: Dict[str, List[Asset]]):
        """Swap in fresh holdings for the given wallet addresses in one write."""
        addresses = set(fetched)
        kept = [a for a in self._assets if a.wallet_address not in addresses]
        fresh = [asset for assets in fetched.values() for asset in assets]
        now = datetime.now(timezone.utc)
        self._wallets = tuple(
            w.model_copy(update={"last_synced": now}) if w.address in addresses else w
            for w in self._wallets
        )
        self._assets = tuple(kept + fresh)

    async def sync_wallet(self, wallet_id: str) -> List[Asset]:
        """
        Fetch a wallet's holdings and replace its previously synced assets.

        Returns:
            The freshly synced assets, or an empty list when the result arrived
            after the wallet was removed or re-synced

        Raises:
            WalletSyncError: if the fetch fails; the store is left unchanged
        """
        wallet = self.find_wallet(wallet_id)
        if wallet is None:
            raise WalletSyncError(f"Unknown wallet: {wallet_id}")

        generation = self._begin_sync(wallet_id)
        assets = await self.wallet_service.fetch_assets(wallet)

        if not self._is_current(wallet_id, generation):
            logger.warning(f"Discarding stale sync result for wallet {wallet.address}")
            return []

        self._replace_wallet_assets({wallet.address: assets})
        return assets

    async def sync_all_wallets(self) -> List[Asset]:
        """
        Fetch every connected wallet in turn, then write all results at once.

        Generations are only bumped once every fetch has succeeded, so a
        failed batch leaves in-flight single-wallet syncs valid.

        Raises:
            WalletSyncError: if any fetch fails; the store is left unchanged
        """
        pending = [(w, self._generations.get(w.id, 0)) for w in self._wallets]
        fetched: Dict[str, List[Asset]] = {}
        for wallet, _ in pending:
            fetched[wallet.address] = await self.wallet_service.fetch_assets(wallet)

        current = {}
        for wallet, generation in pending:
            if self._is_current(wallet.id, generation):
                self._begin_sync(wallet.id)
                current[wallet.address] = fetched[wallet.address]
            else:
                logger.warning(f"Discarding stale sync result for wallet {wallet.address}")

        self._replace_wallet_assets(current)
        synced = [asset for assets in current.values() for asset in assets]
        logger.info(f"Synced {len(current)} wallets, {len(synced)} assets")
        return synced
