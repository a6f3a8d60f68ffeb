"""Tests for the portfolio store: asset CRUD and wallet lifecycle."""

from __future__ import annotations

import asyncio

import pytest

from exceptions import (
    AssetNotFoundError, DuplicateWalletError, InvalidAddressError, WalletSyncError
)
from models import Asset, Chain, Wallet
from services.reconciliation import AssetDraft
from services.wallet_service import WalletService
from store import PortfolioStore

DEMO_ETH_ADDRESS = "0x1111111111111111111111111111111111111111"


class GatedWalletService(WalletService):
    """Wallet service whose fetches block until the test releases them."""

    def __init__(self):
        super().__init__(delay_seconds=0)
        self.release = asyncio.Event()

    async def fetch_assets(self, wallet: Wallet):
        await self.release.wait()
        return await super().fetch_assets(wallet)


class FailingWalletService(WalletService):
    async def fetch_assets(self, wallet: Wallet):
        raise WalletSyncError(f"Failed to sync wallet {wallet.address}")


class PartlyFailingWalletService(GatedWalletService):
    """Fails at once for the given addresses; gates every other fetch."""

    def __init__(self, failing):
        super().__init__()
        self.failing = set(failing)

    async def fetch_assets(self, wallet: Wallet):
        if wallet.address in self.failing:
            raise WalletSyncError(f"Failed to sync wallet {wallet.address}")
        return await super().fetch_assets(wallet)


class TestAssets:
    def test_submit_draft(self, store: PortfolioStore) -> None:
        asset = store.submit_draft(AssetDraft(symbol="AAPL", quantity=10, unit_price=200))
        assert asset is not None
        assert store.find_asset(asset.id) == asset
        assert len(store.assets) == 3

    def test_invalid_draft_not_added(self, store: PortfolioStore) -> None:
        assert store.submit_draft(AssetDraft(symbol="AAPL")) is None
        assert len(store.assets) == 2

    def test_edit_replaces_by_id(self, store: PortfolioStore, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.quantity = 15

        updated = store.edit_asset(manual_asset.id, draft)

        assert store.find_asset(manual_asset.id) == updated
        assert [a.id for a in store.assets] == ["nvda-1", "tlt-1"]
        assert len(updated.update_history) == 1

    def test_edit_unknown_asset(self, store: PortfolioStore) -> None:
        with pytest.raises(AssetNotFoundError):
            store.edit_asset("missing", AssetDraft(symbol="X", quantity=1))

    def test_delete(self, store: PortfolioStore) -> None:
        assert store.delete_asset("tlt-1") is True
        assert store.delete_asset("tlt-1") is False
        assert [a.id for a in store.assets] == ["nvda-1"]

    def test_total_value(self, store: PortfolioStore) -> None:
        assert store.total_value() == 1000 + 18800

    def test_collections_are_snapshots(self, store: PortfolioStore) -> None:
        before = store.assets
        store.delete_asset("nvda-1")
        assert len(before) == 2
        assert len(store.assets) == 1


class TestConnectWallet:
    def test_connect_detects_chain(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)
        assert wallet.chain == Chain.ETHEREUM
        assert wallet.last_synced is None
        assert store.wallets == (wallet,)
        assert store.wallet_assets(DEMO_ETH_ADDRESS) == []

    def test_connect_trims_address(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(f"  {DEMO_ETH_ADDRESS} ")
        assert wallet.address == DEMO_ETH_ADDRESS

    def test_explicit_chain_honored(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet("0x" + "2" * 40, chain=Chain.POLYGON)
        assert wallet.chain == Chain.POLYGON

    def test_invalid_address(self, store: PortfolioStore) -> None:
        with pytest.raises(InvalidAddressError):
            store.connect_wallet("not-a-wallet")
        assert store.wallets == ()

    def test_duplicate_address(self, store: PortfolioStore) -> None:
        store.connect_wallet(DEMO_ETH_ADDRESS)
        with pytest.raises(DuplicateWalletError):
            store.connect_wallet(DEMO_ETH_ADDRESS)
        assert len(store.wallets) == 1


class TestSync:
    @pytest.mark.asyncio
    async def test_sync_adds_wallet_assets(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)

        synced = await store.sync_wallet(wallet.id)

        assert len(synced) == 4
        assert len(store.wallet_assets(DEMO_ETH_ADDRESS)) == 4
        assert len(store.manual_assets()) == 2
        assert store.find_wallet(wallet.id).last_synced is not None

    @pytest.mark.asyncio
    async def test_resync_replaces_instead_of_appending(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)
        await store.sync_wallet(wallet.id)
        await store.sync_wallet(wallet.id)
        assert len(store.wallet_assets(DEMO_ETH_ADDRESS)) == 4
        assert len(store.assets) == 6

    @pytest.mark.asyncio
    async def test_sync_all_is_idempotent(self, store: PortfolioStore) -> None:
        store.connect_wallet(DEMO_ETH_ADDRESS)
        store.connect_wallet("0x" + "a" * 39 + "b")

        await store.sync_all_wallets()
        first = [a.model_dump(exclude={"created_at"}) for a in store.assets]
        await store.sync_all_wallets()
        second = [a.model_dump(exclude={"created_at"}) for a in store.assets]

        assert first == second
        assert len(store.assets) == 2 + 4 + 2

    @pytest.mark.asyncio
    async def test_sync_all_without_wallets(self, store: PortfolioStore) -> None:
        assert await store.sync_all_wallets() == []
        assert len(store.assets) == 2

    @pytest.mark.asyncio
    async def test_sync_unknown_wallet(self, store: PortfolioStore) -> None:
        with pytest.raises(WalletSyncError):
            await store.sync_wallet("missing")

    @pytest.mark.asyncio
    async def test_remove_wallet_cascades(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)
        await store.sync_wallet(wallet.id)

        removed = store.remove_wallet(wallet.id)

        assert removed == 4
        assert store.wallets == ()
        assert [a.id for a in store.assets] == ["nvda-1", "tlt-1"]

    def test_remove_unknown_wallet(self, store: PortfolioStore) -> None:
        assert store.remove_wallet("missing") == 0

    @pytest.mark.asyncio
    async def test_failed_sync_leaves_state(self, manual_asset: Asset) -> None:
        store = PortfolioStore(assets=[manual_asset], wallet_service=FailingWalletService(0))
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)

        with pytest.raises(WalletSyncError):
            await store.sync_wallet(wallet.id)

        assert store.assets == (manual_asset,)
        assert store.find_wallet(wallet.id).last_synced is None

    @pytest.mark.asyncio
    async def test_result_after_removal_discarded(self, manual_asset: Asset) -> None:
        service = GatedWalletService()
        store = PortfolioStore(assets=[manual_asset], wallet_service=service)
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)

        task = asyncio.create_task(store.sync_wallet(wallet.id))
        await asyncio.sleep(0)
        store.remove_wallet(wallet.id)
        service.release.set()

        assert await task == []
        assert store.assets == (manual_asset,)
        assert store.wallets == ()

    @pytest.mark.asyncio
    async def test_older_sync_superseded(self, manual_asset: Asset) -> None:
        service = GatedWalletService()
        store = PortfolioStore(assets=[manual_asset], wallet_service=service)
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)

        older = asyncio.create_task(store.sync_wallet(wallet.id))
        await asyncio.sleep(0)
        newer = asyncio.create_task(store.sync_wallet(wallet.id))
        await asyncio.sleep(0)
        service.release.set()

        assert await older == []
        assert len(await newer) == 4
        assert len(store.wallet_assets(DEMO_ETH_ADDRESS)) == 4

    @pytest.mark.asyncio
    async def test_failed_batch_keeps_single_sync_valid(self, manual_asset: Asset) -> None:
        broken = "0x" + "2" * 40
        service = PartlyFailingWalletService(failing=[broken])
        store = PortfolioStore(assets=[manual_asset], wallet_service=service)
        store.connect_wallet(broken)
        wallet = store.connect_wallet(DEMO_ETH_ADDRESS)

        single = asyncio.create_task(store.sync_wallet(wallet.id))
        await asyncio.sleep(0)
        with pytest.raises(WalletSyncError):
            await store.sync_all_wallets()
        service.release.set()

        assert len(await single) == 4
        assert len(store.wallet_assets(DEMO_ETH_ADDRESS)) == 4


class TestRepeatedTokenHoldings:
    """A seeded Bitcoin wallet holds four BTC lots from a one-token catalog."""

    ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"

    @pytest.mark.asyncio
    async def test_edit_touches_one_lot(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(self.ADDRESS)
        lots = await store.sync_wallet(wallet.id)
        assert len({a.id for a in lots}) == 4

        draft = AssetDraft.from_asset(lots[0])
        draft.quantity = 99
        store.edit_asset(lots[0].id, draft)

        quantities = [a.quantity for a in store.wallet_assets(self.ADDRESS)]
        assert quantities[0] == 99
        assert quantities[1:] == [a.quantity for a in lots[1:]]

    @pytest.mark.asyncio
    async def test_delete_removes_one_lot(self, store: PortfolioStore) -> None:
        wallet = store.connect_wallet(self.ADDRESS)
        lots = await store.sync_wallet(wallet.id)

        assert store.delete_asset(lots[1].id) is True

        remaining = store.wallet_assets(self.ADDRESS)
        assert [a.id for a in remaining] == [lots[0].id, lots[2].id, lots[3].id]
