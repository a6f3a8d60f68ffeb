"""
Exceptions raised by UniAsset services and stores.

Every error inherits from ``UniAssetError`` so the UI can catch the whole
family and turn it into an inline message without ending the session.
"""

from typing import Any, Dict, Optional


class UniAssetError(Exception):
    """Base exception for all UniAsset errors."""

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details: Dict[str, Any] = details or {}


class AssetNotFoundError(UniAssetError):
    """Raised when an asset id is not present in the store."""

    def __init__(self, asset_id: str):
        super().__init__(f"Asset not found: {asset_id}", {"asset_id": asset_id})
        self.asset_id = asset_id


class InvalidAddressError(UniAssetError):
    """Raised when a wallet address matches no supported chain format."""

    def __init__(self, address: str):
        super().__init__(
            "Invalid wallet address format. Supported: Ethereum, Solana, Bitcoin.",
            {"address": address}
        )
        self.address = address


class DuplicateWalletError(UniAssetError):
    """Raised when connecting an address that is already connected."""

    def __init__(self, address: str):
        super().__init__("This wallet is already connected.", {"address": address})
        self.address = address


class WalletSyncError(UniAssetError):
    """Raised when fetching a wallet's holdings fails."""


class AIUnavailableError(UniAssetError):
    """Raised when the AI gateway cannot serve a request."""
