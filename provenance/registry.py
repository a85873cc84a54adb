"""
registry.py - Asset registration

AssetRegistry owns every Asset record, keyed by asset_id. Records are written
once and never updated or removed.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, List

from .core import Asset, AlreadyExists, NotFound


class AssetRegistry:
    """
    Keyed store of Asset records.

    Not thread-safe. ProvenanceLedger serializes access.
    """

    def __init__(self):
        self._assets: Dict[str, Asset] = {}

    def register(self, asset: Asset) -> Asset:
        """
        Store a new asset.

        Args:
            asset: The record to store (its exists flag is forced to True)

        Returns:
            The stored record

        Raises:
            AlreadyExists: If asset_id is already registered
        """
        if asset.asset_id in self._assets:
            raise AlreadyExists(f"Asset {asset.asset_id} already registered")
        if not asset.exists:
            asset = replace(asset, exists=True)
        self._assets[asset.asset_id] = asset
        return asset

    def get(self, asset_id: str) -> Asset:
        """
        Return the stored asset.

        Raises:
            NotFound: If asset_id is not registered
        """
        self.require(asset_id)
        return self._assets[asset_id]

    def require(self, asset_id: str) -> None:
        """Raise NotFound unless asset_id is registered."""
        if asset_id not in self._assets:
            raise NotFound(f"Asset {asset_id} not registered")

    def contains(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def list_ids(self) -> List[str]:
        """Asset ids in registration order."""
        return list(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
