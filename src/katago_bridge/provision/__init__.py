from katago_bridge.provision.assets import (
    Asset,
    AssetStatus,
    Fetch,
    ProvisionResult,
    ensure,
    ensure_asset,
)
from katago_bridge.provision.fetchers import BinaryFetcher, ModelFetcher

__all__ = [
    "Asset",
    "AssetStatus",
    "Fetch",
    "ProvisionResult",
    "ensure",
    "ensure_asset",
    "BinaryFetcher",
    "ModelFetcher",
]
