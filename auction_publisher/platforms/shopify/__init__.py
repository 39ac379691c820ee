"""Shopify platform adapters."""

from __future__ import annotations

from .api import ShopifyApiClient
from .articles import ShopifyArticleClient
from .files import MediaReadinessPoller, ShopifyFileRegistrar
from .media import StagedAssetUploader
from .staging import ShopifyStagedUploads

__all__ = [
    "MediaReadinessPoller",
    "ShopifyApiClient",
    "ShopifyArticleClient",
    "ShopifyFileRegistrar",
    "ShopifyStagedUploads",
    "StagedAssetUploader",
]
