"""Platform integration package."""

from __future__ import annotations

from .base import (
    ArticleStore,
    AssetStatus,
    AssetUploader,
    ManagedAsset,
    MediaRegistrar,
    ResolvedImage,
    StagedParameter,
    StagedTarget,
    StagedUploadNegotiator,
)

__all__ = [
    "ArticleStore",
    "AssetStatus",
    "AssetUploader",
    "ManagedAsset",
    "MediaRegistrar",
    "ResolvedImage",
    "StagedParameter",
    "StagedTarget",
    "StagedUploadNegotiator",
]
