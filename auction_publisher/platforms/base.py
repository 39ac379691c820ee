"""Base contracts for the remote commerce platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol


class AssetStatus(str, Enum):
    """Processing states reported for a managed file."""

    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, raw: str | None) -> "AssetStatus":
        """Unknown or missing statuses are treated as still processing."""
        try:
            return cls(str(raw).upper())
        except ValueError:
            return cls.PROCESSING

    @property
    def is_terminal(self) -> bool:
        return self in (AssetStatus.READY, AssetStatus.FAILED)


@dataclass(slots=True)
class StagedParameter:
    name: str
    value: str


@dataclass(slots=True)
class StagedTarget:
    """Single-use upload target issued by the platform for one image."""

    url: str
    resource_url: str
    parameters: list[StagedParameter] = field(default_factory=list)

    @property
    def key(self) -> str | None:
        for parameter in self.parameters:
            if parameter.name == "key":
                return parameter.value
        return None


@dataclass(slots=True)
class ManagedAsset:
    """Remote media object; replaced wholesale on every status read."""

    id: str
    status: AssetStatus
    image_url: str | None = None


@dataclass(slots=True)
class ResolvedImage:
    """Represents a fully processed image ready to embed in an article."""

    image_url: str
    file_name: str
    order: int


class StagedUploadNegotiator(Protocol):
    def create_target(self, file_name: str, content_type: str) -> StagedTarget:
        """Request a one-time upload target for the given file."""


class AssetUploader(Protocol):
    def upload(self, target: StagedTarget, data: bytes, content_type: str) -> None:
        """Send the binary payload to the staged target."""


class MediaRegistrar(Protocol):
    def register(self, resource_url: str, alt_text: str) -> ManagedAsset:
        """Register a staged resource as a managed media object."""

    def fetch(self, asset_id: str) -> ManagedAsset:
        """Re-read the authoritative state of a managed media object."""


class ArticleStore(Protocol):
    def create_article(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Create a blog article and return the full article record."""

    def attach_metafield(self, article_id: Any, metafield: Mapping[str, Any]) -> dict[str, Any]:
        """Attach a single metafield to an existing article."""


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
