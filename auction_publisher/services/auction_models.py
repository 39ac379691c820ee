"""Data models for the auction publishing workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from auction_publisher.platforms import ResolvedImage

TITLE_FIELD = "Titulo de la Subasta"
SELLER_FIELD = "Nombre del Vendedor"
PRICE_FIELD = "Precio Inicial"
OFFER_TIER_FIELD = "Monto Minimo de Oferta"


class OfferTier(str, Enum):
    """Minimum offer increments offered by the form clients."""

    FIVE = "5 Pesos"
    TEN = "10 Pesos"
    FIFTY = "50 Pesos"
    FREE = "Oferta Libre"


@dataclass(slots=True)
class SubmissionImage:
    """A raw image as received from the form client."""

    file_name: str
    content_type: str
    data: bytes


@dataclass(slots=True)
class SubmissionRequest:
    """One auction listing as submitted by a seller."""

    seller_name: str
    title: str
    starting_price: str
    offer_tier: str
    images: list[SubmissionImage] = field(default_factory=list)

    @property
    def starting_price_value(self) -> int:
        return int(self.starting_price)


@dataclass(slots=True)
class MetafieldEntry:
    namespace: str
    key: str
    value: Any
    value_type: str

    def as_payload(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "key": self.key,
            "value": self.value,
            "type": self.value_type,
        }


@dataclass(slots=True)
class ArticlePayload:
    """Everything needed to create the article and annotate it."""

    title: str
    body_html: str
    cover_image_url: str | None = None
    metafields: list[MetafieldEntry] = field(default_factory=list)
    published: bool = True

    def as_payload(self) -> dict[str, Any]:
        article: dict[str, Any] = {
            "title": self.title,
            "body_html": self.body_html,
            "published": self.published,
        }
        if self.cover_image_url:
            article["image"] = {"src": self.cover_image_url}
        return {"article": article}


@dataclass(slots=True)
class PublishResult:
    """Outcome of a successful publishing attempt."""

    article_id: Any
    article: dict[str, Any]
    payload: ArticlePayload
    images: list[ResolvedImage]
    metafields_created: list[str] = field(default_factory=list)
    success: bool = True
