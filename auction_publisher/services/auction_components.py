"""Components for the auction listing publishing workflow."""

from __future__ import annotations

import html
import re
from typing import Sequence

from auction_publisher.errors import ValidationError
from auction_publisher.platforms import ResolvedImage
from auction_publisher.services.auction_models import (
    OFFER_TIER_FIELD,
    PRICE_FIELD,
    SELLER_FIELD,
    TITLE_FIELD,
    ArticlePayload,
    MetafieldEntry,
    SubmissionRequest,
)

_PRICE_PATTERN = re.compile(r"^\d+$", re.ASCII)
_IMAGE_ALT = "Auction Image"


def validate_submission(request: SubmissionRequest) -> None:
    """Reject incomplete or malformed submissions before anything touches the network."""
    required = (
        (TITLE_FIELD, request.title),
        (SELLER_FIELD, request.seller_name),
        (PRICE_FIELD, request.starting_price),
        (OFFER_TIER_FIELD, request.offer_tier),
    )
    missing = [name for name, value in required if not (value or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    if not _PRICE_PATTERN.fullmatch(request.starting_price):
        raise ValidationError(
            f"{PRICE_FIELD} must be a whole number, got {request.starting_price!r}",
            fields=[PRICE_FIELD],
        )


class ContentBuilder:
    """Builds the article HTML for an auction listing."""

    def build(self, request: SubmissionRequest, images: Sequence[ResolvedImage]) -> str:
        ordered = sorted(images, key=lambda item: item.order)
        images_html = "".join(self._render_image_block(item) for item in ordered)
        seller = html.escape(request.seller_name)
        tier = html.escape(request.offer_tier)
        return (
            '<p style="font-size: 0.95em; color: #555;">'
            f"<em>Publicado por: {seller}</em></p>\n"
            '<div style="display: flex; gap: 1em;">'
            f"<p><strong>Precio Inicial:</strong> ${request.starting_price_value}</p>"
            f"<p><strong>Monto Mínimo de Oferta:</strong> {tier}</p>"
            "</div>\n"
            '<div style="display: flex; flex-wrap: wrap; gap: 10px; margin-top: 10px;">'
            f"{images_html}"
            "</div>"
        )

    def _render_image_block(self, image: ResolvedImage) -> str:
        src = html.escape(image.image_url, quote=True)
        return f'<p><img src="{src}" alt="{_IMAGE_ALT}" style="max-width:100%;"></p>'


class PayloadBuilder:
    """Builds the article payload and its metafields."""

    def __init__(self, *, namespace: str = "auction", published: bool = True) -> None:
        self._namespace = namespace
        self._published = published

    def build(
        self,
        request: SubmissionRequest,
        images: Sequence[ResolvedImage],
        body_html: str,
    ) -> ArticlePayload:
        ordered = sorted(images, key=lambda item: item.order)
        cover = ordered[0].image_url if ordered else None
        return ArticlePayload(
            title=request.title.strip(),
            body_html=body_html,
            cover_image_url=cover,
            metafields=self.build_metafields(request),
            published=self._published,
        )

    def build_metafields(self, request: SubmissionRequest) -> list[MetafieldEntry]:
        return [
            MetafieldEntry(
                self._namespace, SELLER_FIELD, request.seller_name.strip(), "single_line_text_field"
            ),
            MetafieldEntry(
                self._namespace, PRICE_FIELD, request.starting_price_value, "number_integer"
            ),
            MetafieldEntry(
                self._namespace, OFFER_TIER_FIELD, request.offer_tier.strip(), "single_line_text_field"
            ),
        ]


class ListingComposer:
    """Runs content and payload building as one pure step."""

    def __init__(
        self,
        content_builder: ContentBuilder | None = None,
        payload_builder: PayloadBuilder | None = None,
    ) -> None:
        self._content_builder = content_builder or ContentBuilder()
        self._payload_builder = payload_builder or PayloadBuilder()

    def compose(
        self, request: SubmissionRequest, images: Sequence[ResolvedImage]
    ) -> ArticlePayload:
        body_html = self._content_builder.build(request, images)
        return self._payload_builder.build(request, images, body_html)
