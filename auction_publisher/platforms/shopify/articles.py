"""Shopify blog article management."""

from __future__ import annotations

from typing import Any, Mapping

from auction_publisher.errors import RemoteProtocolError

from .api import ShopifyApiClient


class ShopifyArticleClient:
    """Creates blog articles and attaches metafields via the REST Admin API."""

    def __init__(self, api: ShopifyApiClient, blog_id: str) -> None:
        if not blog_id:
            raise ValueError("blog_id must not be empty")
        self._api = api
        self._blog_id = blog_id

    def create_article(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Submit an article payload and return the created article record."""
        data = self._api.rest(f"blogs/{self._blog_id}/articles.json", "POST", payload)
        article = data.get("article")
        if not isinstance(article, dict) or article.get("id") is None:
            raise RemoteProtocolError("Article creation did not return an article id", details=data)
        return article

    def attach_metafield(self, article_id: Any, metafield: Mapping[str, Any]) -> dict[str, Any]:
        data = self._api.rest(
            f"articles/{article_id}/metafields.json",
            "POST",
            {"metafield": dict(metafield)},
        )
        return data.get("metafield") or {}
