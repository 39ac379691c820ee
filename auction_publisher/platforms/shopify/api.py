"""Shopify Admin API helpers."""

from __future__ import annotations

import json
from typing import Any, Mapping

import requests

from auction_publisher.errors import RemoteHttpError, RemoteProtocolError
from auction_publisher.settings import ShopifySettings
from auction_publisher.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ShopifyApiClient:
    """Minimal client for the Shopify GraphQL and REST Admin APIs.

    Every call carries the same access token; nothing is cached between calls.
    """

    def __init__(
        self,
        settings: ShopifySettings,
        access_token: str,
        *,
        session: requests.Session | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token must not be empty")
        self._settings = settings
        self._access_token = access_token
        self._session = session or requests.Session()

    @property
    def settings(self) -> ShopifySettings:
        return self._settings

    def close(self) -> None:
        self._session.close()

    def graphql(self, query: str, variables: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL operation and return its ``data`` object."""
        response = self._send(
            "POST",
            self._settings.graphql_url,
            {"query": query, "variables": dict(variables or {})},
        )
        body = self._decode(response)

        errors = body.get("errors")
        if errors:
            LOGGER.error(
                "GraphQL call returned errors",
                extra={"event": "shopify.graphql_errors", "errors": errors},
            )
            raise RemoteProtocolError("Shopify GraphQL error", errors=errors)

        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteProtocolError("GraphQL response is missing data", details={"body": body})
        return data

    def rest(
        self,
        path: str,
        method: str = "GET",
        body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call a REST resource endpoint and return the decoded JSON body."""
        response = self._send(method, self._settings.rest_url(path), body)
        if not response.content:
            return {}
        return self._decode(response)

    def verify_token(self) -> dict[str, Any]:
        """Fetch the shop record; fails when the access token is rejected."""
        data = self.rest("shop.json", "GET")
        shop = data.get("shop")
        if not isinstance(shop, dict):
            raise RemoteProtocolError("shop.json response is missing shop", details={"body": data})
        return shop

    def _headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self._access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self._settings.user_agent,
        }

    def _send(
        self,
        method: str,
        url: str,
        payload: Mapping[str, Any] | None,
    ) -> requests.Response:
        try:
            response = self._session.request(
                method.upper(),
                url,
                headers=self._headers(),
                json=dict(payload) if payload is not None else None,
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteHttpError(
                f"Shopify request failed: {method.upper()} {url}: {exc}",
                status=None,
            ) from exc

        if not 200 <= response.status_code < 300:
            raise RemoteHttpError(
                f"Shopify request failed: {response.status_code} {response.reason or ''}".rstrip(),
                status=response.status_code,
                body=response.text,
            )
        return response

    def _decode(self, response: requests.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise RemoteProtocolError(
                "Failed to parse Shopify response",
                details={"response": response.text[:200]},
            ) from exc
        if not isinstance(data, dict):
            raise RemoteProtocolError("Unexpected Shopify response shape", details={"body": data})
        return data
