"""Managed file registration and readiness polling."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping

from auction_publisher.errors import (
    AuctionPublishError,
    IncompleteAssetError,
    PollCancelledError,
    PollError,
    PollTimeoutError,
    ProcessingFailedError,
    RegistrationError,
)
from auction_publisher.platforms.base import AssetStatus, ManagedAsset, MediaRegistrar
from auction_publisher.settings import PollingSettings
from auction_publisher.utils.logging import get_logger

from .api import ShopifyApiClient
from .staging import join_user_errors

LOGGER = get_logger(__name__)

FILE_CREATE = """
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      id
      fileStatus
      ... on MediaImage {
        image {
          url
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

FILE_STATUS = """
query getFileStatus($id: ID!) {
  node(id: $id) {
    ... on MediaImage {
      id
      fileStatus
      image {
        url
      }
    }
  }
}
"""


def _asset_from_node(node: Mapping[str, Any]) -> ManagedAsset:
    image = node.get("image") or {}
    return ManagedAsset(
        id=str(node["id"]),
        status=AssetStatus.parse(node.get("fileStatus") or node.get("status")),
        image_url=image.get("url") or None,
    )


class ShopifyFileRegistrar:
    """Turns staged resources into managed ``MediaImage`` files."""

    def __init__(self, api: ShopifyApiClient) -> None:
        self._api = api

    def register(self, resource_url: str, alt_text: str) -> ManagedAsset:
        variables = {
            "files": [
                {
                    "alt": alt_text,
                    "contentType": "IMAGE",
                    "originalSource": resource_url,
                }
            ]
        }
        data = self._api.graphql(FILE_CREATE, variables)
        result = data.get("fileCreate") or {}

        errors = result.get("userErrors") or []
        if errors:
            raise RegistrationError(
                f"fileCreate errors: {join_user_errors(errors)}",
                details={"user_errors": errors},
            )

        files = result.get("files") or []
        if not files or not files[0].get("id"):
            raise RegistrationError("No files returned from fileCreate mutation")

        asset = _asset_from_node(files[0])
        LOGGER.info(
            "Media registered",
            extra={"event": "media.registered", "asset_id": asset.id, "status": asset.status.value},
        )
        return asset

    def fetch(self, asset_id: str) -> ManagedAsset:
        data = self._api.graphql(FILE_STATUS, {"id": asset_id})
        node = data.get("node")
        if not node or not node.get("id"):
            raise RegistrationError(
                f"File details not found for id {asset_id}",
                details={"asset_id": asset_id},
            )
        return _asset_from_node(node)


class MediaReadinessPoller:
    """Waits for a managed file to leave the processing state.

    READY and FAILED are terminal. Anything else is re-read from the platform
    after ``interval`` seconds until ``max_attempts`` re-reads or ``timeout``
    seconds are used up.
    """

    def __init__(
        self,
        registrar: MediaRegistrar,
        settings: PollingSettings,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registrar = registrar
        self._settings = settings
        self._sleep = sleep
        self._clock = clock

    def wait_until_ready(
        self,
        asset: ManagedAsset,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ManagedAsset:
        deadline = self._clock() + self._settings.timeout
        attempts = 0
        current = asset

        while True:
            if current.status is AssetStatus.READY:
                if not current.image_url:
                    raise IncompleteAssetError(
                        "No image URL found after file is ready",
                        details={"asset_id": current.id},
                    )
                return current
            if current.status is AssetStatus.FAILED:
                raise ProcessingFailedError(
                    "File processing failed",
                    details={"asset_id": current.id},
                )

            if attempts >= self._settings.max_attempts:
                raise PollTimeoutError(
                    f"File still {current.status.value} after {attempts} status checks",
                    details={"asset_id": current.id, "attempts": attempts},
                )
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise PollTimeoutError(
                    f"File still {current.status.value} after {self._settings.timeout}s",
                    details={"asset_id": current.id, "attempts": attempts},
                )

            LOGGER.info(
                "Waiting for file to be ready",
                extra={"event": "poll.waiting", "asset_id": current.id, "status": current.status.value},
            )
            if self._wait(min(self._settings.interval, remaining), cancel_event):
                raise PollCancelledError(
                    "Polling cancelled before the file was ready",
                    details={"asset_id": current.id, "attempts": attempts},
                )

            attempts += 1
            try:
                current = self._registrar.fetch(current.id)
            except AuctionPublishError as exc:
                raise PollError(
                    f"Status check failed for {current.id}: {exc.message}",
                    details={"asset_id": current.id, "attempts": attempts},
                ) from exc

    def _wait(self, delay: float, cancel_event: threading.Event | None) -> bool:
        """Return True when the wait was interrupted by cancellation."""
        if cancel_event is None:
            self._sleep(delay)
            return False
        return cancel_event.wait(delay)
