"""Staged upload negotiation."""

from __future__ import annotations

from typing import Any, Sequence

from auction_publisher.errors import StagingError
from auction_publisher.platforms.base import StagedParameter, StagedTarget

from .api import ShopifyApiClient

STAGED_UPLOADS_CREATE = """
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters {
        name
        value
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


def join_user_errors(errors: Sequence[dict[str, Any]]) -> str:
    return ", ".join(str(error.get("message", error)) for error in errors)


class ShopifyStagedUploads:
    """Requests one-time upload targets for image files."""

    def __init__(self, api: ShopifyApiClient) -> None:
        self._api = api

    def create_target(self, file_name: str, content_type: str) -> StagedTarget:
        if not file_name:
            raise StagingError("A file name is required to stage an upload")

        variables = {
            "input": [
                {
                    "resource": "IMAGE",
                    "filename": file_name,
                    "mimeType": content_type,
                    "httpMethod": "POST",
                }
            ]
        }
        data = self._api.graphql(STAGED_UPLOADS_CREATE, variables)
        result = data.get("stagedUploadsCreate") or {}

        errors = result.get("userErrors") or []
        if errors:
            raise StagingError(
                f"stagedUploadsCreate errors: {join_user_errors(errors)}",
                file_name=file_name,
                details={"user_errors": errors},
            )

        targets = result.get("stagedTargets") or []
        if not targets:
            raise StagingError("stagedUploadsCreate returned no targets", file_name=file_name)

        raw = targets[0]
        if not raw.get("url") or not raw.get("resourceUrl"):
            raise StagingError(
                "Staged target is missing url or resourceUrl",
                file_name=file_name,
                details={"target": raw},
            )
        return StagedTarget(
            url=raw["url"],
            resource_url=raw["resourceUrl"],
            parameters=[
                StagedParameter(name=item["name"], value=item["value"])
                for item in raw.get("parameters") or []
            ],
        )
