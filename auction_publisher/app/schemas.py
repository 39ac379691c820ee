"""Response schemas for the HTTP surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuctionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    article: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None
    stage: str | None = None
    file: str | None = None
    invalid_fields: list[str] | None = Field(default=None, alias="fields")
    failed_metafields: list[str] | None = Field(default=None, alias="failedMetafields")

    def as_content(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    status: str = "ok"
