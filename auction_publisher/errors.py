"""Error taxonomy for the auction publishing workflow."""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence


class AuctionPublishError(RuntimeError):
    """Base class for every failure raised while publishing a listing."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


class ValidationError(AuctionPublishError):
    """Raised when a submission is missing fields or carries malformed values."""

    def __init__(self, message: str, *, fields: Sequence[str]) -> None:
        super().__init__(message, details={"fields": list(fields)})
        self.fields = list(fields)


class RemoteError(AuctionPublishError):
    """Raised when the commerce platform rejects or fails a call."""


class RemoteProtocolError(RemoteError):
    """GraphQL response carried a non-empty ``errors`` list or was unreadable."""

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[Any] | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if errors:
            merged["errors"] = list(errors)
        super().__init__(message, details=merged)
        self.errors = list(errors or [])


class RemoteHttpError(RemoteError):
    """HTTP status outside the 2xx range, or the transport itself failed."""

    def __init__(self, message: str, *, status: int | None, body: str = "") -> None:
        super().__init__(message, details={"status": status, "body": body[:500]})
        self.status = status
        self.body = body


class PipelineStageError(AuctionPublishError):
    """Failure of one stage of the per-image pipeline."""

    stage = "pipeline"

    def __init__(
        self,
        message: str,
        *,
        file_name: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        merged = {"stage": self.stage}
        if file_name:
            merged["file"] = file_name
        merged.update(details or {})
        super().__init__(message, details=merged)
        self.file_name = file_name

    def with_file(self, file_name: str) -> "PipelineStageError":
        """Attach the originating file name when the raiser did not know it."""
        if not self.file_name:
            self.file_name = file_name
            self.details["file"] = file_name
        return self

    @property
    def user_message(self) -> str:
        return f"Image upload failed for {self.file_name or '<unknown>'} ({self.stage}): {self.message}"


class StagingError(PipelineStageError):
    stage = "staging"


class UploadError(PipelineStageError):
    stage = "upload"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: str = "",
        file_name: str | None = None,
    ) -> None:
        super().__init__(
            message,
            file_name=file_name,
            details={"status": status, "body": body[:500]},
        )
        self.status = status
        self.body = body


class RegistrationError(PipelineStageError):
    stage = "registration"


class ProcessingFailedError(PipelineStageError):
    stage = "processing"


class IncompleteAssetError(PipelineStageError):
    stage = "processing"


class PollError(PipelineStageError):
    """A status read failed while waiting for the file to finish processing."""

    stage = "processing"


class PollTimeoutError(PipelineStageError):
    stage = "processing"


class PollCancelledError(PollTimeoutError):
    """Polling stopped because the caller cancelled the submission."""


class PartialPublishError(AuctionPublishError):
    """The article exists but not every metafield could be attached."""

    def __init__(
        self,
        message: str,
        *,
        article_id: Any,
        article: Mapping[str, Any],
        created: Sequence[str],
        failed: Sequence[str],
    ) -> None:
        super().__init__(
            message,
            details={"article_id": article_id, "created": list(created), "failed": list(failed)},
        )
        self.article_id = article_id
        self.article = dict(article)
        self.created = list(created)
        self.failed = list(failed)


__all__ = [
    "AuctionPublishError",
    "IncompleteAssetError",
    "PartialPublishError",
    "PipelineStageError",
    "PollCancelledError",
    "PollError",
    "PollTimeoutError",
    "ProcessingFailedError",
    "RegistrationError",
    "RemoteError",
    "RemoteHttpError",
    "RemoteProtocolError",
    "StagingError",
    "UploadError",
    "ValidationError",
]
