"""Workflow for publishing an auction listing as a blog article."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Sequence

from auction_publisher.errors import (
    PartialPublishError,
    PipelineStageError,
    PollError,
    RegistrationError,
    RemoteError,
    StagingError,
    UploadError,
    ValidationError,
)
from auction_publisher.platforms import (
    ArticleStore,
    AssetUploader,
    MediaRegistrar,
    ResolvedImage,
    StagedUploadNegotiator,
)
from auction_publisher.platforms.shopify import MediaReadinessPoller
from auction_publisher.services.auction_components import ListingComposer, validate_submission
from auction_publisher.services.auction_models import (
    MetafieldEntry,
    PublishResult,
    SubmissionImage,
    SubmissionRequest,
)
from auction_publisher.utils.logging import get_logger, submission_logger

LOGGER = get_logger(__name__)


class AuctionSubmissionWorkflow:
    """Coordinates image staging, upload, registration, polling and article creation.

    Images are processed one at a time in submission order; the first failure
    aborts the submission. Each call is independent and keeps its state local.
    """

    def __init__(
        self,
        staging: StagedUploadNegotiator,
        uploader: AssetUploader,
        registrar: MediaRegistrar,
        poller: MediaReadinessPoller,
        articles: ArticleStore,
        composer: ListingComposer | None = None,
        *,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._staging = staging
        self._uploader = uploader
        self._registrar = registrar
        self._poller = poller
        self._articles = articles
        self._composer = composer or ListingComposer()
        self._on_close = on_close

    def close(self) -> None:
        """Release the HTTP resources the collaborators were built with."""
        if self._on_close is not None:
            self._on_close()
            self._on_close = None

    def publish(
        self,
        request: SubmissionRequest,
        *,
        dry_run: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> PublishResult:
        log = submission_logger(LOGGER, uuid.uuid4().hex[:12])
        try:
            validate_submission(request)
        except ValidationError as exc:
            log.warning(
                "Submission rejected",
                extra={"event": "submission.invalid", "fields": exc.fields},
            )
            raise

        log.info(
            "Submission accepted",
            extra={
                "event": "submission.accepted",
                "title": request.title,
                "images": len(request.images),
                "dry_run": dry_run,
            },
        )

        if dry_run:
            return preview_listing(request, self._composer)

        images = self._resolve_images(request.images, log, cancel_event=cancel_event)
        payload = self._composer.compose(request, images)

        try:
            article = self._articles.create_article(payload.as_payload())
        except RemoteError:
            log.error("Article creation failed", extra={"event": "article.failed"})
            raise
        article_id = article["id"]
        log.info("Article created", extra={"event": "article.created", "article_id": article_id})

        created = self._attach_metafields(article_id, article, payload.metafields, log)

        log.info(
            "Submission published",
            extra={"event": "submission.published", "article_id": article_id},
        )
        return PublishResult(
            article_id=article_id,
            article=article,
            payload=payload,
            images=images,
            metafields_created=created,
        )

    def _resolve_images(
        self,
        images: Sequence[SubmissionImage],
        log: logging.LoggerAdapter,
        *,
        cancel_event: threading.Event | None,
    ) -> list[ResolvedImage]:
        if not images:
            log.info("No image files uploaded", extra={"event": "image.none"})
            return []

        resolved: list[ResolvedImage] = []
        for order, image in enumerate(images, start=1):
            log.info(
                "Starting upload",
                extra={"event": "image.started", "file": image.file_name, "order": order},
            )
            try:
                resolved.append(self._resolve_image(image, order, cancel_event=cancel_event))
            except PipelineStageError as exc:
                log.error(
                    "Image pipeline failed",
                    extra={"event": "image.failed", "file": image.file_name, "stage": exc.stage},
                    exc_info=True,
                )
                raise
            log.info(
                "Image ready",
                extra={"event": "image.ready", "file": image.file_name, "url": resolved[-1].image_url},
            )
        return resolved

    def _resolve_image(
        self,
        image: SubmissionImage,
        order: int,
        *,
        cancel_event: threading.Event | None,
    ) -> ResolvedImage:
        stage: type[PipelineStageError] = StagingError
        try:
            target = self._staging.create_target(image.file_name, image.content_type)
            stage = UploadError
            self._uploader.upload(target, image.data, image.content_type)
            stage = RegistrationError
            asset = self._registrar.register(target.resource_url, image.file_name)
            stage = PollError
            ready = self._poller.wait_until_ready(asset, cancel_event=cancel_event)
        except PipelineStageError as exc:
            raise exc.with_file(image.file_name)
        except Exception as exc:
            raise stage(str(exc), file_name=image.file_name) from exc

        return ResolvedImage(image_url=ready.image_url or "", file_name=image.file_name, order=order)

    def _attach_metafields(
        self,
        article_id: object,
        article: dict[str, object],
        metafields: Sequence[MetafieldEntry],
        log: logging.LoggerAdapter,
    ) -> list[str]:
        created: list[str] = []
        failed: list[str] = []
        for entry in metafields:
            try:
                self._articles.attach_metafield(article_id, entry.as_payload())
            except RemoteError as exc:
                log.error(
                    "Metafield attachment failed",
                    extra={
                        "event": "metafield.failed",
                        "article_id": article_id,
                        "key": entry.key,
                        "reason": str(exc),
                    },
                )
                failed.append(entry.key)
                continue
            created.append(entry.key)

        if failed:
            raise PartialPublishError(
                f"Article {article_id} created but metafields could not be attached: "
                f"{', '.join(failed)}",
                article_id=article_id,
                article=article,
                created=created,
                failed=failed,
            )
        return created


def preview_listing(
    request: SubmissionRequest,
    composer: ListingComposer | None = None,
) -> PublishResult:
    """Validate and compose a listing offline, with placeholder image URLs."""
    validate_submission(request)
    images = [
        ResolvedImage(image_url=f"dry-run://{image.file_name}", file_name=image.file_name, order=order)
        for order, image in enumerate(request.images, start=1)
    ]
    payload = (composer or ListingComposer()).compose(request, images)
    return PublishResult(
        article_id="<dry-run>",
        article=payload.as_payload()["article"],
        payload=payload,
        images=images,
    )
