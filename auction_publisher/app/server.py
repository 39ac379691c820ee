"""FastAPI application exposing ``POST /create-auction``."""

from __future__ import annotations

import asyncio
import threading
from contextlib import asynccontextmanager, closing
from typing import AsyncGenerator, Callable

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from auction_publisher.errors import (
    AuctionPublishError,
    PartialPublishError,
    PipelineStageError,
    ValidationError,
)
from auction_publisher.services.auction_models import (
    OFFER_TIER_FIELD,
    PRICE_FIELD,
    SELLER_FIELD,
    TITLE_FIELD,
    SubmissionImage,
    SubmissionRequest,
)
from auction_publisher.services.auction_components import validate_submission
from auction_publisher.services.auction_workflow import AuctionSubmissionWorkflow
from auction_publisher.settings import AppConfig
from auction_publisher.utils.logging import get_logger

from .dependencies import get_config, get_workflow_factory
from .schemas import AuctionResponse, HealthResponse

LOGGER = get_logger(__name__)
router = APIRouter()


def describe_failure(exc: Exception) -> tuple[int, AuctionResponse]:
    """Map a workflow failure to an HTTP status and a single JSON message."""
    if isinstance(exc, StarletteHTTPException):
        return exc.status_code, AuctionResponse(
            success=False, message=str(exc.detail), error="bad_request"
        )
    if isinstance(exc, ValidationError):
        return 400, AuctionResponse(
            success=False, message=exc.message, error="validation", invalid_fields=exc.fields
        )
    if isinstance(exc, PipelineStageError):
        return 400, AuctionResponse(
            success=False,
            message=exc.user_message,
            error=type(exc).__name__,
            stage=exc.stage,
            file=exc.file_name,
        )
    if isinstance(exc, PartialPublishError):
        return 500, AuctionResponse(
            success=False,
            message=exc.message,
            error="partial_publish",
            article=exc.article,
            failed_metafields=exc.failed,
        )
    if isinstance(exc, AuctionPublishError):
        return 500, AuctionResponse(success=False, message=exc.message, error=type(exc).__name__)
    message = str(exc.args[0]) if exc.args else type(exc).__name__
    return 500, AuctionResponse(success=False, message=message, error="internal")


def _text(form: FormData, name: str) -> str:
    value = form.get(name)
    return value if isinstance(value, str) else ""


async def submission_from_form(form: FormData) -> SubmissionRequest:
    images: list[SubmissionImage] = []
    for _, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        data = await value.read()
        images.append(
            SubmissionImage(
                file_name=value.filename or f"image_{len(images) + 1}",
                content_type=value.content_type or "application/octet-stream",
                data=data,
            )
        )
    return SubmissionRequest(
        seller_name=_text(form, SELLER_FIELD),
        title=_text(form, TITLE_FIELD),
        starting_price=_text(form, PRICE_FIELD),
        offer_tier=_text(form, OFFER_TIER_FIELD),
        images=images,
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.post("/create-auction", response_model=AuctionResponse)
async def create_auction(
    request: Request,
    workflow_factory: Callable[[], AuctionSubmissionWorkflow] = Depends(get_workflow_factory),
) -> JSONResponse:
    """Publish one auction listing submitted as multipart form data.

    The form is validated before any Shopify collaborator is built. The
    blocking workflow runs on a worker thread so concurrent submissions never
    wait on each other.
    """
    cancel_event = threading.Event()
    try:
        form = await request.form()
        submission = await submission_from_form(form)
        validate_submission(submission)
        with closing(workflow_factory()) as workflow:
            result = await run_in_threadpool(
                workflow.publish, submission, cancel_event=cancel_event
            )
    except asyncio.CancelledError:
        cancel_event.set()
        raise
    except Exception as exc:
        status, body = describe_failure(exc)
        if status >= 500:
            LOGGER.exception("Error creating auction", extra={"event": "auction.failed"})
        else:
            LOGGER.warning(
                "Auction rejected",
                extra={"event": "auction.rejected", "reason": body.message},
            )
        return JSONResponse(status_code=status, content=body.as_content())

    return JSONResponse(
        status_code=200,
        content=AuctionResponse(success=True, article=result.article).as_content(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    LOGGER.info("Auction publisher starting", extra={"event": "server.starting"})
    yield
    LOGGER.info("Auction publisher stopping", extra={"event": "server.stopping"})


def create_app(config: AppConfig | None = None) -> FastAPI:
    app = FastAPI(
        title="Auction Publisher",
        description="Publishes auction listings as Shopify blog articles.",
        version="0.1.0",
        lifespan=lifespan,
    )
    origins = config.server.cors_origins if config else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    if config is not None:
        app.dependency_overrides[get_config] = lambda: config
    return app


app = create_app()
