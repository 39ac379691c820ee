"""Command-line interface for serving and publishing auction listings."""

from __future__ import annotations

import argparse
import json
import mimetypes
import sys
from contextlib import closing
from pathlib import Path
from typing import Callable, Sequence

from ..errors import AuctionPublishError
from ..security import SecretNotFoundError
from ..services.auction_models import OfferTier, SubmissionImage, SubmissionRequest
from ..services.auction_workflow import preview_listing
from ..settings import AppConfig, load_config
from ..utils.logging import configure_logging, get_logger
from .dependencies import build_api_client, build_workflow

LOGGER = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    structured = False if args.log_plain else config.logging.structured
    configure_logging(level=config.logging.level, structured=structured)

    handler: Callable[[argparse.Namespace, AppConfig], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return 1
    return handler(args, config)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auction-publisher", description="Publish auction listings to a Shopify blog"
    )
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address; defaults to config")
    serve_parser.add_argument("--port", type=int, default=None, help="Port; defaults to config")
    serve_parser.set_defaults(handler=_handle_serve)

    publish_parser = subparsers.add_parser("publish", help="Publish one listing from local files")
    publish_parser.add_argument("--title", required=True, help="Auction title")
    publish_parser.add_argument("--seller", required=True, help="Seller name")
    publish_parser.add_argument("--price", required=True, help="Starting price (whole number)")
    publish_parser.add_argument(
        "--tier",
        default=OfferTier.FIVE.value,
        help=f"Minimum offer tier, e.g. {', '.join(t.value for t in OfferTier)}",
    )
    publish_parser.add_argument(
        "--image",
        dest="images",
        action="append",
        type=Path,
        default=[],
        metavar="PATH",
        help="Image file to attach; repeat for several, order is preserved",
    )
    publish_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and compose the article without calling Shopify",
    )
    publish_parser.set_defaults(handler=_handle_publish)

    token_parser = subparsers.add_parser("check-token", help="Verify the configured access token")
    token_parser.set_defaults(handler=_handle_check_token)

    return parser


def _handle_serve(args: argparse.Namespace, config: AppConfig) -> int:
    import uvicorn

    from .server import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    LOGGER.info(
        "Starting HTTP server",
        extra={"event": "cli.command", "command": "serve", "host": host, "port": port},
    )
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
    return 0


def _load_images(paths: Sequence[Path]) -> list[SubmissionImage]:
    images: list[SubmissionImage] = []
    for path in paths:
        if not path.is_file():
            raise SystemExit(f"Image not found: {path}")
        content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        images.append(
            SubmissionImage(file_name=path.name, content_type=content_type, data=path.read_bytes())
        )
    return images


def _handle_publish(args: argparse.Namespace, config: AppConfig) -> int:
    request = SubmissionRequest(
        seller_name=args.seller,
        title=args.title,
        starting_price=args.price,
        offer_tier=args.tier,
        images=_load_images(args.images),
    )
    LOGGER.info(
        "Publishing listing",
        extra={"event": "cli.command", "command": "publish", "images": len(request.images)},
    )

    try:
        if args.dry_run:
            result = preview_listing(request)
        else:
            with closing(build_workflow(config)) as workflow:
                result = workflow.publish(request)
    except (AuctionPublishError, SecretNotFoundError, RuntimeError) as exc:
        print(json.dumps({"success": False, "message": str(exc)}, ensure_ascii=False))
        return 1

    print(
        json.dumps(
            {
                "success": True,
                "article_id": result.article_id,
                "article": result.article,
                "metafields": [entry.as_payload() for entry in result.payload.metafields],
            },
            ensure_ascii=False,
            indent=2,
            default=str,
        )
    )
    return 0


def _handle_check_token(args: argparse.Namespace, config: AppConfig) -> int:
    try:
        with closing(build_api_client(config)) as client:
            shop = client.verify_token()
    except (AuctionPublishError, SecretNotFoundError, RuntimeError) as exc:
        print(f"Token check failed: {exc}", file=sys.stderr)
        return 1
    print(f"Token OK for shop {shop.get('name', '<unknown>')} ({shop.get('myshopify_domain', '')})")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
