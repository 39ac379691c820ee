"""Construction of the publishing workflow and its FastAPI dependencies.

Each submission gets freshly built collaborators sharing one HTTP session,
closed with the workflow, so no connection pool or other mutable state is
shared between concurrent submissions.
"""

from __future__ import annotations

from functools import lru_cache, partial
from typing import Callable

import requests
from fastapi import Depends

from auction_publisher.platforms.shopify import (
    MediaReadinessPoller,
    ShopifyApiClient,
    ShopifyArticleClient,
    ShopifyFileRegistrar,
    ShopifyStagedUploads,
    StagedAssetUploader,
)
from auction_publisher.security import SecretProvider, default_secret_provider, resolve_access_token
from auction_publisher.services.auction_components import ListingComposer, PayloadBuilder
from auction_publisher.services.auction_workflow import AuctionSubmissionWorkflow
from auction_publisher.settings import AppConfig, load_config


def build_api_client(
    config: AppConfig,
    *,
    secrets: SecretProvider | None = None,
    session: requests.Session | None = None,
) -> ShopifyApiClient:
    if not config.shopify.store_domain:
        raise RuntimeError("Shopify store domain is not configured; set SHOPIFY_STORE_DOMAIN")
    provider = secrets or default_secret_provider(config.shopify.secrets_file)
    return ShopifyApiClient(config.shopify, resolve_access_token(provider), session=session)


def build_workflow(
    config: AppConfig,
    *,
    secrets: SecretProvider | None = None,
) -> AuctionSubmissionWorkflow:
    session = requests.Session()
    try:
        api = build_api_client(config, secrets=secrets, session=session)
    except Exception:
        session.close()
        raise
    registrar = ShopifyFileRegistrar(api)
    composer = ListingComposer(
        payload_builder=PayloadBuilder(
            namespace=config.shopify.metafield_namespace,
            published=config.shopify.publish_articles,
        )
    )
    return AuctionSubmissionWorkflow(
        staging=ShopifyStagedUploads(api),
        uploader=StagedAssetUploader(timeout=config.shopify.timeout, session=session),
        registrar=registrar,
        poller=MediaReadinessPoller(registrar, config.polling),
        articles=ShopifyArticleClient(api, config.shopify.blog_id),
        composer=composer,
        on_close=session.close,
    )


# ---- FastAPI dependencies ---------------------------------------------------

@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return load_config()


def get_workflow_factory(
    config: AppConfig = Depends(get_config),
) -> Callable[[], AuctionSubmissionWorkflow]:
    return partial(build_workflow, config)
