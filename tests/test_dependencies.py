"""Tests for building the workflow and the lifetime of its HTTP session."""

from __future__ import annotations

import pytest

from auction_publisher.app import dependencies
from auction_publisher.security import SecretNotFoundError
from auction_publisher.security.credential_provider import MappingSecretProvider
from auction_publisher.settings import (
    AppConfig,
    LoggingSettings,
    PollingSettings,
    ServerSettings,
    ShopifySettings,
)


class TrackedSession:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def sessions(monkeypatch: pytest.MonkeyPatch) -> list[TrackedSession]:
    created: list[TrackedSession] = []

    def factory() -> TrackedSession:
        session = TrackedSession()
        created.append(session)
        return session

    monkeypatch.setattr(dependencies.requests, "Session", factory)
    monkeypatch.delenv("SHOPIFY_ACCESS_TOKEN", raising=False)
    return created


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        shopify=ShopifySettings(store_domain="demo.myshopify.com", blog_id="42"),
        polling=PollingSettings(),
        server=ServerSettings(),
        logging=LoggingSettings(),
    )


def test_workflow_shares_one_session_and_closes_it(
    config: AppConfig, sessions: list[TrackedSession]
) -> None:
    workflow = dependencies.build_workflow(
        config, secrets=MappingSecretProvider({"shopify.access_token": "shpat_test"})
    )

    assert len(sessions) == 1
    assert sessions[0].closed is False

    workflow.close()

    assert sessions[0].closed is True


def test_session_closed_when_token_is_missing(
    config: AppConfig, sessions: list[TrackedSession]
) -> None:
    with pytest.raises(SecretNotFoundError):
        dependencies.build_workflow(config, secrets=MappingSecretProvider({}))

    assert [session.closed for session in sessions] == [True]


def test_missing_store_domain_is_reported(config: AppConfig, sessions: list[TrackedSession]) -> None:
    config.shopify.store_domain = ""

    with pytest.raises(RuntimeError, match="store domain"):
        dependencies.build_workflow(config)

    assert [session.closed for session in sessions] == [True]
