"""Tests for configuration loading and secret resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from auction_publisher.security import SecretNotFoundError, default_secret_provider, resolve_access_token
from auction_publisher.security.credential_provider import (
    ChainedSecretProvider,
    EnvSecretProvider,
    FileSecretProvider,
    MappingSecretProvider,
)
from auction_publisher.settings import load_config


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AUCTION_CONFIG", raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_reads_all_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[shopify]
store_domain = "demo.myshopify.com"
blog_id = 42
publish_articles = false
metafield_namespace = "subastas"

[polling]
interval = 0.5
max_attempts = 10
timeout = 30

[server]
port = 9000
cors_origins = "https://a.example, https://b.example"

[logging]
structured = false
level = "debug"
""",
    )

    config = load_config(path, env={})

    assert config.source == path
    assert config.shopify.store_domain == "demo.myshopify.com"
    assert config.shopify.blog_id == "42"
    assert config.shopify.publish_articles is False
    assert config.shopify.metafield_namespace == "subastas"
    assert config.shopify.graphql_url == "https://demo.myshopify.com/admin/api/2023-10/graphql.json"
    assert config.shopify.rest_url("/blogs/42/articles.json").endswith("/2023-10/blogs/42/articles.json")
    assert (config.polling.interval, config.polling.max_attempts, config.polling.timeout) == (0.5, 10, 30.0)
    assert config.server.port == 9000
    assert config.server.cors_origins == ["https://a.example", "https://b.example"]
    assert config.logging.structured is False
    assert config.logging.level == "DEBUG"


def test_environment_overrides_store_and_blog(tmp_path: Path) -> None:
    path = _write(tmp_path, '[shopify]\nstore_domain = "file.myshopify.com"\nblog_id = "1"\n')

    config = load_config(
        path, env={"SHOPIFY_STORE_DOMAIN": "env.myshopify.com", "SHOPIFY_BLOG_ID": "2"}
    )

    assert config.shopify.store_domain == "env.myshopify.com"
    assert config.shopify.blog_id == "2"


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml", env={})


def test_invalid_polling_bounds_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, "[polling]\nmax_attempts = 0\n")

    with pytest.raises(ValueError):
        load_config(path, env={})


def test_env_provider_maps_dotted_keys() -> None:
    provider = EnvSecretProvider(env={"SHOPIFY_ACCESS_TOKEN": "shpat_123", "EMPTY_VALUE": ""})

    assert provider.get_secret("shopify.access_token") == "shpat_123"
    with pytest.raises(SecretNotFoundError):
        provider.get_secret("empty.value")


def test_file_provider_reads_ini(tmp_path: Path) -> None:
    secrets = tmp_path / "secrets.ini"
    secrets.write_text("[shopify]\naccess_token = shpat_file\n", encoding="utf-8")

    assert FileSecretProvider(secrets).get_secret("shopify.access_token") == "shpat_file"
    with pytest.raises(SecretNotFoundError):
        FileSecretProvider(tmp_path / "missing.ini").get_secret("shopify.access_token")


def test_chain_falls_through_to_later_provider() -> None:
    chain = ChainedSecretProvider(
        [EnvSecretProvider(env={}), MappingSecretProvider({"shopify.access_token": "shpat_map"})]
    )

    assert resolve_access_token(chain) == "shpat_map"


def test_default_provider_prefers_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    secrets = tmp_path / "secrets.ini"
    secrets.write_text("[shopify]\naccess_token = shpat_file\n", encoding="utf-8")
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_env")

    assert resolve_access_token(default_secret_provider(secrets)) == "shpat_env"


def test_missing_token_message_names_variable() -> None:
    with pytest.raises(SecretNotFoundError) as excinfo:
        resolve_access_token(MappingSecretProvider({}))

    assert "SHOPIFY_ACCESS_TOKEN" in str(excinfo.value)
