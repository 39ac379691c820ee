"""Helpers for loading configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_NAME = "config.toml"
CONFIG_ENV_VAR = "AUCTION_CONFIG"
STORE_ENV_VAR = "SHOPIFY_STORE_DOMAIN"
BLOG_ENV_VAR = "SHOPIFY_BLOG_ID"


@dataclass(slots=True)
class ShopifySettings:
    store_domain: str
    blog_id: str
    api_version: str = "2023-10"
    timeout: float = 30.0
    user_agent: str = "Auction-App-Backend"
    publish_articles: bool = True
    metafield_namespace: str = "auction"
    secrets_file: Path | None = None

    @property
    def admin_base_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}"

    @property
    def graphql_url(self) -> str:
        return f"{self.admin_base_url}/graphql.json"

    def rest_url(self, path: str) -> str:
        return f"{self.admin_base_url}/{path.lstrip('/')}"


@dataclass(slots=True)
class PollingSettings:
    """Bounds for the media readiness loop."""

    interval: float = 1.0
    max_attempts: int = 60
    timeout: float = 120.0


@dataclass(slots=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass(slots=True)
class LoggingSettings:
    structured: bool = True
    level: str = "INFO"


@dataclass(slots=True)
class AppConfig:
    shopify: ShopifySettings
    polling: PollingSettings
    server: ServerSettings
    logging: LoggingSettings
    source: Path | None = None


def _config_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    candidate: Path
    if explicit:
        candidate = Path(explicit)
    else:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        candidate = Path(env_value) if env_value else PROJECT_ROOT / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _to_path(value: str | None) -> Path | None:
    if not value:
        return None
    candidate = Path(value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _load_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _as_bool(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _build_shopify(section: Mapping[str, Any], env: Mapping[str, str]) -> ShopifySettings:
    store_domain = env.get(STORE_ENV_VAR) or section.get("store_domain") or ""
    blog_id = env.get(BLOG_ENV_VAR) or section.get("blog_id") or ""
    return ShopifySettings(
        store_domain=str(store_domain).strip(),
        blog_id=str(blog_id).strip(),
        api_version=str(section.get("api_version", "2023-10")),
        timeout=float(section.get("timeout", 30)),
        user_agent=str(section.get("user_agent", "Auction-App-Backend")),
        publish_articles=_as_bool(section.get("publish_articles"), default=True),
        metafield_namespace=str(section.get("metafield_namespace", "auction")),
        secrets_file=_to_path(section.get("secrets_file")),
    )


def _build_polling(section: Mapping[str, Any]) -> PollingSettings:
    polling = PollingSettings(
        interval=float(section.get("interval", 1.0)),
        max_attempts=int(section.get("max_attempts", 60)),
        timeout=float(section.get("timeout", 120)),
    )
    if polling.interval < 0 or polling.max_attempts < 1 or polling.timeout <= 0:
        raise ValueError(
            "polling requires interval >= 0, max_attempts >= 1 and timeout > 0, "
            f"got {polling}"
        )
    return polling


def _build_server(section: Mapping[str, Any]) -> ServerSettings:
    origins = section.get("cors_origins", ["*"])
    if isinstance(origins, str):
        origins = [item.strip() for item in origins.split(",") if item.strip()]
    return ServerSettings(
        host=str(section.get("host", "127.0.0.1")),
        port=int(section.get("port", 8000)),
        cors_origins=list(origins),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingSettings:
    return LoggingSettings(
        structured=_as_bool(section.get("structured"), default=True),
        level=str(section.get("level", "INFO")).upper(),
    )


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load the TOML config; an explicitly named file must exist, the default may not."""
    path = _config_path(config_path)
    explicit = config_path is not None or bool(os.environ.get(CONFIG_ENV_VAR))
    data = _load_toml(path, required=explicit)
    environment = env if env is not None else os.environ

    return AppConfig(
        shopify=_build_shopify(data.get("shopify", {}), environment),
        polling=_build_polling(data.get("polling", {})),
        server=_build_server(data.get("server", {})),
        logging=_build_logging(data.get("logging", {})),
        source=path if path.exists() else None,
    )
