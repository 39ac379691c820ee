"""Settings package exports."""

from .loader import (
    AppConfig,
    LoggingSettings,
    PollingSettings,
    ServerSettings,
    ShopifySettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "LoggingSettings",
    "PollingSettings",
    "ServerSettings",
    "ShopifySettings",
    "load_config",
]
