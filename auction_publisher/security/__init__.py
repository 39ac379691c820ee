"""Security utilities package."""

from __future__ import annotations

from .credential_provider import (
    ChainedSecretProvider,
    SecretNotFoundError,
    SecretProvider,
    default_secret_provider,
    resolve_access_token,
)

__all__ = [
    "ChainedSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
    "default_secret_provider",
    "resolve_access_token",
]
