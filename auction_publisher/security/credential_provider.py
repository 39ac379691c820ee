"""Interfaces and basic implementations for secret resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod
from configparser import ConfigParser
from os import environ
from pathlib import Path
from typing import Iterable, Mapping

ACCESS_TOKEN_KEY = "shopify.access_token"


class SecretNotFoundError(KeyError):
    """Raised when a secret cannot be resolved."""


class SecretProvider(ABC):
    """Abstract secret lookup contract."""

    @abstractmethod
    def get_secret(self, key: str) -> str:
        """Return the secret associated with ``key``."""


class EnvSecretProvider(SecretProvider):
    """Reads secrets from environment variables, ``shopify.access_token`` -> ``SHOPIFY_ACCESS_TOKEN``."""

    def __init__(self, prefix: str = "", *, env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else environ
        self._prefix = prefix

    def get_secret(self, key: str) -> str:
        compound = f"{self._prefix}{key}" if self._prefix else key
        value = self._env.get(compound.upper().replace(".", "_"))
        if not value:
            raise SecretNotFoundError(compound)
        return value


class FileSecretProvider(SecretProvider):
    """Loads secrets from INI-style files (``[shopify]`` / ``access_token = ...``)."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._parser = ConfigParser()
        if path.exists():
            self._parser.read(path, encoding="utf-8")

    def get_secret(self, key: str) -> str:
        section, _, option = key.partition(".")
        if not section or not option:
            raise SecretNotFoundError(key)
        if self._parser.has_option(section, option):
            value = self._parser.get(section, option).strip()
            if value:
                return value
        raise SecretNotFoundError(key)


class MappingSecretProvider(SecretProvider):
    """Wraps a simple dictionary for testing."""

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self._mapping = mapping

    def get_secret(self, key: str) -> str:
        try:
            return self._mapping[key]
        except KeyError as exc:
            raise SecretNotFoundError(key) from exc


class ChainedSecretProvider(SecretProvider):
    """Tries multiple providers until one returns a secret."""

    def __init__(self, providers: Iterable[SecretProvider]) -> None:
        self._providers = tuple(providers)

    def get_secret(self, key: str) -> str:
        for provider in self._providers:
            try:
                return provider.get_secret(key)
            except SecretNotFoundError:
                continue
        raise SecretNotFoundError(key)


def default_secret_provider(secrets_file: Path | None = None) -> SecretProvider:
    """Environment first, then the optional INI secrets file."""
    providers: list[SecretProvider] = [EnvSecretProvider()]
    if secrets_file is not None:
        providers.append(FileSecretProvider(secrets_file))
    return ChainedSecretProvider(providers)


def resolve_access_token(provider: SecretProvider) -> str:
    """Resolve the single Admin API access token used for every remote call."""
    try:
        return provider.get_secret(ACCESS_TOKEN_KEY)
    except SecretNotFoundError as exc:
        raise SecretNotFoundError(
            f"Missing Shopify access token; set SHOPIFY_ACCESS_TOKEN or [{ACCESS_TOKEN_KEY}]"
        ) from exc


__all__ = [
    "ACCESS_TOKEN_KEY",
    "ChainedSecretProvider",
    "EnvSecretProvider",
    "FileSecretProvider",
    "MappingSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
    "default_secret_provider",
    "resolve_access_token",
]
