"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import aiohttp

from .exceptions import ConfigError
from .storage import DEFAULT_NAMESPACE
from .validation import ALL_CONSENTS

DEFAULT_TIMEOUT_SECONDS = 30.0
CONTRACT_TIMEOUT_SECONDS = 60.0

ENV_BASE_URL = "CAMP_API_BASE_URL"
ENV_API_URI = "CAMP_API_URI"
ENV_TIMEOUT = "CAMP_API_TIMEOUT"
ENV_RETRY_COUNT = "CAMP_API_RETRY_COUNT"
ENV_DRAFT_NAMESPACE = "CAMP_DRAFT_NAMESPACE"
ENV_DRAFT_PATH = "CAMP_DRAFT_PATH"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    base_url: str | None = None
    api_uri: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retry_count: int = 0
    draft_namespace: str = DEFAULT_NAMESPACE
    draft_path: str | None = None
    required_consents: tuple[str, ...] = ALL_CONSENTS

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigError("timeout must be a positive number of seconds.")
        if self.retry_count < 0:
            raise ConfigError("retry_count must not be negative.")
        if not self.draft_namespace:
            raise ConfigError("draft_namespace must be a non-empty string.")
        unknown = [name for name in self.required_consents if name not in ALL_CONSENTS]
        if unknown:
            raise ConfigError(f"Unknown consents: {', '.join(unknown)}.")

    @property
    def client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from ``CAMP_*`` environment variables."""
        env = os.environ if environ is None else environ
        timeout = _parse_float(env.get(ENV_TIMEOUT), ENV_TIMEOUT, DEFAULT_TIMEOUT_SECONDS)
        retry_count = _parse_int(env.get(ENV_RETRY_COUNT), ENV_RETRY_COUNT, 0)
        return cls(
            base_url=_optional(env.get(ENV_BASE_URL)),
            api_uri=_optional(env.get(ENV_API_URI)),
            timeout=timeout,
            retry_count=retry_count,
            draft_namespace=_optional(env.get(ENV_DRAFT_NAMESPACE)) or DEFAULT_NAMESPACE,
            draft_path=_optional(env.get(ENV_DRAFT_PATH)),
        )


def _optional(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_float(value: str | None, name: str, default: float) -> float:
    if _optional(value) is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number.") from exc


def _parse_int(value: str | None, name: str, default: int) -> int:
    if _optional(value) is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer.") from exc
