"""Application configuration for API shape negotiation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ConfigError
from .negotiation import DEFAULT_KIND
from .net import DEFAULT_UA
from .obs import sanitize
from .shapes import APIShape, known_shapes, parse_shape

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class NetworkConfig:
    """Network related configuration."""

    user_agent: str = DEFAULT_UA
    timeout: int = 10
    verify: bool = True
    ca_bundle: str | None = None
    max_retries: int = 3
    backoff_seconds: float = 1.0

    @property
    def tls_verify(self) -> bool | str:
        """Value handed to ``requests`` for certificate verification."""

        if not self.verify:
            return False
        return self.ca_bundle or True


@dataclass
class DiscoveryConfig:
    """Where to discover and what to look for."""

    server: str | None = None
    token: str | None = None
    kind: str = DEFAULT_KIND
    candidates: list[APIShape] = field(default_factory=lambda: list(known_shapes()))


@dataclass
class AppConfig:
    """Top level configuration container."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    @classmethod
    def create_default(cls) -> "AppConfig":
        """Create a default configuration instance."""

        return cls()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a configuration from ``APISHAPE_*`` environment variables."""

        env = os.environ if environ is None else environ
        config = cls.create_default()

        config.discovery.server = env.get("APISHAPE_SERVER") or None
        config.discovery.token = env.get("APISHAPE_TOKEN") or None
        config.discovery.kind = env.get("APISHAPE_KIND") or config.discovery.kind
        raw_candidates = env.get("APISHAPE_CANDIDATES")
        if raw_candidates:
            config.discovery.candidates = parse_candidates(raw_candidates.split(","))

        config.network.ca_bundle = env.get("APISHAPE_CA_BUNDLE") or None
        config.network.verify = env.get("APISHAPE_INSECURE", "").strip().lower() not in _TRUTHY
        config.network.timeout = _positive_int(env, "APISHAPE_TIMEOUT", config.network.timeout)
        config.network.max_retries = _positive_int(env, "APISHAPE_RETRIES", config.network.max_retries)
        return config

    def describe(self) -> dict[str, Any]:
        """Return a log-safe view of the configuration."""

        return sanitize(
            {
                "server": self.discovery.server,
                "token": self.discovery.token,
                "kind": self.discovery.kind,
                "candidates": [str(shape) for shape in self.discovery.candidates],
                "timeout": self.network.timeout,
                "verify": self.network.tls_verify,
                "max_retries": self.network.max_retries,
            }
        )


def parse_candidates(values: list[str] | tuple[str, ...]) -> list[APIShape]:
    """Parse candidate names in priority order, raising ``ConfigError`` on unknown ones."""

    candidates: list[APIShape] = []
    for item in values:
        if not item.strip():
            continue
        try:
            candidates.append(parse_shape(item))
        except ValueError as exc:
            raise ConfigError(str(exc), exc, error_code="invalid_candidate") from exc
    return candidates


def _positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer", exc, error_code="invalid_env") from exc
    if value < 1:
        raise ConfigError(f"{key} must be >= 1", error_code="invalid_env")
    return value
