"""Capability provider interface and an in-memory implementation."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .exceptions import ConfigError
from .models import CapabilityList

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class CapabilityProvider(Protocol):
    """Anything that can list the resource kinds served at a group-version."""

    def fetch_resources(self, group_version: str) -> CapabilityList:
        """Return the kinds served at ``group_version``.

        Raises:
            Exception: any failure to answer; callers must not read it as
                "kind absent".
        """
        ...


class StaticProvider:
    """Provider backed by a fixed mapping of group-version to kinds.

    Unknown group-versions answer with an empty list. When ``error`` is set
    every query raises it instead. Queried identifiers are recorded in
    ``calls`` in order.
    """

    def __init__(
        self,
        results: Mapping[str, Iterable[str]] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.results = {gv: tuple(kinds) for gv, kinds in (results or {}).items()}
        self.error = error
        self.calls: list[str] = []

    def fetch_resources(self, group_version: str) -> CapabilityList:
        self.calls.append(group_version)
        if self.error is not None:
            raise self.error
        return CapabilityList.from_kinds(group_version, self.results.get(group_version, ()))

    @classmethod
    def from_file(cls, path: Path) -> "StaticProvider":
        """Load a discovery fixture.

        Each key is a group-version; values are either a list of kind names or an
        ``APIResourceList`` document.
        """

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Fixture not found: {path}", exc, error_code="fixture_missing") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Fixture is not valid JSON: {path}", exc, error_code="fixture_invalid") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Fixture must be a JSON object: {path}", error_code="fixture_invalid")

        results: dict[str, list[str]] = {}
        for group_version, entry in raw.items():
            results[group_version] = _fixture_kinds(group_version, entry)
        LOGGER.debug("Loaded %d group-versions from %s", len(results), path)
        return cls(results)


def _fixture_kinds(group_version: str, entry: Any) -> list[str]:
    if isinstance(entry, list):
        return [str(kind) for kind in entry]
    if isinstance(entry, dict):
        try:
            return CapabilityList.from_dict(entry, group_version=group_version).kinds()
        except ValueError as exc:
            raise ConfigError(
                f"Malformed resource list for {group_version}",
                exc,
                error_code="fixture_invalid",
                context={"group_version": group_version},
            ) from exc
    raise ConfigError(
        f"Unsupported fixture entry for {group_version}",
        error_code="fixture_invalid",
        context={"group_version": group_version},
    )


__all__ = ["CapabilityProvider", "StaticProvider"]
