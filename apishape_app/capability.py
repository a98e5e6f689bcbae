"""Membership check of a resource kind within one group-version."""

from __future__ import annotations

from .providers import CapabilityProvider


def supports_kind(provider: CapabilityProvider, group_version: str, kind: str) -> bool:
    """Return True iff the provider serves ``kind`` at ``group_version``.

    Provider errors propagate unchanged. A group-version the provider knows
    nothing about yields an empty list and therefore False. Matching is exact
    and case-sensitive.
    """

    capabilities = provider.fetch_resources(group_version)
    return any(item.kind == kind for item in capabilities.resources)


__all__ = ["supports_kind"]
