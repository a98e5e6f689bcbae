"""Data models for discovery responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass(frozen=True)
class ResourceDescriptor:
    """One resource kind served at a group-version."""

    kind: str
    name: str = ""
    namespaced: bool = False
    verbs: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResourceDescriptor":
        return cls(
            kind=str(data.get("kind", "")),
            name=str(data.get("name", "")),
            namespaced=bool(data.get("namespaced", False)),
            verbs=tuple(data.get("verbs", []) or ()),
        )

    @property
    def is_subresource(self) -> bool:
        return "/" in self.name


@dataclass(frozen=True)
class CapabilityList:
    """Resource kinds a service reports for a single group-version."""

    group_version: str
    resources: tuple[ResourceDescriptor, ...] = field(default_factory=tuple)

    @classmethod
    def from_kinds(cls, group_version: str, kinds: Iterable[str]) -> "CapabilityList":
        return cls(group_version, tuple(ResourceDescriptor(kind=kind) for kind in kinds))

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, group_version: str | None = None) -> "CapabilityList":
        """Build from a Kubernetes ``APIResourceList`` document.

        Sub-resources such as ``ingresses/status`` are dropped; they repeat the
        parent's kind and are not addressable on their own. Raises ``ValueError``
        when ``resources`` is not a list of objects.
        """

        raw_resources = data.get("resources", []) or []
        if not isinstance(raw_resources, list) or not all(isinstance(item, dict) for item in raw_resources):
            raise ValueError("resources must be a list of objects")
        resources = [ResourceDescriptor.from_dict(item) for item in raw_resources]
        return cls(
            group_version=group_version or str(data.get("groupVersion", "")),
            resources=tuple(item for item in resources if not item.is_subresource),
        )

    def kinds(self) -> list[str]:
        return [item.kind for item in self.resources]

    def to_dict(self) -> dict[str, Any]:
        return {"groupVersion": self.group_version, "kinds": self.kinds()}
