"""Known API shapes of the Ingress resource family and their identifiers."""

from __future__ import annotations

from enum import Enum

UNKNOWN_IDENTIFIER = "unknown API"


class APIShape(Enum):
    """Closed set of schema revisions a service may serve.

    ``UNKNOWN`` is the sentinel attached to failed negotiations; it has no
    group-version and must never be sent to a capability provider.
    """

    UNKNOWN = 0
    NETWORKING_V1 = 1
    NETWORKING_V1BETA1 = 2
    EXTENSIONS_V1BETA1 = 3

    def __str__(self) -> str:
        return identifier_of(self)


# Registry order doubles as the default negotiation priority (newest first).
_IDENTIFIERS: dict[APIShape, str] = {
    APIShape.NETWORKING_V1: "networking.k8s.io/v1",
    APIShape.NETWORKING_V1BETA1: "networking.k8s.io/v1beta1",
    APIShape.EXTENSIONS_V1BETA1: "extensions/v1beta1",
}


def identifier_of(shape: APIShape) -> str:
    """Return the group-version identifier used to query a provider for ``shape``."""

    return _IDENTIFIERS.get(shape, UNKNOWN_IDENTIFIER)


def known_shapes() -> tuple[APIShape, ...]:
    return tuple(_IDENTIFIERS)


def parse_shape(text: str) -> APIShape:
    """Resolve a group-version identifier or member name into a known shape."""

    value = (text or "").strip()
    for shape, identifier in _IDENTIFIERS.items():
        if value == identifier or value.upper() == shape.name:
            return shape
    known = ", ".join(_IDENTIFIERS.values())
    raise ValueError(f"Unsupported API shape '{text}'. Available: {known}")


__all__ = ["APIShape", "UNKNOWN_IDENTIFIER", "identifier_of", "known_shapes", "parse_shape"]
