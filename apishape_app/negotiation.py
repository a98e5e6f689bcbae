"""Pick the first API shape, in caller priority order, that serves a kind."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .capability import supports_kind
from .exceptions import NoMatchError, ProbeError
from .providers import CapabilityProvider
from .shapes import APIShape, identifier_of

LOGGER = logging.getLogger(__name__)

DEFAULT_KIND = "Ingress"


def negotiate(
    provider: CapabilityProvider,
    candidates: Sequence[APIShape],
    kind: str = DEFAULT_KIND,
) -> APIShape:
    """Return the first candidate whose group-version serves ``kind``.

    Candidates are probed one at a time in the given order. A provider failure
    stops the negotiation at once with ``ProbeError``; later candidates are not
    probed. If every probe succeeds without a match (or there are no
    candidates) ``NoMatchError`` lists everything that was tried. Both errors
    report ``APIShape.UNKNOWN`` as their ``shape``.
    """

    candidates = tuple(candidates)
    if APIShape.UNKNOWN in candidates:
        raise ValueError("APIShape.UNKNOWN cannot be negotiated")

    for candidate in candidates:
        identifier = identifier_of(candidate)
        try:
            found = supports_kind(provider, identifier, kind)
        except Exception as exc:
            raise ProbeError(candidate, identifier, exc) from exc
        if found:
            LOGGER.debug("%s served at %s", kind, identifier)
            return candidate
        LOGGER.debug("%s not served at %s", kind, identifier)

    raise NoMatchError(kind, candidates)


__all__ = ["DEFAULT_KIND", "negotiate"]
