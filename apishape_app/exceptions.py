"""Error taxonomy for API shape discovery and negotiation."""

from __future__ import annotations

import logging
import re
import traceback
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from .shapes import APIShape


class ShapeError(Exception):
    """Base application error with standardized fields and safe messaging."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        *,
        error_code: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.original_error = original_error
        self.error_code = error_code
        self.timestamp = datetime.now()
        self.context = dict(context or {})
        self.traceback = traceback.format_exc() if original_error else None
        super().__init__(self.get_error_message())

    def get_error_message(self) -> str:
        base_msg = f"[{self.error_code}] {self.message}" if self.error_code else self.message
        if self.original_error:
            return f"{base_msg} (caused by {self.original_error.__class__.__name__})"
        return base_msg

    def log_error(self, logger: logging.Logger) -> None:
        payload = {
            "event": "error",
            "timestamp": self.timestamp.isoformat(),
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }
        logger.error("%s", payload)
        if self.traceback:
            logger.debug("traceback=%s", self.traceback)


class ConfigError(ShapeError):
    """Configuration or environment error (e.g., malformed timeout)."""


class DiscoveryError(ShapeError):
    """A capability provider could not answer a discovery query."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        *,
        group_version: str,
        status_code: int | None = None,
        transient: bool = False,
    ) -> None:
        self.group_version = group_version
        self.status_code = status_code
        self.transient = transient
        super().__init__(
            message,
            original_error,
            error_code="discovery_failed",
            context={"group_version": group_version, "status_code": status_code},
        )


class NegotiationError(ShapeError):
    """Terminal outcome of a negotiation that did not select a shape."""

    @property
    def shape(self) -> APIShape:
        return APIShape.UNKNOWN


class ProbeError(NegotiationError):
    """Probing one candidate failed; the negotiation stops there."""

    def __init__(self, candidate: APIShape, identifier: str, original_error: Exception) -> None:
        self.candidate = candidate
        self.identifier = identifier
        super().__init__(
            f"supports_kind({identifier}) failed: {original_error}",
            original_error,
            error_code="probe_failed",
            context={"candidate": candidate.name, "identifier": identifier},
        )

    @property
    def transient(self) -> bool:
        return bool(getattr(self.original_error, "transient", False))


class NoMatchError(NegotiationError):
    """Every candidate was probed and none exposes the requested kind."""

    def __init__(self, kind: str, attempted: Sequence[APIShape]) -> None:
        self.kind = kind
        self.attempted = tuple(attempted)
        tried = [str(shape) for shape in self.attempted]
        super().__init__(
            f"no suitable {kind} API found, tried: {tried}",
            error_code="no_match",
            context={"kind": kind, "attempted": tried},
        )


def redact(text: str) -> str:
    """Redact potentially sensitive tokens from text.

    Long alphanumeric sequences that resemble bearer tokens are masked; URLs and
    short tokens such as group-version identifiers are left intact.
    """

    def _mask(match: re.Match[str]) -> str:
        token = match.group(0)
        return token[:4] + "…" + token[-2:]

    return re.sub(r"[A-Za-z0-9_\-]{20,}", _mask, text or "")
