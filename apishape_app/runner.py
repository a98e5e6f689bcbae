"""Caller-level orchestration: retries, structured events and run summaries."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import tenacity

from .contracts import API_VERSION
from .exceptions import NegotiationError, ProbeError
from .negotiation import DEFAULT_KIND, negotiate
from .obs import LogEvent, metric, open_event_stream, span
from .providers import CapabilityProvider
from .shapes import APIShape, identifier_of

LOGGER = logging.getLogger(__name__)


def _is_transient_probe_failure(exc: BaseException) -> bool:
    return isinstance(exc, ProbeError) and exc.transient


def _negotiate_with_retry(
    provider: CapabilityProvider,
    candidates: Sequence[APIShape],
    kind: str,
    *,
    retries: int,
    backoff_seconds: float,
    log_event: LogEvent,
) -> tuple[APIShape, int]:
    """Run the whole negotiation again while the failure is a transient probe error."""

    def _before_sleep(state: tenacity.RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        LOGGER.warning("Negotiation attempt %d failed: %s; retrying", state.attempt_number, exc)
        log_event(
            {
                "event": "negotiation_retry",
                "attempt": state.attempt_number,
                "error": str(exc),
            }
        )

    attempts = 0

    def _attempt() -> APIShape:
        nonlocal attempts
        attempts += 1
        return negotiate(provider, candidates, kind)

    retrying = tenacity.Retrying(
        wait=tenacity.wait_exponential(multiplier=backoff_seconds, min=backoff_seconds),
        stop=tenacity.stop_after_attempt(retries),
        retry=tenacity.retry_if_exception(_is_transient_probe_failure),
        before_sleep=_before_sleep,
        reraise=True,
    )
    shape = retrying(_attempt)
    return shape, attempts


def run_negotiation(
    *,
    provider: CapabilityProvider,
    candidates: Sequence[APIShape],
    kind: str = DEFAULT_KIND,
    retries: int = 1,
    backoff_seconds: float = 1.0,
    log_path: Path | None = None,
) -> dict[str, Any]:
    """Negotiate an API shape and return a machine-readable summary.

    Only transient provider failures trigger another full negotiation; a
    ``NoMatchError`` or a permanent probe failure is raised on the first attempt.
    """

    if retries < 1:
        raise ValueError("retries must be >= 1")

    log_event = open_event_stream(log_path)
    run_id = str(uuid.uuid4())
    tried = [identifier_of(shape) for shape in candidates]
    log_event({"event": "negotiation_start", "run_id": run_id, "kind": kind, "candidates": tried})

    try:
        with span("negotiate", log_event, attrs={"kind": kind, "candidates": len(tried)}):
            try:
                shape, attempts = _negotiate_with_retry(
                    provider,
                    candidates,
                    kind,
                    retries=retries,
                    backoff_seconds=backoff_seconds,
                    log_event=log_event,
                )
            except NegotiationError as exc:
                exc.log_error(LOGGER)
                log_event(
                    {
                        "event": "negotiation_failed",
                        "run_id": run_id,
                        "error_code": exc.error_code,
                        "context": exc.context,
                    }
                )
                raise

        metric("negotiation_attempts", log_event, value=attempts, tags={"kind": kind})
        summary: dict[str, Any] = {
            "api_version": API_VERSION,
            "run_id": run_id,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "status": "matched",
            "kind": kind,
            "candidates": tried,
            "shape": shape.name,
            "identifier": identifier_of(shape),
            "attempts": attempts,
        }
        LOGGER.info("%s negotiated at %s", kind, summary["identifier"])
        log_event({"event": "negotiation_complete", "run_id": run_id, "identifier": summary["identifier"]})
        return summary
    finally:
        closer = getattr(log_event, "close", None)
        if callable(closer):  # pragma: no branch - trivial guard
            closer()


__all__ = ["run_negotiation"]
