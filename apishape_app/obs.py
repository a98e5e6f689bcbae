"""Structured run events for negotiations, plus redaction of logged configuration.

It provides:
- A JSON-lines event stream
- A span context manager that logs start/end with timing
- A sanitizer that redacts sensitive fields
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .exceptions import redact

LogEvent = Callable[[dict[str, Any]], None]


_SAFE_KEYS = {"server", "url", "identifier", "group_version", "run_id", "timestamp"}


def _should_redact_key(key: str) -> bool:
    key_l = key.lower()
    return any(tok in key_l for tok in ("password", "secret", "token", "credential", "authorization", "key"))


def sanitize(obj: Any) -> Any:
    """Recursively sanitize payloads by redacting sensitive tokens.

    - Redacts values for keys that look sensitive
    - Applies token redaction to long alphanumeric strings
    """

    if isinstance(obj, dict):
        result: dict[str, Any] = {}
        for k, v in obj.items():
            if str(k).lower() in _SAFE_KEYS:
                result[k] = v
            elif _should_redact_key(str(k)):
                if v is None:
                    result[k] = None
                elif isinstance(v, str):
                    result[k] = redact(v) if len(v) >= 20 else "<redacted>"
                else:
                    result[k] = "<redacted>"
            else:
                result[k] = sanitize(v)
        return result
    if isinstance(obj, list):
        return [sanitize(x) for x in obj]
    if isinstance(obj, str):
        return redact(obj)
    return obj


def open_event_stream(log_path: Path | None) -> LogEvent:
    """Return an emitter writing one JSON object per line to ``log_path``.

    With no path the emitter discards events. The emitter exposes ``close``.
    """

    if log_path is None:

        def _discard(payload: dict[str, Any]) -> None:  # noqa: ARG001
            return None

        _discard.close = lambda: None  # type: ignore[attr-defined]
        return _discard

    log_path.parent.mkdir(parents=True, exist_ok=True)
    handle = log_path.open("a", encoding="utf-8")

    def _emit(payload: dict[str, Any]) -> None:
        payload = dict(payload)
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        handle.write(json.dumps(payload, ensure_ascii=False))
        handle.write("\n")
        handle.flush()

    _emit.close = handle.close  # type: ignore[attr-defined]
    return _emit


@contextmanager
def span(
    name: str,
    log: LogEvent,
    *,
    attrs: Mapping[str, Any] | None = None,
) -> Any:
    """Minimal span that logs start/end with elapsed time in ms.

    Usage:
        with span("negotiate", log_event, attrs={"kind": "Ingress"}):
            ...
    """

    start = time.monotonic()
    payload: dict[str, Any] = {"event": "span_start", "name": name}
    if attrs:
        payload["attrs"] = dict(attrs)
    log(payload)
    try:
        yield
    finally:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        log({"event": "span_end", "name": name, "ms": elapsed_ms})


def metric(name: str, log: LogEvent, *, kind: str = "counter", value: int | float = 1, tags: Mapping[str, Any] | None = None) -> None:
    """Emit a simple metric event via the structured log stream."""

    payload: dict[str, Any] = {"event": "metric", "name": name, "kind": kind, "value": value}
    if tags:
        payload["tags"] = dict(tags)
    log(payload)
