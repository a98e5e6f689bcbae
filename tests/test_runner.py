from __future__ import annotations

import json
from pathlib import Path

import pytest

from apishape_app.exceptions import DiscoveryError, NoMatchError, ProbeError
from apishape_app.models import CapabilityList
from apishape_app.providers import StaticProvider
from apishape_app.runner import run_negotiation
from apishape_app.shapes import APIShape, known_shapes


class FlakyProvider:
    """Fails the first ``failures`` queries, then serves Ingress everywhere."""

    def __init__(self, failures: int, *, transient: bool = True) -> None:
        self.failures = failures
        self.transient = transient
        self.calls: list[str] = []

    def fetch_resources(self, group_version: str) -> CapabilityList:
        self.calls.append(group_version)
        if len(self.calls) <= self.failures:
            raise DiscoveryError("flaky", group_version=group_version, transient=self.transient)
        return CapabilityList.from_kinds(group_version, ["Ingress"])


def _events(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


def test_summary_and_event_stream(tmp_path: Path) -> None:
    provider = StaticProvider({"networking.k8s.io/v1beta1": ["Ingress"]})
    log_path = tmp_path / "logs" / "run.jsonl"

    summary = run_negotiation(provider=provider, candidates=known_shapes(), log_path=log_path)

    assert summary["status"] == "matched"
    assert summary["shape"] == "NETWORKING_V1BETA1"
    assert summary["identifier"] == "networking.k8s.io/v1beta1"
    assert summary["attempts"] == 1
    assert isinstance(summary["api_version"], str)

    names = [event["event"] for event in _events(log_path)]
    assert names[0] == "negotiation_start"
    assert "span_end" in names
    assert names[-1] == "negotiation_complete"


def test_transient_failures_rerun_whole_negotiation() -> None:
    provider = FlakyProvider(failures=1)

    summary = run_negotiation(
        provider=provider, candidates=[APIShape.NETWORKING_V1], retries=3, backoff_seconds=0
    )

    assert summary["attempts"] == 2
    assert provider.calls == ["networking.k8s.io/v1", "networking.k8s.io/v1"]


def test_retries_exhausted_reraises_probe_error() -> None:
    provider = FlakyProvider(failures=5)

    with pytest.raises(ProbeError):
        run_negotiation(provider=provider, candidates=[APIShape.NETWORKING_V1], retries=2, backoff_seconds=0)

    assert len(provider.calls) == 2


def test_permanent_failures_are_not_retried(tmp_path: Path) -> None:
    provider = FlakyProvider(failures=5, transient=False)
    log_path = tmp_path / "run.jsonl"

    with pytest.raises(ProbeError):
        run_negotiation(
            provider=provider,
            candidates=[APIShape.NETWORKING_V1],
            retries=3,
            backoff_seconds=0,
            log_path=log_path,
        )

    assert len(provider.calls) == 1
    failed = [event for event in _events(log_path) if event["event"] == "negotiation_failed"]
    assert failed[0]["error_code"] == "probe_failed"


def test_no_match_is_not_retried() -> None:
    provider = StaticProvider()

    with pytest.raises(NoMatchError):
        run_negotiation(provider=provider, candidates=known_shapes(), retries=3, backoff_seconds=0)

    assert len(provider.calls) == len(known_shapes())


def test_retries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        run_negotiation(provider=StaticProvider(), candidates=known_shapes(), retries=0)


def test_event_names_and_kind_are_written_verbatim(tmp_path: Path) -> None:
    provider = StaticProvider({"networking.k8s.io/v1": ["CustomResourceDefinition"]})
    log_path = tmp_path / "run.jsonl"

    run_negotiation(
        provider=provider,
        candidates=[APIShape.NETWORKING_V1],
        kind="CustomResourceDefinition",
        log_path=log_path,
    )

    events = _events(log_path)
    assert events[0]["event"] == "negotiation_start"
    assert events[0]["kind"] == "CustomResourceDefinition"
    assert events[-1]["event"] == "negotiation_complete"
    assert events[-1]["identifier"] == "networking.k8s.io/v1"


def test_retry_events_are_logged(tmp_path: Path) -> None:
    log_path = tmp_path / "run.jsonl"

    run_negotiation(
        provider=FlakyProvider(failures=2),
        candidates=[APIShape.NETWORKING_V1],
        retries=3,
        backoff_seconds=0,
        log_path=log_path,
    )

    retries = [event for event in _events(log_path) if event["event"] == "negotiation_retry"]
    assert [event["attempt"] for event in retries] == [1, 2]
