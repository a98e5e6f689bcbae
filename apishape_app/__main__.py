"""CLI entry point for API shape discovery and negotiation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click

from .capability import supports_kind
from .config import AppConfig, parse_candidates
from .exceptions import ConfigError, DiscoveryError, NoMatchError, ProbeError
from .net import HTTPDiscoveryProvider
from .providers import CapabilityProvider, StaticProvider
from .runner import run_negotiation
from .shapes import identifier_of, known_shapes

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

EXIT_NO_MATCH = 1
EXIT_PROVIDER_ERROR = 3


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()), format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )


def _echo_json(payload: Any, *, indent: int | None = 2) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=indent))


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set the logging verbosity.",
)
@click.option("--server", default=None, help="API server base URL (env: APISHAPE_SERVER).")
@click.option("--token", default=None, help="Bearer token (env: APISHAPE_TOKEN).")
@click.option("--timeout", default=None, type=int, help="HTTP timeout in seconds.")
@click.option("--ca-bundle", default=None, help="CA bundle used to verify the server.")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification.")
@click.option(
    "--fixture",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Answer discovery queries from a JSON fixture instead of a server.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str,
    server: str | None,
    token: str | None,
    timeout: int | None,
    ca_bundle: str | None,
    insecure: bool,
    fixture: Path | None,
) -> None:
    """Command-line interface for apishape_app."""

    _configure_logging(log_level)
    try:
        config = AppConfig.from_env()
    except ConfigError as exc:
        raise click.UsageError(exc.message) from exc

    if server:
        config.discovery.server = server
    if token:
        config.discovery.token = token
    if timeout is not None:
        if timeout < 1:
            raise click.BadParameter("--timeout must be >= 1")
        config.network.timeout = timeout
    if ca_bundle:
        config.network.ca_bundle = ca_bundle
    if insecure:
        config.network.verify = False

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["fixture"] = fixture


def _build_provider(ctx: click.Context) -> CapabilityProvider:
    config: AppConfig = ctx.obj["config"]
    fixture: Path | None = ctx.obj["fixture"]
    if fixture is not None:
        try:
            return StaticProvider.from_file(fixture)
        except ConfigError as exc:
            raise click.UsageError(exc.message) from exc
    if not config.discovery.server:
        raise click.UsageError("Either --server (or APISHAPE_SERVER) or --fixture is required")
    logging.getLogger(__name__).debug("configuration=%s", config.describe())
    return HTTPDiscoveryProvider(
        config.discovery.server,
        token=config.discovery.token,
        timeout=config.network.timeout,
        verify=config.network.tls_verify,
        user_agent=config.network.user_agent,
    )


@cli.command()
def shapes() -> None:
    """List known API shapes in default priority order."""

    _echo_json([{"shape": shape.name, "identifier": identifier_of(shape)} for shape in known_shapes()])


@cli.command()
@click.argument("group_version")
@click.pass_context
def resources(ctx: click.Context, group_version: str) -> None:
    """Print the resource kinds served at GROUP_VERSION."""

    provider = _build_provider(ctx)
    try:
        capabilities = provider.fetch_resources(group_version)
    except DiscoveryError as exc:
        _echo_json({"error": exc.error_code, "message": exc.message})
        ctx.exit(EXIT_PROVIDER_ERROR)
    _echo_json(capabilities.to_dict())


@cli.command()
@click.argument("group_version")
@click.argument("kind")
@click.pass_context
def supports(ctx: click.Context, group_version: str, kind: str) -> None:
    """Report whether KIND is served at GROUP_VERSION."""

    provider = _build_provider(ctx)
    try:
        found = supports_kind(provider, group_version, kind)
    except DiscoveryError as exc:
        _echo_json({"error": exc.error_code, "message": exc.message})
        ctx.exit(EXIT_PROVIDER_ERROR)
    _echo_json({"groupVersion": group_version, "kind": kind, "supported": found})


@cli.command()
@click.option(
    "--candidate",
    "candidate_names",
    multiple=True,
    help="Candidate shape in priority order (identifier or name). Can be provided multiple times.",
)
@click.option("--kind", default=None, help="Resource kind to look for (default: Ingress).")
@click.option("--retries", default=None, type=int, help="Whole-negotiation attempts on transient failures.")
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Structured JSON-lines log emitted by the run.",
)
@click.option("--compact", is_flag=True, help="Emit JSON in a single line.")
@click.pass_context
def negotiate(
    ctx: click.Context,
    candidate_names: tuple[str, ...],
    kind: str | None,
    retries: int | None,
    log_file: Path | None,
    compact: bool,
) -> None:
    """Select the first candidate shape the service serves the kind under."""

    config: AppConfig = ctx.obj["config"]
    if retries is not None:
        if retries < 1:
            raise click.BadParameter("--retries must be >= 1")
        config.network.max_retries = retries
    if candidate_names:
        try:
            config.discovery.candidates = parse_candidates(candidate_names)
        except ConfigError as exc:
            raise click.BadParameter(exc.message) from exc
    if kind:
        config.discovery.kind = kind

    provider = _build_provider(ctx)
    indent = None if compact else 2
    try:
        summary = run_negotiation(
            provider=provider,
            candidates=config.discovery.candidates,
            kind=config.discovery.kind,
            retries=config.network.max_retries,
            backoff_seconds=config.network.backoff_seconds,
            log_path=log_file,
        )
    except NoMatchError as exc:
        _echo_json(
            {"status": "no_match", "shape": exc.shape.name, "kind": exc.kind, "attempted": exc.context["attempted"]},
            indent=indent,
        )
        ctx.exit(EXIT_NO_MATCH)
    except ProbeError as exc:
        _echo_json(
            {
                "status": "probe_failed",
                "shape": exc.shape.name,
                "candidate": exc.identifier,
                "message": exc.message,
            },
            indent=indent,
        )
        ctx.exit(EXIT_PROVIDER_ERROR)
    _echo_json(summary, indent=indent)


if __name__ == "__main__":
    cli()
