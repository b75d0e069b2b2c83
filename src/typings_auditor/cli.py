from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from .npm_registry import RegistryClient, RegistryFetchError, first_package_version_with_types
from .orchestrator import run_audit
from .path_mappings import PathMappingError
from .registry_loader import RegistryLoadError
from .settings import AuditSettings


def _build_settings(
    registry_url: Optional[str],
    timeout: Optional[float],
    retries: Optional[int],
    concurrency: Optional[int] = None,
    log_dir: Optional[str] = None,
) -> AuditSettings:
    settings = AuditSettings()
    if registry_url:
        settings.registry_url = registry_url if registry_url.endswith("/") else registry_url + "/"
    if timeout is not None:
        settings.timeout = timeout
    if retries is not None:
        settings.retries = retries
    if concurrency is not None:
        settings.concurrency = concurrency
    if log_dir:
        settings.log_dir = Path(log_dir)
    return settings


def _progress(message: str) -> None:
    click.echo(message, err=True)


@click.group()
def main() -> None:
    """Typings registry auditor CLI."""


@main.command()
@click.argument(
    "registry",
    type=click.Path(exists=True, path_type=str),
    default=".",
    required=False,
)
@click.option(
    "--offline/--online",
    default=True,
    show_default=True,
    help=(
        "Run only the path-mapping and duplicate-name audits by default. "
        "Redundancy checks against the npm registry run only with --online."
    ),
)
@click.option(
    "--registry-url",
    type=str,
    help="Override the npm registry (defaults to NPM_REGISTRY_URL env var or the public registry).",
)
@click.option(
    "--timeout",
    type=float,
    help="HTTP timeout (seconds) for registry lookups; defaults to NPM_REGISTRY_TIMEOUT or 8s.",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    help="Retries per registry lookup; defaults to NPM_REGISTRY_RETRIES or 3.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    help="Maximum registry lookups in flight; defaults to TYPINGS_AUDIT_CONCURRENCY or 10.",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=str),
    help="Directory that receives conflicts.md; defaults to TYPINGS_AUDIT_LOG_DIR or ./logs.",
)
@click.option("--print", "print_log", is_flag=True, help="Echo the conflict log after writing it.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary of findings on stdout.")
@click.option(
    "--fail-on-findings",
    is_flag=True,
    help="Exit non-zero when duplicates or redundant packages are reported.",
)
def check(
    registry: str,
    offline: bool,
    registry_url: Optional[str],
    timeout: Optional[float],
    retries: Optional[int],
    concurrency: Optional[int],
    log_dir: Optional[str],
    print_log: bool,
    json_output: bool,
    fail_on_findings: bool,
) -> None:
    """Audit a typings registry for path-mapping, duplicate-name and redundancy problems.

    Redundancy checks query the npm registry and run only with --online.
    """

    try:
        settings = _build_settings(registry_url, timeout, retries, concurrency, log_dir)
    except ValueError as exc:
        click.echo(f"error: {exc}", err=True)
        raise SystemExit(1)

    try:
        result = run_audit(
            Path(registry),
            include_npm_checks=not offline,
            settings=settings,
            progress=_progress,
        )
    except (PathMappingError, RegistryLoadError, RegistryFetchError) as exc:
        click.echo(f"error: {exc}", err=True)
        raise SystemExit(1)

    click.echo(f"Wrote {result.log_path}", err=True)

    if json_output:
        payload = {
            "log_path": str(result.log_path),
            "duplicates": [group.as_dict() for group in result.duplicates],
            "redundant": [finding.as_dict() for finding in result.redundant],
            "settings": settings.as_dict(),
        }
        click.echo(json.dumps(payload, indent=2))
    elif print_log:
        for line in result.lines:
            click.echo(line)

    if fail_on_findings and result.has_findings:
        raise SystemExit(1)


@main.command("has-types")
@click.argument("package_name")
@click.option("--registry-url", type=str, help="Override the npm registry URL.")
@click.option("--timeout", type=float, help="HTTP timeout (seconds) for the lookup.")
@click.option("--retries", type=click.IntRange(min=0), help="Retries for the lookup.")
def has_types(
    package_name: str,
    registry_url: Optional[str],
    timeout: Optional[float],
    retries: Optional[int],
) -> None:
    """Print the first published version of PACKAGE_NAME that ships its own types."""

    try:
        settings = _build_settings(registry_url, timeout, retries)
        with RegistryClient.from_settings(settings) as client:
            version = first_package_version_with_types(package_name, client)
    except (ValueError, RegistryFetchError) as exc:
        click.echo(f"error: {exc}", err=True)
        raise SystemExit(1)

    if version is None:
        click.echo(f"{package_name} does not ship its own types")
        raise SystemExit(1)
    click.echo(f"{package_name} ships its own types as of {version}")


if __name__ == "__main__":
    main()
