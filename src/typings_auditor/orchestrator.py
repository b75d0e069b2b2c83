from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from .conflict_log import ConflictLog, write_log
from .duplicates import (
    LIBRARY_NAME_LABEL,
    PROJECT_NAME_LABEL,
    check_for_duplicates,
    library_name,
    project_name,
)
from .npm_registry import RegistryClient
from .package_graph import PackageGraph
from .parallel import n_at_a_time
from .path_mappings import check_path_mappings
from .redundancy import check_npm
from .registry_loader import load_registry
from .settings import AuditSettings
from .types_findings import AuditResult
from .types_packages import TypingsPackage

Progress = Callable[[str], None]


def _quiet(_message: str) -> None:
    return None


def audit_graph(
    graph: PackageGraph,
    include_npm_checks: bool,
    settings: Optional[AuditSettings] = None,
    client: Optional[RegistryClient] = None,
    log: Optional[ConflictLog] = None,
    progress: Progress = _quiet,
) -> AuditResult:
    """Run every audit over an already-built graph without persisting the log.

    Path-mapping violations raise; everything else is collected in ``log``.
    """

    settings = settings or AuditSettings()
    log = log if log is not None else ConflictLog()

    progress("Checking path mappings...")
    check_path_mappings(graph)

    packages = graph.all_packages()
    progress("Checking for duplicate names...")
    duplicates = check_for_duplicates(packages, library_name, LIBRARY_NAME_LABEL, log)
    duplicates += check_for_duplicates(packages, project_name, PROJECT_NAME_LABEL, log)

    result = AuditResult(duplicates=duplicates)

    if include_npm_checks:
        depended_on = graph.depended_on()
        owned = client is None
        registry = RegistryClient.from_settings(settings) if owned else client
        typings = graph.all_typings()
        progress(f"Checking {len(typings)} packages for upstream types...")

        def _check(pkg: TypingsPackage):
            return check_npm(pkg, log, depended_on, registry)

        try:
            findings = n_at_a_time(settings.concurrency, typings, _check)
        finally:
            if owned:
                registry.close()
        result.redundant = [finding for finding in findings if finding is not None]

    result.lines = log.lines
    return result


def run_audit(
    registry_path: Path,
    include_npm_checks: bool = True,
    settings: Optional[AuditSettings] = None,
    client: Optional[RegistryClient] = None,
    progress: Progress = _quiet,
) -> AuditResult:
    """Load the registry, audit it and write ``conflicts.md``."""

    settings = settings or AuditSettings()
    progress(f"Loading packages from {registry_path}...")
    graph = load_registry(registry_path)
    log = ConflictLog()
    result = audit_graph(
        graph,
        include_npm_checks,
        settings=settings,
        client=client,
        log=log,
        progress=progress,
    )
    result.log_path = write_log(log, settings.log_dir)
    return result
