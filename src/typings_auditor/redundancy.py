from __future__ import annotations

from typing import AbstractSet, List, Optional

from .conflict_log import ConflictLog
from .npm_registry import RegistryClient, first_package_version_with_types
from .versions import major_minor_at_least
from .types_findings import RedundancyFinding
from .types_packages import Contributor, TypingsPackage

GITHUB_PREFIX = "https://github.com/"


def format_contributor(contributor: Contributor) -> str:
    if contributor.url.startswith(GITHUB_PREFIX):
        return "@" + contributor.url[len(GITHUB_PREFIX):]
    return f"{contributor.name} ({contributor.url})"


def remediation_lines(
    pkg: TypingsPackage,
    as_of_version: str,
    our_version_is_newer: bool,
    depended_on: bool,
) -> List[str]:
    name = pkg.name
    library_name = pkg.library_name or name
    project_name = pkg.project_name or ""
    contributors = ", ".join(format_contributor(c) for c in pkg.contributors)
    library_arg = library_name if library_name != name else ""

    lines = [
        "",
        f"Typings already defined for {name} ({library_name}) as of {as_of_version} "
        f"(our version: {pkg.version})",
        f"git checkout -b not-needed-{name}",
        f"yarn not-needed -- {name} {as_of_version} {project_name} {library_arg}",
        f'git add --all && git commit -m "{name}: Provides its own types"',
        f"git push -u origin not-needed-{name}",
        f"This will deprecate `@types/{name}` in favor of just `{name}`. CC {contributors}",
    ]
    if our_version_is_newer:
        lines.append("WARNING: our version is greater!")
    if depended_on:
        lines.append("WARNING: other packages depend on this")
    return lines


def check_npm(
    pkg: TypingsPackage,
    log: ConflictLog,
    depended_on: AbstractSet[str],
    client: Optional[RegistryClient] = None,
) -> Optional[RedundancyFinding]:
    """Report ``pkg`` if its upstream package now ships type declarations."""

    as_of_version = first_package_version_with_types(pkg.name, client)
    if as_of_version is None:
        return None

    finding = RedundancyFinding(
        package=pkg,
        as_of_version=as_of_version,
        our_version_is_newer=major_minor_at_least(pkg.major, pkg.minor, as_of_version),
        depended_on=pkg.name in depended_on,
    )
    log.extend(
        remediation_lines(pkg, as_of_version, finding.our_version_is_newer, finding.depended_on)
    )
    return finding
