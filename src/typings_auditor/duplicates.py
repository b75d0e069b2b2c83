from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .types_findings import DuplicateGroup
from .types_packages import AnyPackage

Logger = Callable[[str], None]

LIBRARY_NAME_LABEL = "Library Name"
PROJECT_NAME_LABEL = "Project Name"


def library_name(pkg: AnyPackage) -> Optional[str]:
    return pkg.library_name


def project_name(pkg: AnyPackage) -> Optional[str]:
    return pkg.project_name


def check_for_duplicates(
    packages: Iterable[AnyPackage],
    name_selector: Callable[[AnyPackage], Optional[str]],
    label: str,
    log: Logger,
) -> List[DuplicateGroup]:
    """Log every name that more than one package claims."""

    lookup: Dict[str, List[AnyPackage]] = {}
    for pkg in packages:
        name = name_selector(pkg)
        if name:
            lookup.setdefault(name, []).append(pkg)

    groups: List[DuplicateGroup] = []
    for name, claimants in lookup.items():
        if len(claimants) > 1:
            log(f' * Duplicate {label} descriptions "{name}"')
            for pkg in claimants:
                log(f"   * {pkg.desc}")
            groups.append(DuplicateGroup(label=label, name=name, packages=claimants))
    return groups
