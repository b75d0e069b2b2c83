from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .types_packages import AnyPackage, TypingsPackage


@dataclass
class DuplicateGroup:
    label: str
    name: str
    packages: List[AnyPackage] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "name": self.name,
            "packages": [pkg.desc for pkg in self.packages],
        }


@dataclass
class RedundancyFinding:
    """A typings package whose upstream library now ships its own types."""

    package: TypingsPackage
    as_of_version: str
    our_version_is_newer: bool = False
    depended_on: bool = False

    @property
    def our_version(self) -> str:
        return self.package.version

    def as_dict(self) -> dict:
        return {
            "name": self.package.name,
            "library_name": self.package.library_name,
            "as_of_version": self.as_of_version,
            "our_version": self.our_version,
            "our_version_is_newer": self.our_version_is_newer,
            "depended_on": self.depended_on,
        }


@dataclass
class AuditResult:
    duplicates: List[DuplicateGroup] = field(default_factory=list)
    redundant: List[RedundancyFinding] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)
    log_path: Optional[Path] = None

    @property
    def has_findings(self) -> bool:
        return bool(self.duplicates or self.redundant)
