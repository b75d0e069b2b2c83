from __future__ import annotations

"""Shared data structures for the typings registry audit.

Package metadata and audit findings live in separate modules; this module
re-exports both so callers have a single import path.
"""

from .types_findings import AuditResult, DuplicateGroup, RedundancyFinding
from .types_packages import (
    AnyPackage,
    Contributor,
    NotNeededPackage,
    PackageDependency,
    TypingsPackage,
)

__all__ = [
    "AnyPackage",
    "AuditResult",
    "Contributor",
    "DuplicateGroup",
    "NotNeededPackage",
    "PackageDependency",
    "RedundancyFinding",
    "TypingsPackage",
]
