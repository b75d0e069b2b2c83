"""Semantic version helpers on top of the ``semver`` package.

Ordering is SemVer 2.0 precedence, which is what the npm registry uses.
"""

from __future__ import annotations

from typing import Iterable, Optional

from semver import Version


def try_parse(value: str) -> Optional[Version]:
    try:
        return Version.parse(value)
    except ValueError:
        return None


def lowest_version(versions: Iterable[str]) -> Optional[str]:
    """Return the lowest valid version string, or ``None``.

    Strings that are not valid semantic versions are ignored. The original
    string is returned, not a normalized rendering.
    """

    best: Optional[Version] = None
    best_raw: Optional[str] = None
    for raw in versions:
        parsed = try_parse(raw)
        if parsed is None:
            continue
        if best is None or parsed < best:
            best = parsed
            best_raw = raw
    return best_raw


def major_minor_at_least(major: int, minor: int, version: str) -> bool:
    """True when ``major.minor`` is at or above the major/minor of ``version``."""

    parsed = Version.parse(version)
    return (major, minor) >= (parsed.major, parsed.minor)
