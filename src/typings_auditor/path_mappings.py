"""Path-mapping consistency checks.

A path mapping redirects a module prefix to a specific major version of that
module's typings. If package A depends on B, directly or through any chain of
dependencies or test dependencies, and B maps ``prefix -> version``, then A must
carry the identical mapping or the compiler would resolve two different
versions. A mapping nothing in the closure needs is dead configuration.
"""

from __future__ import annotations

from .package_graph import PackageGraph
from .types_packages import TypingsPackage


class PathMappingError(ValueError):
    """Base class for path-mapping violations in authored metadata."""

    def __init__(self, package: TypingsPackage, prefix: str, message: str) -> None:
        super().__init__(message)
        self.package = package
        self.prefix = prefix


class PathMappingPropagationError(PathMappingError):
    def __init__(
        self,
        package: TypingsPackage,
        dependency: TypingsPackage,
        prefix: str,
        expected_version: int,
        actual_version: int | None,
    ) -> None:
        found = "no mapping" if actual_version is None else f"v{actual_version}"
        message = (
            f"{package.desc} depends on {dependency.desc}, which has a path mapping for "
            f"{prefix} v{expected_version} ({package.desc} has {found}). "
            f"{package.desc} must have the same path mappings as its dependencies."
        )
        super().__init__(package, prefix, message)
        self.dependency = dependency
        self.expected_version = expected_version
        self.actual_version = actual_version


class UnusedPathMappingError(PathMappingError):
    def __init__(self, package: TypingsPackage, prefix: str) -> None:
        super().__init__(package, prefix, f"{package.desc} has unused path mapping for {prefix}")


def check_package_path_mappings(graph: PackageGraph, pkg: TypingsPackage) -> None:
    unused = set(pkg.path_mappings)

    for dependency in graph.all_dependency_typings(pkg):
        for prefix, version in dependency.path_mappings.items():
            ours = pkg.path_mappings.get(prefix)
            if ours != version:
                raise PathMappingPropagationError(pkg, dependency, prefix, version, ours)
            unused.discard(prefix)

        # Mapping a dependency's own name counts as using it.
        unused.discard(dependency.name)

    if unused:
        raise UnusedPathMappingError(pkg, sorted(unused)[0])


def check_path_mappings(graph: PackageGraph) -> None:
    """Raise on the first path-mapping violation anywhere in the graph."""

    for pkg in graph.all_typings():
        check_package_path_mappings(graph, pkg)
