"""In-memory registry graph.

Packages are kept in an arena keyed by name and dependency edges are plain
name references resolved through that arena, so closures are computed with a
worklist instead of recursion and cycles terminate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .types_packages import AnyPackage, NotNeededPackage, TypingsPackage


@dataclass
class PackageGraph:
    typings: Dict[str, TypingsPackage] = field(default_factory=dict)
    not_needed: List[NotNeededPackage] = field(default_factory=list)

    @classmethod
    def from_packages(cls, packages: Iterable[AnyPackage]) -> "PackageGraph":
        graph = cls()
        for pkg in packages:
            if isinstance(pkg, TypingsPackage):
                if pkg.name in graph.typings:
                    raise ValueError(f"Typings package {pkg.name} is defined more than once")
                graph.typings[pkg.name] = pkg
            else:
                graph.not_needed.append(pkg)
        return graph

    def all_packages(self) -> List[AnyPackage]:
        packages: List[AnyPackage] = list(self.typings.values())
        packages.extend(self.not_needed)
        return packages

    def all_typings(self) -> List[TypingsPackage]:
        return list(self.typings.values())

    def try_get_typings(self, name: str) -> Optional[TypingsPackage]:
        return self.typings.get(name)

    def all_dependency_typings(self, pkg: TypingsPackage) -> Iterator[TypingsPackage]:
        """Yield every typings package reachable from ``pkg``, excluding itself.

        Regular and test dependencies are both followed. Names that do not
        resolve to a typings package in the graph are skipped.
        """

        visited: Set[str] = {pkg.name}
        worklist = list(reversed(pkg.dependency_names()))
        while worklist:
            name = worklist.pop()
            if name in visited:
                continue
            visited.add(name)
            dependency = self.typings.get(name)
            if dependency is None:
                continue
            yield dependency
            worklist.extend(reversed(dependency.dependency_names()))

    def depended_on(self) -> Set[str]:
        """Names referenced as a dependency or test dependency by any package."""

        names: Set[str] = set()
        for pkg in self.typings.values():
            names.update(pkg.dependency_names())
        return names
