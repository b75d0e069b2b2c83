from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Contributor:
    name: str
    url: str


@dataclass(frozen=True)
class PackageDependency:
    """A declared dependency on another typings package.

    ``version`` is the required major version (or ``"*"``); traversal only
    looks at the name.
    """

    name: str
    version: Union[int, str] = "*"


@dataclass
class TypingsPackage:
    name: str
    major: int
    minor: int
    library_name: Optional[str] = None
    project_name: Optional[str] = None
    dependencies: List[PackageDependency] = field(default_factory=list)
    test_dependencies: List[str] = field(default_factory=list)
    contributors: List[Contributor] = field(default_factory=list)
    path_mappings: dict[str, int] = field(default_factory=dict)

    @property
    def desc(self) -> str:
        return f"{self.name} v{self.major}.{self.minor}"

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}"

    def dependency_names(self) -> List[str]:
        """Names of regular and test dependencies, in declaration order."""

        names = [dep.name for dep in self.dependencies]
        names.extend(self.test_dependencies)
        return names


@dataclass
class NotNeededPackage:
    """A package that was removed because its library ships its own types."""

    name: str
    library_name: Optional[str] = None
    source_repo_url: Optional[str] = None
    as_of_version: Optional[str] = None

    @property
    def desc(self) -> str:
        return self.name

    @property
    def project_name(self) -> Optional[str]:
        return self.source_repo_url


AnyPackage = Union[TypingsPackage, NotNeededPackage]
