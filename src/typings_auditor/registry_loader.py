"""Build a :class:`PackageGraph` from typings metadata on disk.

Two layouts are accepted:

* a registry checkout with one directory per package (``types/<name>/`` or
  ``<name>/`` under the root) holding ``metadata.json``, ``metadata.yaml`` or
  ``metadata.yml``, plus an optional ``notNeededPackages.json`` at the root;
* a single JSON/YAML index document with ``typings`` and ``notNeeded`` lists.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from .package_graph import PackageGraph
from .types_packages import (
    AnyPackage,
    Contributor,
    NotNeededPackage,
    PackageDependency,
    TypingsPackage,
)

METADATA_FILES = ("metadata.json", "metadata.yaml", "metadata.yml")
NOT_NEEDED_FILE = "notNeededPackages.json"


class RegistryLoadError(ValueError):
    pass


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise RegistryLoadError(f"Unable to parse {path}: {exc}") from exc


def _parse_version(raw: dict, source: str) -> tuple[int, int]:
    if "major" in raw:
        try:
            return int(raw["major"]), int(raw.get("minor", 0))
        except (TypeError, ValueError) as exc:
            raise RegistryLoadError(f"{source}: major/minor must be integers") from exc
    version = str(raw.get("version", "")).strip()
    if not version:
        raise RegistryLoadError(f"{source}: missing version")
    parts = version.split(".")
    try:
        major = int(parts[0])
        minor = int(parts[1]) if len(parts) > 1 else 0
    except ValueError as exc:
        raise RegistryLoadError(f"{source}: invalid version {version!r}") from exc
    return major, minor


def _parse_dependencies(raw: Any, source: str) -> List[PackageDependency]:
    if not raw:
        return []
    if isinstance(raw, dict):
        return [PackageDependency(name=str(name), version=version) for name, version in raw.items()]
    if isinstance(raw, list):
        dependencies = []
        for entry in raw:
            if isinstance(entry, dict):
                dependencies.append(
                    PackageDependency(name=str(entry["name"]), version=entry.get("version", "*"))
                )
            else:
                dependencies.append(PackageDependency(name=str(entry)))
        return dependencies
    raise RegistryLoadError(f"{source}: dependencies must be a mapping or a list")


def _parse_path_mappings(raw: Any, source: str) -> dict[str, int]:
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise RegistryLoadError(f"{source}: pathMappings must be a mapping")
    mappings: dict[str, int] = {}
    for prefix, version in raw.items():
        try:
            mappings[str(prefix)] = int(version)
        except (TypeError, ValueError) as exc:
            raise RegistryLoadError(
                f"{source}: path mapping for {prefix} has non-integer version {version!r}"
            ) from exc
    return mappings


def parse_typings_entry(raw: dict, source: str = "metadata", default_name: Optional[str] = None) -> TypingsPackage:
    if not isinstance(raw, dict):
        raise RegistryLoadError(f"{source}: expected a mapping")
    name = raw.get("name") or raw.get("typingsPackageName") or default_name
    if not name:
        raise RegistryLoadError(f"{source}: missing package name")
    major, minor = _parse_version(raw, source)
    contributors = [
        Contributor(name=str(c.get("name", "")), url=str(c.get("url", "")))
        for c in raw.get("contributors") or []
    ]
    return TypingsPackage(
        name=str(name),
        major=major,
        minor=minor,
        library_name=raw.get("libraryName"),
        project_name=raw.get("projectName"),
        dependencies=_parse_dependencies(raw.get("dependencies"), source),
        test_dependencies=[str(dep) for dep in raw.get("testDependencies") or []],
        contributors=contributors,
        path_mappings=_parse_path_mappings(raw.get("pathMappings"), source),
    )


def parse_not_needed_entry(raw: dict, source: str = NOT_NEEDED_FILE) -> NotNeededPackage:
    if not isinstance(raw, dict):
        raise RegistryLoadError(f"{source}: expected a mapping")
    name = raw.get("typingsPackageName") or raw.get("name")
    if not name:
        raise RegistryLoadError(f"{source}: not-needed entry without a name")
    return NotNeededPackage(
        name=str(name),
        library_name=raw.get("libraryName"),
        source_repo_url=raw.get("sourceRepoURL"),
        as_of_version=raw.get("asOfVersion"),
    )


def _find_metadata(directory: Path) -> Optional[Path]:
    for candidate in METADATA_FILES:
        path = directory / candidate
        if path.is_file():
            return path
    return None


def _package_directories(root: Path) -> Iterable[Path]:
    base = root / "types" if (root / "types").is_dir() else root
    for child in sorted(base.iterdir()):
        if child.is_dir() and not child.name.startswith("."):
            yield child


def load_registry_directory(root: Path) -> PackageGraph:
    packages: List[AnyPackage] = []
    for directory in _package_directories(root):
        metadata = _find_metadata(directory)
        if metadata is None:
            continue
        packages.append(parse_typings_entry(_read_document(metadata), str(metadata), directory.name))

    not_needed = root / NOT_NEEDED_FILE
    if not_needed.is_file():
        data = _read_document(not_needed)
        entries = data.get("packages", []) if isinstance(data, dict) else data
        for entry in entries or []:
            packages.append(parse_not_needed_entry(entry, str(not_needed)))

    return _build_graph(packages)


def load_registry_index(path: Path) -> PackageGraph:
    data = _read_document(path)
    if not isinstance(data, dict):
        raise RegistryLoadError(f"{path}: expected a mapping with 'typings' and 'notNeeded'")
    packages: List[AnyPackage] = []
    for entry in data.get("typings") or []:
        packages.append(parse_typings_entry(entry, str(path)))
    for entry in data.get("notNeeded") or []:
        packages.append(parse_not_needed_entry(entry, str(path)))
    return _build_graph(packages)


def _build_graph(packages: List[AnyPackage]) -> PackageGraph:
    try:
        return PackageGraph.from_packages(packages)
    except ValueError as exc:
        raise RegistryLoadError(str(exc)) from exc


def load_registry(path: Path) -> PackageGraph:
    if not path.exists():
        raise RegistryLoadError(f"Registry path {path} does not exist")
    if path.is_dir():
        return load_registry_directory(path)
    return load_registry_index(path)
