import json
from pathlib import Path

import pytest

from typings_auditor.registry_loader import RegistryLoadError, load_registry
from typings_auditor.types import NotNeededPackage, PackageDependency


def _write_package(root: Path, name: str, metadata: dict, file_name: str = "metadata.json") -> None:
    directory = root / "types" / name
    directory.mkdir(parents=True)
    if file_name.endswith(".json"):
        (directory / file_name).write_text(json.dumps(metadata))
    else:
        lines = [f"{key}: {json.dumps(value)}" for key, value in metadata.items()]
        (directory / file_name).write_text("\n".join(lines) + "\n")


def test_loads_definitely_typed_style_tree(tmp_path: Path):
    _write_package(
        tmp_path,
        "react-router",
        {
            "libraryName": "React Router",
            "projectName": "https://github.com/ReactTraining/react-router",
            "major": 4,
            "minor": 0,
            "dependencies": {"react": 16, "history": "*"},
            "testDependencies": ["enzyme"],
            "contributors": [{"name": "Ada", "url": "https://github.com/ada"}],
            "pathMappings": {"history": 4},
        },
    )
    _write_package(tmp_path, "history", {"version": "4.7"}, file_name="metadata.yaml")
    (tmp_path / "notNeededPackages.json").write_text(
        json.dumps(
            {
                "packages": [
                    {
                        "libraryName": "Moment",
                        "typingsPackageName": "moment",
                        "sourceRepoURL": "https://github.com/moment/moment",
                        "asOfVersion": "2.10.0",
                    }
                ]
            }
        )
    )

    graph = load_registry(tmp_path)

    router = graph.typings["react-router"]
    assert router.desc == "react-router v4.0"
    assert router.dependencies == [PackageDependency("react", 16), PackageDependency("history", "*")]
    assert router.test_dependencies == ["enzyme"]
    assert router.path_mappings == {"history": 4}
    assert router.contributors[0].url == "https://github.com/ada"

    history = graph.typings["history"]
    assert (history.major, history.minor) == (4, 7)

    moment = graph.not_needed[0]
    assert isinstance(moment, NotNeededPackage)
    assert moment.project_name == "https://github.com/moment/moment"
    assert moment.library_name == "Moment"


def test_loads_yaml_index_document(tmp_path: Path):
    index = tmp_path / "registry.yaml"
    index.write_text(
        "typings:\n"
        "  - name: jquery\n"
        "    version: '3.3'\n"
        "    libraryName: jQuery\n"
        "    dependencies: [sizzle]\n"
        "  - name: sizzle\n"
        "    major: 2\n"
        "notNeeded:\n"
        "  - name: left-pad\n"
        "    libraryName: left-pad\n"
    )

    graph = load_registry(index)

    assert [pkg.name for pkg in graph.all_packages()] == ["jquery", "sizzle", "left-pad"]
    assert graph.typings["jquery"].dependencies == [PackageDependency("sizzle")]
    assert graph.typings["sizzle"].minor == 0


def test_directories_without_metadata_are_skipped(tmp_path: Path):
    (tmp_path / "types" / "scratch").mkdir(parents=True)
    _write_package(tmp_path, "real", {"major": 1, "minor": 2})

    graph = load_registry(tmp_path)

    assert list(graph.typings) == ["real"]


def test_invalid_metadata_raises(tmp_path: Path):
    _write_package(tmp_path, "broken", {"major": 1, "pathMappings": {"x": "latest"}})

    with pytest.raises(RegistryLoadError, match="non-integer"):
        load_registry(tmp_path)


def test_missing_version_raises(tmp_path: Path):
    index = tmp_path / "registry.json"
    index.write_text(json.dumps({"typings": [{"name": "nover"}]}))

    with pytest.raises(RegistryLoadError, match="missing version"):
        load_registry(index)


def test_unparseable_document_raises(tmp_path: Path):
    index = tmp_path / "registry.json"
    index.write_text("{not json")

    with pytest.raises(RegistryLoadError, match="Unable to parse"):
        load_registry(index)


def test_missing_path_raises(tmp_path: Path):
    with pytest.raises(RegistryLoadError):
        load_registry(tmp_path / "nowhere")
