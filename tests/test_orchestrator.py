from pathlib import Path

import pytest

from typings_auditor.npm_registry import RegistryClient, RegistryFetchError
from typings_auditor.orchestrator import audit_graph, run_audit
from typings_auditor.package_graph import PackageGraph
from typings_auditor.path_mappings import PathMappingPropagationError
from typings_auditor.settings import AuditSettings
from typings_auditor.types import NotNeededPackage


TYPED = {"versions": {"1.0.0": {"types": "index.d.ts"}}}


def _graph(make_typings, count=25):
    packages = [make_typings(f"pkg{i}", library_name=f"Lib {i}") for i in range(count)]
    packages.append(make_typings("dup-a", library_name="Shared"))
    packages.append(make_typings("dup-b", library_name="Shared", deps=["pkg0"]))
    packages.append(NotNeededPackage(name="gone", library_name="Lib 1"))
    return PackageGraph.from_packages(packages)


def _documents(count=25):
    return {f"pkg{i}": TYPED for i in range(0, count, 2)}


def _blocks(lines):
    blocks, current = [], []
    for line in lines:
        if line == "" and current:
            blocks.append(tuple(current))
            current = []
        current.append(line)
    if current:
        blocks.append(tuple(current))
    return sorted(blocks)


def test_offline_mode_skips_registry(make_typings, fake_registry):
    client = fake_registry(_documents())

    result = audit_graph(_graph(make_typings), include_npm_checks=False, client=client)

    assert client.requested == []
    assert result.redundant == []
    assert [(group.label, group.name) for group in result.duplicates] == [
        ("Library Name", "Lib 1"),
        ("Library Name", "Shared"),
    ]


def test_full_mode_reports_redundant_packages(make_typings, fake_registry):
    client = fake_registry(_documents())

    result = audit_graph(_graph(make_typings), include_npm_checks=True, client=client)

    assert sorted(f.package.name for f in result.redundant) == sorted(f"pkg{i}" for i in range(0, 25, 2))
    pkg0 = next(f for f in result.redundant if f.package.name == "pkg0")
    assert pkg0.depended_on
    assert "WARNING: other packages depend on this" in result.lines


def test_concurrency_is_bounded_and_matches_sequential_run(make_typings, fake_registry):
    concurrent_client = fake_registry(_documents(), latency=0.01)
    concurrent = audit_graph(
        _graph(make_typings),
        include_npm_checks=True,
        settings=AuditSettings(concurrency=10),
        client=concurrent_client,
    )

    sequential_client = fake_registry(_documents())
    sequential = audit_graph(
        _graph(make_typings),
        include_npm_checks=True,
        settings=AuditSettings(concurrency=1),
        client=sequential_client,
    )

    assert 1 < concurrent_client.max_in_flight <= 10
    assert sequential_client.max_in_flight == 1
    assert _blocks(concurrent.lines) == _blocks(sequential.lines)
    assert len(concurrent_client.requested) == len(_graph(make_typings).all_typings())


def test_path_mapping_violation_aborts_before_lookups(make_typings, fake_registry):
    graph = PackageGraph.from_packages(
        [make_typings("app", deps=["lib"]), make_typings("lib", mappings={"react": 15})]
    )
    client = fake_registry({"app": TYPED})

    with pytest.raises(PathMappingPropagationError):
        audit_graph(graph, include_npm_checks=True, client=client)
    assert client.requested == []


def test_fetch_failure_aborts_run(make_typings):
    class FailingClient:
        def package_info(self, package_name):
            raise RegistryFetchError(f"Unable to reach registry for {package_name}")

    with pytest.raises(RegistryFetchError):
        audit_graph(_graph(make_typings, count=3), include_npm_checks=True, client=FailingClient())


def test_run_audit_writes_log_even_without_findings(tmp_path: Path, fake_registry):
    index = tmp_path / "registry.json"
    index.write_text('{"typings": [{"name": "solo", "version": "1.0"}]}')
    settings = AuditSettings(log_dir=tmp_path / "logs")

    result = run_audit(index, include_npm_checks=True, settings=settings, client=fake_registry())

    assert result.log_path == tmp_path / "logs" / "conflicts.md"
    assert result.log_path.read_text() == ""


def test_run_audit_is_idempotent(tmp_path: Path, fake_registry):
    index = tmp_path / "registry.json"
    index.write_text(
        '{"typings": ['
        '{"name": "a", "version": "1.0", "libraryName": "A"},'
        '{"name": "b", "version": "2.3", "libraryName": "A"},'
        '{"name": "c", "version": "0.1", "libraryName": "C", "dependencies": {"a": 1}}'
        "]}"
    )
    documents = {"a": TYPED, "c": {"versions": {"0.2.0": {"typings": "x.d.ts"}}}}
    settings = AuditSettings(log_dir=tmp_path / "logs", concurrency=1)

    first = run_audit(index, settings=settings, client=fake_registry(documents)).log_path.read_bytes()
    second = run_audit(index, settings=settings, client=fake_registry(documents)).log_path.read_bytes()

    assert first == second
    assert b'Duplicate Library Name descriptions "A"' in first
    assert b"Typings already defined for c (C) as of 0.2.0 (our version: 0.1)" in first


def test_registry_client_built_from_settings_is_closed(make_typings, fake_registry, monkeypatch):
    client = fake_registry(_documents(count=3))
    monkeypatch.setattr(RegistryClient, "from_settings", classmethod(lambda cls, settings: client))

    audit_graph(_graph(make_typings, count=3), include_npm_checks=True)

    assert client.closed


def test_caller_supplied_client_is_left_open(make_typings, fake_registry):
    client = fake_registry(_documents(count=3))

    audit_graph(_graph(make_typings, count=3), include_npm_checks=True, client=client)

    assert not client.closed
