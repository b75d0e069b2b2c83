import sys
import threading
import time
from pathlib import Path

import pytest

# Ensure src package is importable without installation
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

from typings_auditor.types import Contributor, PackageDependency, TypingsPackage  # noqa: E402


class FakeRegistryClient:
    """Serves canned registry documents and records how many lookups overlap."""

    def __init__(self, documents=None, latency: float = 0.0):
        self.documents = documents or {}
        self.latency = latency
        self.requested = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self._lock = threading.Lock()

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def package_info(self, package_name):
        with self._lock:
            self.requested.append(package_name)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                time.sleep(self.latency)
            return self.documents.get(package_name, {})
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def fake_registry():
    return FakeRegistryClient


@pytest.fixture
def make_typings():
    def _make(name, major=1, minor=0, deps=(), test_deps=(), mappings=None, **kwargs):
        return TypingsPackage(
            name=name,
            major=major,
            minor=minor,
            dependencies=[PackageDependency(name=dep) for dep in deps],
            test_dependencies=list(test_deps),
            path_mappings=dict(mappings or {}),
            **kwargs,
        )

    return _make


@pytest.fixture
def contributors():
    return [
        Contributor(name="Ada", url="https://github.com/ada"),
        Contributor(name="Bob", url="https://example.com/bob"),
    ]
