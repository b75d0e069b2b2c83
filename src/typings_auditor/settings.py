from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org/"
DEFAULT_TIMEOUT = 8.0
DEFAULT_RETRIES = 3
DEFAULT_CONCURRENCY = 10
DEFAULT_LOG_DIR = "logs"


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


@dataclass
class AuditSettings:
    """Tunables for one audit run.

    Defaults come from the environment (``NPM_REGISTRY_URL``,
    ``NPM_REGISTRY_TIMEOUT``, ``NPM_REGISTRY_RETRIES``,
    ``TYPINGS_AUDIT_CONCURRENCY``, ``TYPINGS_AUDIT_LOG_DIR``); CLI options
    override them.
    """

    registry_url: str = field(
        default_factory=lambda: os.environ.get("NPM_REGISTRY_URL") or DEFAULT_REGISTRY_URL
    )
    timeout: float = field(default_factory=lambda: _env_float("NPM_REGISTRY_TIMEOUT", DEFAULT_TIMEOUT))
    retries: int = field(default_factory=lambda: _env_int("NPM_REGISTRY_RETRIES", DEFAULT_RETRIES))
    concurrency: int = field(
        default_factory=lambda: _env_int("TYPINGS_AUDIT_CONCURRENCY", DEFAULT_CONCURRENCY)
    )
    log_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("TYPINGS_AUDIT_LOG_DIR") or DEFAULT_LOG_DIR)
    )

    def __post_init__(self) -> None:
        if not self.registry_url.endswith("/"):
            self.registry_url += "/"
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    def as_dict(self) -> dict:
        return {
            "registry_url": self.registry_url,
            "timeout": self.timeout,
            "retries": self.retries,
            "concurrency": self.concurrency,
            "log_dir": str(self.log_dir),
        }
