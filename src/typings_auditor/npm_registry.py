"""Registry lookups for upstream packages that ship their own types."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests  # type: ignore[import-untyped]
from requests.adapters import HTTPAdapter  # type: ignore[import-untyped]
from urllib3.util.retry import Retry

from .versions import lowest_version
from .settings import AuditSettings

# Someone published an `express-serve-static-core` package built from the
# typings repository. It is not the real library.
EXCLUDED_PACKAGES = frozenset({"express-serve-static-core"})

RETRY_STATUSES = (429, 500, 502, 503, 504)


class RegistryFetchError(IOError):
    """Raised when the registry cannot be reached or returns an unusable body."""


class RegistryClient:
    """Thin ``requests`` wrapper that fetches JSON documents with retries."""

    def __init__(
        self,
        registry_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        defaults = AuditSettings()
        self.registry_url = registry_url or defaults.registry_url
        if not self.registry_url.endswith("/"):
            self.registry_url += "/"
        self.timeout = timeout or defaults.timeout
        self.retries = defaults.retries if retries is None else retries
        self.session = session or self._build_session(self.retries)

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> "RegistryClient":
        return cls(registry_url=settings.registry_url, timeout=settings.timeout, retries=settings.retries)

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        policy = Retry(
            total=retries,
            connect=retries,
            read=retries,
            status=retries,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=policy, pool_maxsize=16)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def package_url(self, package_name: str) -> str:
        return self.registry_url + package_name

    def fetch_json(self, url: str) -> dict:
        try:
            response = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as exc:
            raise RegistryFetchError(f"Unable to reach {url}: {exc}") from exc

        # The registry answers 404 for names it has never seen.
        if response.status_code == 404:
            return {}
        if response.status_code != 200:
            raise RegistryFetchError(f"Registry returned {response.status_code} for {url}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryFetchError(f"Registry returned invalid JSON for {url}: {exc}") from exc
        if not isinstance(payload, dict):
            raise RegistryFetchError(f"Registry returned unexpected payload for {url}")
        return payload

    def package_info(self, package_name: str) -> dict:
        return self.fetch_json(self.package_url(package_name))


def has_types(info: Any) -> bool:
    return isinstance(info, Mapping) and ("types" in info or "typings" in info)


def first_version_with_types(versions: Mapping[str, Any]) -> Optional[str]:
    """Return the lowest published version whose metadata declares types."""

    typed = [version for version, info in versions.items() if has_types(info)]
    return lowest_version(typed)


def first_package_version_with_types(
    package_name: str, client: Optional[RegistryClient] = None
) -> Optional[str]:
    if package_name in EXCLUDED_PACKAGES:
        return None

    if client is None:
        with RegistryClient() as owned:
            info = owned.package_info(package_name)
    else:
        info = client.package_info(package_name)
    # Packages that were never published have no versions at all.
    versions = info.get("versions")
    if not versions or not isinstance(versions, Mapping):
        return None

    return first_version_with_types(versions)


def package_has_types(package_name: str, client: Optional[RegistryClient] = None) -> bool:
    return first_package_version_with_types(package_name, client) is not None
