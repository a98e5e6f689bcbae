"""HTTP capability provider speaking the Kubernetes discovery API."""

from __future__ import annotations

import logging

import requests

from .exceptions import DiscoveryError
from .models import CapabilityList

LOGGER = logging.getLogger(__name__)

DEFAULT_UA = "apishape/1.0 (+https://github.com/apishape/apishape)"


def discovery_path(group_version: str) -> str:
    """Return the discovery path for ``group_version``.

    The legacy core group has no group name and lives under ``/api``.
    """

    if "/" not in group_version:
        return f"/api/{group_version}"
    return f"/apis/{group_version}"


def _is_transient_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class HTTPDiscoveryProvider:
    """Query ``/apis/<group>/<version>`` on an API server."""

    def __init__(
        self,
        server: str,
        *,
        token: str | None = None,
        timeout: int = 10,
        verify: bool | str = True,
        user_agent: str = DEFAULT_UA,
        session: requests.Session | None = None,
    ) -> None:
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def fetch_resources(self, group_version: str) -> CapabilityList:
        url = f"{self.server}{discovery_path(group_version)}"
        try:
            response = self.session.get(
                url, headers=self.headers, timeout=self.timeout, verify=self.verify
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise DiscoveryError(
                f"Discovery request to {url} failed", exc, group_version=group_version, transient=True
            ) from exc
        except requests.RequestException as exc:
            raise DiscoveryError(
                f"Discovery request to {url} failed", exc, group_version=group_version
            ) from exc

        if not 200 <= response.status_code < 300:
            raise DiscoveryError(
                f"Discovery of {group_version} failed with status code: {response.status_code}",
                group_version=group_version,
                status_code=response.status_code,
                transient=_is_transient_status(response.status_code),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DiscoveryError(
                f"Discovery of {group_version} returned invalid JSON", exc, group_version=group_version
            ) from exc
        if not isinstance(payload, dict):
            raise DiscoveryError(
                f"Discovery of {group_version} returned an unexpected document",
                group_version=group_version,
            )

        try:
            capabilities = CapabilityList.from_dict(payload, group_version=group_version)
        except ValueError as exc:
            raise DiscoveryError(
                f"Discovery of {group_version} returned a malformed resource list", exc, group_version=group_version
            ) from exc
        LOGGER.debug("Fetched %s (%d kinds)", url, len(capabilities.resources))
        return capabilities


__all__ = ["DEFAULT_UA", "HTTPDiscoveryProvider", "discovery_path"]
