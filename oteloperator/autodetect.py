"""Detection of the platform the operator runs on."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from enum import Enum

OPENSHIFT_ROUTE_GROUP = "route.openshift.io"


class Platform(str, Enum):
    """The kind of cluster the operator runs on."""

    UNKNOWN = "Unknown"
    KUBERNETES = "Kubernetes"
    OPENSHIFT = "OpenShift"

    def __str__(self) -> str:
        return self.value


class AutoDetectError(RuntimeError):
    """The cluster's API groups could not be read."""


class AutoDetect:
    """Detects traits of the cluster behind the given API server address."""

    def __init__(self, host: str, timeout: float = 10.0) -> None:
        self.host = host.rstrip("/")
        self.timeout = timeout

    def _server_groups(self) -> list[str]:
        url = f"{self.host}/apis"
        request = urllib.request.Request(url, headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except (urllib.error.URLError, OSError) as err:
            raise AutoDetectError(f"unable to retrieve the API groups from {url}: {err}") from err
        try:
            document = json.loads(body)
        except ValueError as err:
            raise AutoDetectError(f"invalid API group list from {url}") from err
        if not isinstance(document, dict):
            raise AutoDetectError(f"invalid API group list from {url}")
        groups = document.get("groups") or []
        return [group.get("name", "") for group in groups if isinstance(group, dict)]

    def platform(self) -> Platform:
        """Return OpenShift when its route API group is served, otherwise Kubernetes."""
        if OPENSHIFT_ROUTE_GROUP in self._server_groups():
            return Platform.OPENSHIFT
        return Platform.KUBERNETES