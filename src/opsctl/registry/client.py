"""HTTP client for the managed plugin registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """The registry could not be queried or returned an invalid payload."""


@dataclass(frozen=True)
class PluginBinary:
    """A downloadable plugin build for one platform."""

    os: str
    arch: str
    url: str


@dataclass(frozen=True)
class PluginRecord:
    """A plugin installed in the registry."""

    name: str
    command: str
    version: str
    description: str = ""
    binaries: tuple[PluginBinary, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PluginRecord:
        """Build a record from a registry API item."""
        try:
            return cls(
                name=data["name"],
                command=data["command"],
                version=str(data.get("version") or "latest"),
                description=str(data.get("description") or ""),
                binaries=tuple(
                    PluginBinary(os=b["os"], arch=b["arch"], url=b["url"])
                    for b in data.get("binaries", [])
                ),
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise RegistryError(f"Invalid plugin record {data!r}: {e}") from e

    def binary_for(self, os_name: str, arch: str) -> PluginBinary | None:
        """Get the binary built for a platform."""
        for binary in self.binaries:
            if binary.os == os_name and binary.arch == arch:
                return binary
        return None


class RegistryClient:
    """Client for the registry's plugin listing endpoint."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Registry root URL
            token: Bearer token sent with every request
            timeout: Request timeout in seconds
            transport: Custom httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._transport = transport

    def list_plugins(self, command: str | None = None) -> list[PluginRecord]:
        """List plugins, optionally only those bound to a command label.

        Args:
            command: Command label to filter on, e.g. ``opsctl-foo``

        Returns:
            Plugin records in registry order

        Raises:
            RegistryError: If the request fails or the payload is malformed
        """
        params = {"command": command} if command else None

        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.get("/v1/plugins", params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RegistryError(f"Failed to query plugin registry at {self.base_url}: {e}") from e
        except ValueError as e:
            raise RegistryError(f"Plugin registry returned invalid JSON: {e}") from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise RegistryError("Plugin registry response is missing 'items'")

        records = [PluginRecord.from_dict(item) for item in items]
        logger.debug("Registry returned %d plugins for %s", len(records), command or "<all>")
        return records
