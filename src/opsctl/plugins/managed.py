"""Plugin handler backed by the managed plugin registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from opsctl.plugins.base import PluginHandler
from opsctl.plugins.local import LocalPluginHandler
from opsctl.plugins.verifier import PluginVerifier
from opsctl.registry.client import PluginRecord, RegistryError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


class PluginRegistry(Protocol):
    """What the managed handler needs from a registry."""

    def find_plugins(self, command: str) -> list[PluginRecord]:
        ...

    def ensure_installed(self, record: PluginRecord) -> str:
        ...


class ManagedPluginHandler(PluginHandler):
    """Looks plugins up in the registry first, then on the local path."""

    def __init__(
        self,
        registry: PluginRegistry,
        local: PluginHandler | None = None,
        verifier: PluginVerifier | None = None,
    ) -> None:
        """Initialize handler.

        Args:
            registry: Registry queried by command label
            local: Handler used as fallback and for execution
            verifier: Seen-plugin context shared with the caller
        """
        self.registry = registry
        self.local = local or LocalPluginHandler()
        self.verifier = verifier or PluginVerifier()

    def lookup(self, name: str) -> str:
        try:
            possibles = self.registry.find_plugins(name)
        except RegistryError as e:
            logger.warning("Plugin registry unavailable, using local plugins: %s", e)
            return self.local.lookup(name)

        if not possibles:
            return self.local.lookup(name)

        found = possibles[0]
        if len(possibles) > 1 and self.verifier.first_sighting(name, found.name):
            logger.warning(
                "More than one plugin installed for %s. Selecting %s (%d candidates).",
                name,
                found.name,
                len(possibles),
            )

        return self.registry.ensure_installed(found)

    def execute(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        self.local.execute(executable_path, args, environment)
