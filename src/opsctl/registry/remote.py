"""Registry collaborator used by the managed plugin handler."""

from __future__ import annotations

from opsctl.registry.client import PluginRecord, RegistryClient
from opsctl.registry.installer import PluginInstaller


class RemotePluginRegistry:
    """Combines the registry listing API with local installation."""

    def __init__(self, client: RegistryClient, installer: PluginInstaller) -> None:
        self.client = client
        self.installer = installer

    def find_plugins(self, command: str) -> list[PluginRecord]:
        """Plugins whose command label equals ``command``."""
        return [
            record for record in self.client.list_plugins(command)
            if record.command == command
        ]

    def list_plugins(self) -> list[PluginRecord]:
        return self.client.list_plugins()

    def ensure_installed(self, record: PluginRecord) -> str:
        return self.installer.ensure_installed(record)
