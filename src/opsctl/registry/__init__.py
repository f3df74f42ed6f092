"""Managed plugin registry client and installer."""

from .client import PluginBinary, PluginRecord, RegistryClient, RegistryError
from .installer import PluginInstaller
from .remote import RemotePluginRegistry

__all__ = [
    "PluginBinary",
    "PluginRecord",
    "RegistryClient",
    "RegistryError",
    "PluginInstaller",
    "RemotePluginRegistry",
]
