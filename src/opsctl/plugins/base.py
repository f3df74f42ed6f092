"""Base plugin handler interface and errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class PluginError(Exception):
    """Base error for plugin resolution and dispatch."""


class PluginNotFoundError(PluginError):
    """No executable exists for a candidate plugin name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"plugin executable not found: {name}")
        self.name = name


class PluginInstallError(PluginError):
    """A managed plugin could not be installed locally."""


class PluginExecError(PluginError):
    """A resolved plugin could not be executed."""


class PluginHandler(ABC):
    """Resolves plugin names to executables and runs them.

    The command router and the argument folder only talk to this
    interface; they never branch on the concrete handler.
    """

    @abstractmethod
    def lookup(self, name: str) -> str:
        """Find the executable for a plugin name.

        Args:
            name: Full plugin name, e.g. ``opsctl-foo-bar``

        Returns:
            Path to the executable

        Raises:
            PluginNotFoundError: If nothing matches the name
            PluginInstallError: If a match exists but cannot be installed
        """
        pass

    @abstractmethod
    def execute(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        """Run the executable in place of the current process.

        Args:
            executable_path: Path returned by :meth:`lookup`
            args: Full argument vector, ``args[0]`` is the executable path
            environment: Complete environment to relay

        Raises:
            PluginExecError: If the executable cannot be started
        """
        pass
