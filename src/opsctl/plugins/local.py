"""Plugin handler backed by the local executable search path."""

from __future__ import annotations

import logging
import os
import shutil
from typing import TYPE_CHECKING

from opsctl.plugins.base import PluginHandler, PluginNotFoundError
from opsctl.plugins.executor import ProcessExecutor, default_executor

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


def executable_name(name: str) -> str:
    """Add the platform executable suffix to a plugin name."""
    if os.name == "nt" and not name.lower().endswith(".exe"):
        return name + ".exe"
    return name


class LocalPluginHandler(PluginHandler):
    """Finds plugins on ``PATH`` and runs them through a process executor."""

    def __init__(
        self,
        executor: ProcessExecutor | None = None,
        search_path: str | None = None,
    ) -> None:
        """Initialize handler.

        Args:
            executor: Executor used by :meth:`execute`, platform default if omitted
            search_path: ``os.pathsep`` separated directories, ``PATH`` if omitted
        """
        self.executor = executor or default_executor()
        self.search_path = search_path

    def lookup(self, name: str) -> str:
        path = shutil.which(executable_name(name), path=self.search_path)
        if not path:
            raise PluginNotFoundError(name)
        return path

    def execute(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        self.executor.run(executable_path, args, environment)
