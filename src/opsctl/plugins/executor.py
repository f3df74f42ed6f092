"""Process executors that hand the current process over to a plugin."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from opsctl.plugins.base import PluginExecError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


class ProcessExecutor(ABC):
    """Replaces the running process with another executable."""

    @abstractmethod
    def run(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        """Run the executable. Does not return on success."""
        pass


class ReplaceProcessExecutor(ProcessExecutor):
    """Replaces the process image with ``execve``."""

    def run(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        logger.debug("exec %s %s", executable_path, list(args[1:]))
        # Output buffered by Python is lost once the image is replaced.
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execve(executable_path, list(args), dict(environment))
        except OSError as e:
            raise PluginExecError(f"Failed to execute {executable_path}: {e}") from e


class SpawnProcessExecutor(ProcessExecutor):
    """Emulates image replacement by running a child and mirroring its exit code."""

    def run(
        self,
        executable_path: str,
        args: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        logger.debug("spawn %s %s", executable_path, list(args[1:]))
        try:
            completed = subprocess.run(
                list(args),
                executable=executable_path,
                env=dict(environment),
                check=False,
            )
        except OSError as e:
            raise PluginExecError(f"Failed to execute {executable_path}: {e}") from e

        sys.exit(completed.returncode)


def default_executor() -> ProcessExecutor:
    """Pick the executor for the current platform.

    ``os.execve`` on Windows starts a new process and lets the parent exit
    immediately, so the console loses the plugin. Spawn there instead.
    """
    if os.name == "nt" or not hasattr(os, "execve"):
        return SpawnProcessExecutor()
    return ReplaceProcessExecutor()
