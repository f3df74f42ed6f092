"""Download and install managed plugin binaries."""

from __future__ import annotations

import logging
import os
import platform
import tempfile
from pathlib import Path

import httpx

from opsctl.plugins.base import PluginInstallError
from opsctl.registry.client import PluginRecord

logger = logging.getLogger(__name__)

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "armv7l": "arm",
}


def current_platform() -> tuple[str, str]:
    """Return the ``(os, arch)`` pair used to pick a plugin binary."""
    os_name = platform.system().lower()
    machine = platform.machine().lower()
    return os_name, _ARCH_ALIASES.get(machine, machine)


class PluginInstaller:
    """Installs plugin binaries into a local directory."""

    def __init__(
        self,
        bin_dir: str | Path,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
        platform_pair: tuple[str, str] | None = None,
    ) -> None:
        """Initialize installer.

        Args:
            bin_dir: Directory holding installed plugin binaries
            timeout: Download timeout in seconds
            transport: Custom httpx transport
            platform_pair: ``(os, arch)`` override, detected if omitted
        """
        self.bin_dir = Path(bin_dir).expanduser()
        self.timeout = timeout
        self._transport = transport
        self.os_name, self.arch = platform_pair or current_platform()

    def binary_path(self, record: PluginRecord) -> Path:
        """Local path a record is installed to.

        Raises:
            PluginInstallError: If the record's name or version would
                escape the plugin directory
        """
        filename = f"{record.name}-{record.version}"
        if self.os_name == "windows":
            filename += ".exe"

        if "/" in filename or "\\" in filename or filename.startswith("."):
            raise PluginInstallError(
                f"Plugin {record.name} {record.version} has an unsafe name for installation"
            )
        return self.bin_dir / filename

    def ensure_installed(self, record: PluginRecord) -> str:
        """Install a plugin if it is not present yet.

        Returns:
            Path to the executable

        Raises:
            PluginInstallError: If no binary matches this platform or the
                download fails
        """
        path = self.binary_path(record)
        if path.is_file() and os.access(path, os.X_OK):
            return str(path)

        binary = record.binary_for(self.os_name, self.arch)
        if binary is None:
            raise PluginInstallError(
                f"Plugin {record.name} {record.version} has no binary for {self.os_name}/{self.arch}"
            )

        logger.info("Installing plugin %s %s from %s", record.name, record.version, binary.url)
        try:
            self.bin_dir.mkdir(parents=True, exist_ok=True)
            self._download(binary.url, path)
        except (httpx.HTTPError, OSError) as e:
            raise PluginInstallError(
                f"Failed to install plugin {record.name} {record.version}: {e}"
            ) from e

        return str(path)

    def _download(self, url: str, target: Path) -> None:
        """Download to a temporary file and move it into place."""
        fd, tmp_name = tempfile.mkstemp(dir=self.bin_dir, prefix=".download-")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out, httpx.Client(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    for chunk in response.iter_bytes():
                        out.write(chunk)

            tmp_path.chmod(0o755)
            os.replace(tmp_path, target)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
