"""Settings loaded from the environment and an optional JSON file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.opsctl/config.json")
DEFAULT_PLUGIN_DIR = Path("~/.opsctl/plugins/bin")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """The configuration file could not be read."""


@dataclass
class Settings:
    """Runtime settings for plugin dispatch."""

    namespace: str = "opsctl"
    registry_url: str | None = None
    registry_token: str | None = None
    registry_timeout: float = 5.0
    plugin_dir: Path = field(default_factory=lambda: DEFAULT_PLUGIN_DIR.expanduser())
    managed_plugins: bool = True
    verbose: bool = False

    @property
    def managed_enabled(self) -> bool:
        """Whether lookups go through the registry."""
        return self.managed_plugins and bool(self.registry_url)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_settings(
    config_path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load settings.

    Values come from the config file first and are then overridden by
    ``OPSCTL_*`` environment variables.

    Args:
        config_path: Explicit config file. ``OPSCTL_CONFIG`` or
            ``~/.opsctl/config.json`` is used if omitted; a missing default
            file is ignored.
        environ: Environment to read, ``os.environ`` if omitted

    Returns:
        Loaded settings
    """
    env = os.environ if environ is None else environ

    explicit = config_path or env.get("OPSCTL_CONFIG")
    path = Path(explicit).expanduser() if explicit else DEFAULT_CONFIG_PATH.expanduser()

    data: dict[str, Any] = {}
    if explicit or path.exists():
        data = _read_config_file(path)

    settings = Settings()
    if "registry_url" in data:
        settings.registry_url = data["registry_url"] or None
    if "registry_token" in data:
        settings.registry_token = data["registry_token"] or None
    try:
        if "registry_timeout" in data:
            settings.registry_timeout = float(data["registry_timeout"])
        if "plugin_dir" in data:
            settings.plugin_dir = Path(data["plugin_dir"]).expanduser()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if "managed_plugins" in data:
        settings.managed_plugins = _as_bool(data["managed_plugins"])
    if "verbose" in data:
        settings.verbose = _as_bool(data["verbose"])

    if env.get("OPSCTL_REGISTRY_URL"):
        settings.registry_url = env["OPSCTL_REGISTRY_URL"]
    if env.get("OPSCTL_REGISTRY_TOKEN"):
        settings.registry_token = env["OPSCTL_REGISTRY_TOKEN"]
    if env.get("OPSCTL_REGISTRY_TIMEOUT"):
        try:
            settings.registry_timeout = float(env["OPSCTL_REGISTRY_TIMEOUT"])
        except ValueError as e:
            raise ConfigError(f"Invalid OPSCTL_REGISTRY_TIMEOUT: {e}") from e
    if env.get("OPSCTL_PLUGIN_DIR"):
        settings.plugin_dir = Path(env["OPSCTL_PLUGIN_DIR"]).expanduser()
    if "OPSCTL_MANAGED_PLUGINS" in env:
        settings.managed_plugins = _as_bool(env["OPSCTL_MANAGED_PLUGINS"])
    if "OPSCTL_DEBUG" in env:
        settings.verbose = _as_bool(env["OPSCTL_DEBUG"])

    return settings
