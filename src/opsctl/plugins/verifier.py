"""Bookkeeping of plugins seen while resolving or listing."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from opsctl.plugins.discovery import plugin_command_tokens
from opsctl.plugins.folding import DEFAULT_NAMESPACE


@dataclass
class PluginVerifier:
    """Tracks plugin names already seen and checks plugins for conflicts.

    One verifier is passed explicitly through a single resolution or listing
    run, so repeated names only produce one warning per run.
    """

    builtin_commands: frozenset[str] = frozenset()
    seen_plugins: dict[str, str] = field(default_factory=dict)

    def first_sighting(self, name: str, source: str) -> bool:
        """Record ``name`` and return True only the first time it is seen."""
        if name in self.seen_plugins:
            return False
        self.seen_plugins[name] = source
        return True

    def verify(self, path: str | Path, namespace: str = DEFAULT_NAMESPACE) -> list[str]:
        """Return warnings for a local plugin file."""
        path = Path(path)
        warnings = []

        if not os.access(path, os.X_OK):
            warnings.append(f"{path} is not executable")

        tokens = plugin_command_tokens(path.name, namespace)
        if tokens and tokens[0] in self.builtin_commands:
            warnings.append(f"{path} overwrites existing command: {tokens[0]!r}")

        name = path.stem if path.suffix.lower() == ".exe" else path.name
        if not self.first_sighting(name, str(path)):
            warnings.append(
                f"{path} is overshadowed by a similarly named plugin: {self.seen_plugins[name]}"
            )

        return warnings
