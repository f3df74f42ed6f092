"""Shared fixtures."""

import os
from pathlib import Path

import pytest

from opsctl.plugins.base import PluginHandler, PluginNotFoundError


class FakePluginHandler(PluginHandler):
    """Handler that resolves a fixed set of names and records executions."""

    def __init__(self, known: dict[str, str] | None = None) -> None:
        self.known = known or {}
        self.lookups: list[str] = []
        self.executed: list[tuple[str, list[str], dict[str, str]]] = []

    def lookup(self, name: str) -> str:
        self.lookups.append(name)
        if name not in self.known:
            raise PluginNotFoundError(name)
        return self.known[name]

    def execute(self, executable_path, args, environment) -> None:
        self.executed.append((executable_path, list(args), dict(environment)))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's home config and OPSCTL_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("OPSCTL_"):
            monkeypatch.delenv(key)
    return home


def make_executable(directory: Path, name: str, body: str = "exit 0\n") -> Path:
    """Create an executable shell script."""
    path = directory / name
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return path
