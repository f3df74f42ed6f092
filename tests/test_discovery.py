"""Tests for plugin discovery and verification."""

import os

import pytest

from conftest import make_executable
from opsctl.plugins.discovery import find_local_plugins, plugin_command_tokens
from opsctl.plugins.verifier import PluginVerifier

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses POSIX permissions")


class TestDiscovery:
    """Test finding plugins on the search path."""

    def test_find_local_plugins(self, tmp_path) -> None:
        """Test only namespaced files are listed, in path order."""
        first = tmp_path / "a"
        second = tmp_path / "b"
        first.mkdir()
        second.mkdir()
        make_executable(first, "opsctl-foo")
        make_executable(first, "kubectl-foo")
        make_executable(second, "opsctl-bar")
        make_executable(second, "opsctl-foo")
        (second / "opsctl-dir").mkdir()

        search_path = os.pathsep.join([str(first), str(second), str(tmp_path / "missing")])
        found = find_local_plugins(search_path=search_path)

        assert found == [
            first / "opsctl-foo",
            second / "opsctl-bar",
            second / "opsctl-foo",
        ]

    def test_duplicate_directories_scanned_once(self, tmp_path) -> None:
        """Test repeated PATH entries do not duplicate plugins."""
        make_executable(tmp_path, "opsctl-foo")

        found = find_local_plugins(search_path=os.pathsep.join([str(tmp_path)] * 2))

        assert found == [tmp_path / "opsctl-foo"]

    def test_uses_process_path(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test PATH is the default search path."""
        make_executable(tmp_path, "opsctl-foo")
        monkeypatch.setenv("PATH", str(tmp_path))

        assert find_local_plugins() == [tmp_path / "opsctl-foo"]

    @pytest.mark.parametrize("filename,tokens", [
        ("opsctl-foo", ["foo"]),
        ("opsctl-foo-bar", ["foo", "bar"]),
        ("opsctl-foo-bar_baz", ["foo", "bar-baz"]),
        ("opsctl-foo.exe", ["foo"]),
        ("kubectl-foo", []),
        ("opsctl", []),
    ])
    def test_plugin_command_tokens(self, filename: str, tokens: list[str]) -> None:
        """Test recovering the command a user types from a file name."""
        assert plugin_command_tokens(filename) == tokens


class TestPluginVerifier:
    """Test plugin conflict checks."""

    def test_first_sighting(self) -> None:
        """Test names are only new once."""
        verifier = PluginVerifier()

        assert verifier.first_sighting("opsctl-foo", "a") is True
        assert verifier.first_sighting("opsctl-foo", "b") is False
        assert verifier.seen_plugins == {"opsctl-foo": "a"}

    def test_clean_plugin(self, tmp_path) -> None:
        """Test a plugin without conflicts has no warnings."""
        plugin = make_executable(tmp_path, "opsctl-foo")

        assert PluginVerifier().verify(plugin) == []

    def test_overwrites_builtin(self, tmp_path) -> None:
        """Test plugins named like a built-in command are flagged."""
        plugin = make_executable(tmp_path, "opsctl-plugins-extra")
        verifier = PluginVerifier(builtin_commands=frozenset({"plugins"}))

        warnings = verifier.verify(plugin)

        assert len(warnings) == 1
        assert "overwrites existing command" in warnings[0]

    def test_overshadowed(self, tmp_path) -> None:
        """Test a later plugin with the same name is flagged."""
        first = tmp_path / "a"
        second = tmp_path / "b"
        first.mkdir()
        second.mkdir()
        verifier = PluginVerifier()

        assert verifier.verify(make_executable(first, "opsctl-foo")) == []
        warnings = verifier.verify(make_executable(second, "opsctl-foo"))

        assert len(warnings) == 1
        assert "overshadowed" in warnings[0]
        assert str(first / "opsctl-foo") in warnings[0]

    @posix_only
    def test_not_executable(self, tmp_path) -> None:
        """Test plain files are flagged."""
        plugin = tmp_path / "opsctl-foo"
        plugin.write_text("data")
        plugin.chmod(0o644)

        warnings = PluginVerifier().verify(plugin)

        assert warnings == [f"{plugin} is not executable"]
