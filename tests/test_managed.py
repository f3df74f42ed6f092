"""Tests for the registry-backed plugin handler."""

import logging

import pytest

from conftest import FakePluginHandler
from opsctl.plugins.base import PluginInstallError, PluginNotFoundError
from opsctl.plugins.folding import dispatch_plugin
from opsctl.plugins.managed import ManagedPluginHandler
from opsctl.plugins.verifier import PluginVerifier
from opsctl.registry.client import PluginRecord, RegistryError


def record(name: str, command: str) -> PluginRecord:
    return PluginRecord(name=name, command=command, version="1.0.0")


class FakeRegistry:
    """In-memory registry double."""

    def __init__(self, records=None, error=None, install_error=None) -> None:
        self.records = records or []
        self.error = error
        self.install_error = install_error
        self.queries: list[str] = []
        self.installed: list[PluginRecord] = []

    def find_plugins(self, command: str) -> list[PluginRecord]:
        self.queries.append(command)
        if self.error:
            raise self.error
        return [r for r in self.records if r.command == command]

    def ensure_installed(self, record: PluginRecord) -> str:
        if self.install_error:
            raise self.install_error
        self.installed.append(record)
        return f"/plugins/{record.name}-{record.version}"


class TestManagedPluginHandler:
    """Test registry lookup with local fallback."""

    def test_registry_match_is_installed(self) -> None:
        """Test a registry hit returns the installed path."""
        registry = FakeRegistry([record("foo-plugin", "opsctl-foo")])
        handler = ManagedPluginHandler(registry, local=FakePluginHandler())

        assert handler.lookup("opsctl-foo") == "/plugins/foo-plugin-1.0.0"
        assert registry.installed[0].name == "foo-plugin"

    def test_falls_back_when_registry_empty(self) -> None:
        """Test local lookup when the registry has no record."""
        local = FakePluginHandler({"opsctl-foo": "/usr/bin/opsctl-foo"})
        handler = ManagedPluginHandler(FakeRegistry(), local=local)

        assert handler.lookup("opsctl-foo") == "/usr/bin/opsctl-foo"
        assert local.lookups == ["opsctl-foo"]

    def test_falls_back_when_registry_fails(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a registry error is a warning, not a failure."""
        local = FakePluginHandler({"opsctl-foo": "/usr/bin/opsctl-foo"})
        registry = FakeRegistry(error=RegistryError("connection refused"))
        handler = ManagedPluginHandler(registry, local=local)

        with caplog.at_level(logging.WARNING, logger="opsctl.plugins.managed"):
            assert handler.lookup("opsctl-foo") == "/usr/bin/opsctl-foo"

        assert "connection refused" in caplog.text

    def test_not_found_anywhere(self) -> None:
        """Test not found propagates from the local fallback."""
        handler = ManagedPluginHandler(FakeRegistry(), local=FakePluginHandler())

        with pytest.raises(PluginNotFoundError):
            handler.lookup("opsctl-foo")

    def test_install_failure_surfaces(self) -> None:
        """Test install errors are distinct from not found."""
        registry = FakeRegistry(
            [record("foo-plugin", "opsctl-foo")],
            install_error=PluginInstallError("no binary for linux/amd64"),
        )
        local = FakePluginHandler({"opsctl-foo": "/usr/bin/opsctl-foo"})
        handler = ManagedPluginHandler(registry, local=local)

        with pytest.raises(PluginInstallError):
            handler.lookup("opsctl-foo")
        assert local.lookups == []

    def test_ambiguous_match_picks_first(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the first record wins and the ambiguity is reported once."""
        registry = FakeRegistry([
            record("foo-a", "opsctl-foo"),
            record("foo-b", "opsctl-foo"),
        ])
        verifier = PluginVerifier()
        handler = ManagedPluginHandler(registry, local=FakePluginHandler(), verifier=verifier)

        with caplog.at_level(logging.WARNING, logger="opsctl.plugins.managed"):
            assert handler.lookup("opsctl-foo") == "/plugins/foo-a-1.0.0"
            assert handler.lookup("opsctl-foo") == "/plugins/foo-a-1.0.0"

        warnings = [r for r in caplog.records if "More than one plugin" in r.getMessage()]
        assert len(warnings) == 1
        assert "foo-a" in warnings[0].getMessage()
        assert verifier.seen_plugins == {"opsctl-foo": "foo-a"}

    def test_fresh_verifier_warns_again(self, caplog: pytest.LogCaptureFixture) -> None:
        """Warning deduplication is scoped to the verifier passed in."""
        registry = FakeRegistry([
            record("foo-a", "opsctl-foo"),
            record("foo-b", "opsctl-foo"),
        ])

        with caplog.at_level(logging.WARNING, logger="opsctl.plugins.managed"):
            for _ in range(2):
                handler = ManagedPluginHandler(
                    registry, local=FakePluginHandler(), verifier=PluginVerifier()
                )
                handler.lookup("opsctl-foo")

        assert caplog.text.count("More than one plugin") == 2

    def test_execute_delegates_to_local(self) -> None:
        """Test execution goes through the wrapped handler."""
        local = FakePluginHandler()
        handler = ManagedPluginHandler(FakeRegistry(), local=local)

        handler.execute("/plugins/foo", ["/plugins/foo", "-x"], {"A": "1"})

        assert local.executed == [("/plugins/foo", ["/plugins/foo", "-x"], {"A": "1"})]

    def test_dispatch_through_registry(self) -> None:
        """Test folding against the registry before local plugins."""
        registry = FakeRegistry([record("deploy", "opsctl-app-deploy")])
        local = FakePluginHandler({"opsctl-app": "/usr/bin/opsctl-app"})
        handler = ManagedPluginHandler(registry, local=local)

        dispatch_plugin(handler, ["app", "deploy", "--wait"], environ={"X": "y"})

        assert local.executed == [(
            "/plugins/deploy-1.0.0",
            ["/plugins/deploy-1.0.0", "--wait"],
            {"X": "y"},
        )]
        assert registry.queries == ["opsctl-app-deploy"]
