"""Command-line interface for opsctl."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from opsctl.config import ConfigError, Settings, load_settings
from opsctl.plugins import (
    LocalPluginHandler,
    ManagedPluginHandler,
    PluginError,
    PluginHandler,
    PluginVerifier,
    dispatch_plugin,
)
from opsctl.plugins.discovery import find_local_plugins, plugin_command_tokens
from opsctl.registry import PluginInstaller, RegistryClient, RegistryError, RemotePluginRegistry
from opsctl.suggest import suggest_commands

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

SETTINGS_KEY = "opsctl.settings"


def _setup_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("opsctl")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    package_logger.handlers[:] = [handler]


def get_settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation, honoring the root options."""
    root = ctx.find_root()
    settings = root.meta.get(SETTINGS_KEY)
    if settings is None:
        try:
            settings = load_settings(root.params.get("config"))
        except ConfigError as e:
            raise click.ClickException(str(e)) from e
        if root.params.get("verbose"):
            settings.verbose = True
        _setup_logging(settings.verbose)
        root.meta[SETTINGS_KEY] = settings
    return settings


def build_registry(settings: Settings) -> RemotePluginRegistry:
    """Create the registry collaborator from settings."""
    client = RegistryClient(
        settings.registry_url,
        token=settings.registry_token,
        timeout=settings.registry_timeout,
    )
    return RemotePluginRegistry(client, PluginInstaller(settings.plugin_dir))


def build_plugin_handler(settings: Settings, verifier: PluginVerifier) -> PluginHandler:
    """Pick the plugin handler for this invocation."""
    local = LocalPluginHandler()
    if not settings.managed_enabled:
        return local
    return ManagedPluginHandler(build_registry(settings), local=local, verifier=verifier)


class PluginDispatchGroup(click.Group):
    """Command group that hands unknown commands over to external plugins."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        cmd_name = args[0] if args else None

        if cmd_name and not ctx.resilient_parsing and self.get_command(ctx, cmd_name) is None:
            self._dispatch(ctx, args)

        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if cmd_name and not cmd_name.startswith("-"):
                hints = suggest_commands(cmd_name, self._known_commands(ctx))
                if hints:
                    e.message += "\n\nDid you mean one of these?\n" + "\n".join(
                        f"    {hint}" for hint in hints
                    )
            raise

    def _dispatch(self, ctx: click.Context, args: list[str]) -> None:
        settings = get_settings(ctx)
        verifier = PluginVerifier(builtin_commands=frozenset(self.list_commands(ctx)))
        handler = build_plugin_handler(settings, verifier)

        try:
            dispatched = dispatch_plugin(handler, args, namespace=settings.namespace)
        except PluginError as e:
            err_console.print("[red]Error:[/red]", escape(str(e)))
            ctx.exit(1)

        if dispatched:
            ctx.exit(0)

    def _known_commands(self, ctx: click.Context) -> list[str]:
        settings = get_settings(ctx)
        known = list(self.list_commands(ctx))
        for path in find_local_plugins(settings.namespace):
            tokens = plugin_command_tokens(path.name, settings.namespace)
            if tokens:
                known.append(tokens[0])
        return known


@click.group(cls=PluginDispatchGroup)
@click.option("--config", "-c", type=click.Path(), help="Configuration file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """opsctl - operations toolkit with external plugins.

    Commands that are not built in run the matching opsctl-<command>
    executable from PATH or from the managed plugin registry.
    """
    ctx.ensure_object(dict)
    ctx.obj["settings"] = get_settings(ctx)


@cli.group()
def plugins() -> None:
    """Inspect external plugins."""


@plugins.command("list")
@click.pass_context
def list_plugins(ctx: click.Context) -> None:
    """List plugins available on PATH and in the registry."""
    settings: Settings = ctx.obj["settings"]
    root = ctx.find_root()
    verifier = PluginVerifier(builtin_commands=frozenset(cli.list_commands(root)))

    table = Table(title="Plugins")
    table.add_column("Command", style="cyan")
    table.add_column("Source", style="green")
    table.add_column("Location", style="white")
    table.add_column("Notes", style="yellow")

    for path in find_local_plugins(settings.namespace):
        tokens = plugin_command_tokens(path.name, settings.namespace)
        warnings = verifier.verify(path, settings.namespace)
        table.add_row(
            escape(" ".join(tokens)),
            "local",
            escape(str(path)),
            escape("\n".join(warnings)),
        )

    if settings.managed_enabled:
        try:
            records = build_registry(settings).list_plugins()
        except RegistryError as e:
            logger.warning("Could not list managed plugins: %s", e)
            records = []

        for record in records:
            tokens = plugin_command_tokens(record.command, settings.namespace)
            table.add_row(
                escape(" ".join(tokens) or record.command),
                "managed",
                escape(f"{record.name} {record.version}"),
                escape(record.description),
            )

    if not table.row_count:
        console.print("[yellow]No plugins found.[/yellow]")
        return

    console.print(table)


@plugins.command("path")
@click.pass_context
def plugin_path(ctx: click.Context) -> None:
    """Show where managed plugins are installed."""
    settings: Settings = ctx.obj["settings"]
    click.echo(str(settings.plugin_dir))


def main() -> None:
    """Entry point."""
    cli(prog_name="opsctl")


if __name__ == "__main__":
    main()
