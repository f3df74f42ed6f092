"""Argument folding: map the user's command line to the longest plugin name."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from opsctl.plugins.base import PluginHandler, PluginNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "opsctl"
SEPARATOR = "-"
SEPARATOR_SUBSTITUTE = "_"
FLAG_MARKER = "-"


@dataclass(frozen=True)
class FoldResult:
    """A plugin found for a prefix of the command line."""

    path: str
    consumed: int


def normalize_token(token: str) -> str:
    """Rewrite separators inside a token so token boundaries stay unambiguous."""
    return token.replace(SEPARATOR, SEPARATOR_SUBSTITUTE)


def plugin_name(tokens: Sequence[str], namespace: str = DEFAULT_NAMESPACE) -> str:
    """Build the executable name for already normalized tokens."""
    return SEPARATOR.join([namespace, *tokens])


def command_tokens(args: Sequence[str]) -> list[str]:
    """Normalized tokens preceding the first flag."""
    tokens = []
    for arg in args:
        if arg.startswith(FLAG_MARKER):
            break
        tokens.append(normalize_token(arg))
    return tokens


def fold_arguments(
    args: Sequence[str],
    handler: PluginHandler,
    namespace: str = DEFAULT_NAMESPACE,
) -> FoldResult | None:
    """Find the longest command prefix that resolves to a plugin.

    Starting from every non-flag token, the window shrinks from the right
    until ``handler.lookup`` succeeds, so the first hit is the longest one.

    Args:
        args: Command line after the program name
        handler: Handler used to test each candidate name
        namespace: Plugin name prefix

    Returns:
        The resolved plugin, or None when no prefix resolves

    Raises:
        PluginInstallError: If a matching managed plugin cannot be installed
    """
    window = command_tokens(args)

    while window:
        name = plugin_name(window, namespace)
        try:
            path = handler.lookup(name)
        except PluginNotFoundError:
            path = ""

        if path:
            logger.debug("Resolved %s to %s", name, path)
            return FoldResult(path=path, consumed=len(window))

        logger.debug("No plugin named %s", name)
        window = window[:-1]

    return None


def dispatch_plugin(
    handler: PluginHandler,
    args: Sequence[str],
    environ: Mapping[str, str] | None = None,
    namespace: str = DEFAULT_NAMESPACE,
) -> bool:
    """Fold the command line and hand the process over to the plugin.

    Args:
        handler: Plugin handler to resolve and execute with
        args: Command line after the program name
        environ: Environment relayed to the plugin, ``os.environ`` if omitted
        namespace: Plugin name prefix

    Returns:
        False when no plugin matches. On a match the handler replaces the
        process, so True is only seen with handlers that return.

    Raises:
        PluginError: If the matched plugin cannot be installed or executed
    """
    result = fold_arguments(args, handler, namespace)
    if result is None:
        return False

    environment = dict(os.environ if environ is None else environ)
    plugin_args = [result.path, *args[result.consumed:]]
    handler.execute(result.path, plugin_args, environment)
    return True
