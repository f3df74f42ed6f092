"""External plugin resolution and dispatch."""

from .base import (
    PluginError,
    PluginExecError,
    PluginHandler,
    PluginInstallError,
    PluginNotFoundError,
)
from .folding import FoldResult, dispatch_plugin, fold_arguments
from .local import LocalPluginHandler
from .managed import ManagedPluginHandler
from .verifier import PluginVerifier

__all__ = [
    "PluginError",
    "PluginExecError",
    "PluginHandler",
    "PluginInstallError",
    "PluginNotFoundError",
    "FoldResult",
    "dispatch_plugin",
    "fold_arguments",
    "LocalPluginHandler",
    "ManagedPluginHandler",
    "PluginVerifier",
]
