"""opsctl - operations command line with external plugin dispatch."""

__version__ = "0.1.0"

# Lazy imports keep `import opsctl` free of the CLI and HTTP stack
def __getattr__(name: str):
    """Lazy import of the public API."""
    if name == "dispatch_plugin":
        from opsctl.plugins.folding import dispatch_plugin
        return dispatch_plugin
    elif name == "fold_arguments":
        from opsctl.plugins.folding import fold_arguments
        return fold_arguments
    elif name == "LocalPluginHandler":
        from opsctl.plugins.local import LocalPluginHandler
        return LocalPluginHandler
    elif name == "ManagedPluginHandler":
        from opsctl.plugins.managed import ManagedPluginHandler
        return ManagedPluginHandler
    elif name == "load_settings":
        from opsctl.config import load_settings
        return load_settings
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "dispatch_plugin",
    "fold_arguments",
    "LocalPluginHandler",
    "ManagedPluginHandler",
    "load_settings",
]
