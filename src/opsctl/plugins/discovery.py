"""Discovery of plugin executables on the local search path."""

from __future__ import annotations

import os
from pathlib import Path

from opsctl.plugins.folding import (
    DEFAULT_NAMESPACE,
    SEPARATOR,
    SEPARATOR_SUBSTITUTE,
)


def find_local_plugins(
    namespace: str = DEFAULT_NAMESPACE,
    search_path: str | None = None,
) -> list[Path]:
    """Discover plugin files on the search path.

    Args:
        namespace: Plugin name prefix
        search_path: ``os.pathsep`` separated directories, ``PATH`` if omitted

    Returns:
        Candidate plugin files in search path order. Files with the same
        name in later directories are included so callers can report
        shadowing.
    """
    if search_path is None:
        search_path = os.environ.get("PATH", "")

    prefix = namespace + SEPARATOR
    discovered = []
    seen_dirs: set[Path] = set()

    for entry in search_path.split(os.pathsep):
        if not entry:
            continue
        directory = Path(entry)
        if directory in seen_dirs or not directory.is_dir():
            continue
        seen_dirs.add(directory)

        try:
            candidates = sorted(directory.iterdir())
        except OSError:
            continue

        for candidate in candidates:
            if candidate.name.startswith(prefix) and candidate.is_file():
                discovered.append(candidate)

    return discovered


def plugin_command_tokens(filename: str, namespace: str = DEFAULT_NAMESPACE) -> list[str]:
    """Split a plugin file name back into the command tokens a user types.

    ``opsctl-foo-bar_baz`` becomes ``["foo", "bar-baz"]``.
    """
    name = filename
    if name.lower().endswith(".exe"):
        name = name[:-4]

    prefix = namespace + SEPARATOR
    if not name.startswith(prefix):
        return []

    return [
        token.replace(SEPARATOR_SUBSTITUTE, SEPARATOR)
        for token in name[len(prefix):].split(SEPARATOR)
        if token
    ]
