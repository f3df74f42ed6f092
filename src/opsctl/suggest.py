"""Fuzzy suggestions for mistyped commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from thefuzz import fuzz, process

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def suggest_commands(
    name: str,
    candidates: Iterable[str],
    threshold: int = 60,
    limit: int = 3,
) -> list[str]:
    """Rank known commands by similarity to an unknown one.

    Args:
        name: The command the user typed
        candidates: Known command names
        threshold: Minimum similarity score (0-100)
        limit: Maximum number of suggestions

    Returns:
        Suggestions, best match first
    """
    choices = sorted({c for c in candidates if c and c != name})
    if not name or not choices:
        return []

    matches = process.extract(name, choices, scorer=fuzz.ratio, limit=limit)
    suggestions = [match for match, score in matches if score >= threshold]
    logger.debug("Suggestions for %s: %s", name, suggestions)
    return suggestions
