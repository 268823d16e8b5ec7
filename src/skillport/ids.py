"""Identifier normalisation shared by agents and skills."""

from __future__ import annotations

import re

DEFAULT_AGENT_ID = "main"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def normalize_id(value: str | None) -> str:
    """Normalise a free-form name into a canonical slug.

    Lowercases the input, collapses every run of characters outside
    ``[a-z0-9]`` into a single ``-`` and strips leading/trailing dashes.

    Args:
        value: Raw agent or skill name.

    Returns:
        The slug, or an empty string when nothing alphanumeric remains.

    Example:
        >>> normalize_id("  Code Review!  ")
        'code-review'
    """
    if not value:
        return ""
    return _NON_SLUG_CHARS.sub("-", value.strip().lower()).strip("-")
