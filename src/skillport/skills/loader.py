"""SKILL.md parser and text helpers.

``SKILL.md`` files start with a frontmatter block delimited by two lines
containing only ``---``, followed by a markdown body. Parsing is deliberately
forgiving: anything that does not look like frontmatter is treated as body
text with no metadata, so a malformed file never breaks a listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from skillport.skills.config import SkillFrontmatter

SKILL_FILE_NAME = "SKILL.md"

NO_DESCRIPTION = "No description provided."

# Body summaries used as fallback descriptions are clamped to this length.
_SUMMARY_MAX_CHARS = 180

_FRONTMATTER_DELIMITER = "---"
_LINE_SPLIT = re.compile(r"\r?\n")
_SEPARATOR_RUNS = re.compile(r"[-_]+")
_WHITESPACE_RUNS = re.compile(r"\s+")
_WORD_START = re.compile(r"\b\w")

# Boolean keys (lowercased) mapped to SkillFrontmatter attribute names.
_BOOLEAN_KEYS: dict[str, str] = {
    "enabled": "enabled",
    "user-invocable": "user_invocable",
    "user_invocable": "user_invocable",
    "disable-model-invocation": "disable_model_invocation",
    "disable_model_invocation": "disable_model_invocation",
}


@dataclass
class ParsedSkillDocument:
    """Frontmatter and untrimmed body of a SKILL.md document."""

    frontmatter: SkillFrontmatter = field(default_factory=SkillFrontmatter)
    body: str = ""


def _parse_bool(value: str) -> bool | None:
    normalized = value.lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    return None


def parse_frontmatter(content: str) -> ParsedSkillDocument:
    """Split a SKILL.md document into frontmatter fields and body.

    The first line must be ``---`` (surrounding whitespace ignored) and a
    later line must close the block with ``---``; otherwise the whole
    document is returned as the body with empty metadata. Inside the block
    every line is split on its first ``:``. Keys are matched
    case-insensitively and unknown keys are ignored. Booleans are only set
    from the literals ``true``/``false``.

    Args:
        content: Raw document text.

    Returns:
        ``ParsedSkillDocument`` with the recognised fields and the body
        following the closing delimiter.
    """
    lines = _LINE_SPLIT.split(content)
    if lines[0].strip() != _FRONTMATTER_DELIMITER:
        return ParsedSkillDocument(body=content)

    closing_index = None
    for index in range(1, len(lines)):
        if lines[index].strip() == _FRONTMATTER_DELIMITER:
            closing_index = index
            break

    if closing_index is None:
        return ParsedSkillDocument(body=content)

    frontmatter = SkillFrontmatter()
    for line in lines[1:closing_index]:
        key, separator, value = line.partition(":")
        key = key.strip().lower()
        if not separator or not key:
            continue
        value = value.strip()

        if key in ("name", "description"):
            if value:
                setattr(frontmatter, key, value)
            continue

        attribute = _BOOLEAN_KEYS.get(key)
        if attribute is not None:
            parsed = _parse_bool(value)
            if parsed is not None:
                setattr(frontmatter, attribute, parsed)

    body = "\n".join(lines[closing_index + 1 :])
    return ParsedSkillDocument(frontmatter=frontmatter, body=body)


def clamp_text(value: str, max_chars: int) -> str:
    """Truncate ``value`` to ``max_chars`` characters, ending with ``...``."""
    if len(value) <= max_chars:
        return value
    return f"{value[: max(1, max_chars - 3)]}..."


def summarize_skill_body(body: str) -> str:
    """Derive a one-line description from a skill body.

    Uses the first non-empty line that is not a markdown heading (or the
    first line if every line is a heading), clamped to 180 characters.
    """
    trimmed = body.strip()
    if not trimmed:
        return NO_DESCRIPTION

    lines = [line.strip() for line in _LINE_SPLIT.split(trimmed) if line.strip()]
    descriptive = next((line for line in lines if not line.startswith("#")), None)
    if descriptive is None:
        descriptive = lines[0] if lines else NO_DESCRIPTION
    return clamp_text(descriptive, _SUMMARY_MAX_CHARS)


def humanize_skill_name(value: str) -> str:
    """Turn a directory or id like ``code_review-tool`` into ``Code Review Tool``."""
    spaced = _WHITESPACE_RUNS.sub(" ", _SEPARATOR_RUNS.sub(" ", value)).strip()
    return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)


def ensure_trailing_newline(value: str) -> str:
    """Append ``\\n`` unless ``value`` already ends with one."""
    return value if value.endswith("\n") else f"{value}\n"
