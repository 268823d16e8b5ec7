"""Jinja2 templates for the skills prompt block and generated skills."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from jinja2 import Environment, StrictUndefined, Template

_LINE_SPLIT = re.compile(r"\r?\n")

SKILLS_PROMPT_TEMPLATE = """\
## Skills
Before replying, inspect available skill summaries and decide whether one skill clearly applies.
- If exactly one skill clearly applies, follow that skill.
- If multiple skills could apply, choose the most specific.
- If none apply, continue without using a skill.
Skill definitions may come from global and agent-specific stores.

{% if not skills %}
No installed skills were found for this agent.
{% else %}
<available_skills>
{% for skill in skills %}
  <skill>
    <id>{{ skill.id | xml_escape }}</id>
    <name>{{ skill.name | xml_escape }}</name>
    <description>{{ skill.description | xml_escape }}</description>
    <location>{{ skill.definition_file_path | xml_escape }}</location>
    <source>{{ skill.source.value | xml_escape }}</source>
{% if include_content and skill.content.strip() %}
    <content>
{{ skill.content | indent_lines(6) }}
    </content>
{% endif %}
  </skill>
{% endfor %}
</available_skills>
{% endif %}
"""

GENERATED_SKILL_TEMPLATE = """\
---
name: {{ name }}
description: {{ description }}
---

# {{ name }}

## When to Use
- Describe when this skill should be applied.

## Instructions
- Add explicit step-by-step guidance here.

## Constraints
- Add constraints and safety checks here.
"""


def xml_escape(value: Any) -> str:
    """Escape ``&``, ``<`` and ``>`` (quotes are left alone)."""
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def indent_lines(value: str, spaces: int) -> str:
    """Prefix every line of ``value``, blank lines included, with spaces."""
    indent = " " * max(0, spaces)
    return "\n".join(f"{indent}{line}" for line in _LINE_SPLIT.split(value))


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=StrictUndefined,
    )
    env.filters["xml_escape"] = xml_escape
    env.filters["indent_lines"] = indent_lines
    return env


def get_template(source: str) -> Template:
    """Compile ``source`` with the shared skills environment."""
    return _environment().from_string(source)


def render_skill_markdown(name: str, description: str) -> str:
    """Render the placeholder SKILL.md written for skills with no source."""
    return get_template(GENERATED_SKILL_TEMPLATE).render(name=name, description=description)
