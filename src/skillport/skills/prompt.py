"""Budgeted rendering of the skills block injected into a model prompt."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from skillport.skills.config import PromptConfig, SkillRecord, SkillsPromptResult
from skillport.skills.loader import clamp_text
from skillport.skills.templates import SKILLS_PROMPT_TEMPLATE, get_template

logger = logging.getLogger(__name__)

# Approximate serialisation overhead (tags, indentation) per rendered skill.
SKILL_OVERHEAD_CHARS = 150


def estimate_skill_cost(skill: SkillRecord, rendered_content: str) -> int:
    """Estimated characters a skill adds to the prompt block."""
    return (
        len(skill.name)
        + len(skill.description)
        + len(str(skill.definition_file_path))
        + len(rendered_content)
        + SKILL_OVERHEAD_CHARS
    )


def select_skills(skills: Sequence[SkillRecord], config: PromptConfig) -> list[SkillRecord]:
    """Greedily pick skills in order until a budget limit is hit.

    Selection stops at the first skill that would push the estimated total
    over ``max_total_chars``; later, smaller skills are not considered. This
    keeps the result a stable prefix of the input order.

    Args:
        skills: Candidate skills in priority order.
        config: Prompt budget.

    Returns:
        Selected skills, each with ``content`` replaced by the rendered
        (clamped, or empty when content is excluded) body.
    """
    selected: list[SkillRecord] = []
    budget_used = 0

    for skill in skills:
        if len(selected) >= config.max_skills:
            break

        content = clamp_text(skill.content, config.max_chars_per_skill) if config.include_content else ""
        cost = estimate_skill_cost(skill, content)
        if budget_used + cost > config.max_total_chars:
            logger.debug(
                "Skill '%s' (~%d chars) exceeds the remaining prompt budget, stopping",
                skill.id,
                cost,
            )
            break

        budget_used += cost
        selected.append(dataclasses.replace(skill, content=content))

    return selected


def build_skills_prompt(skills: Sequence[SkillRecord], config: PromptConfig) -> SkillsPromptResult:
    """Render the skills block for a model prompt.

    Skills with ``disable-model-invocation: true`` must be filtered out by
    the caller. Interpolated values are escaped for ``&``, ``<`` and ``>``.

    Args:
        skills: Eligible skills, already sorted.
        config: Prompt budget.

    Returns:
        ``SkillsPromptResult`` with the rendered text and included skills.
    """
    selected = select_skills(skills, config)
    prompt = get_template(SKILLS_PROMPT_TEMPLATE).render(
        skills=selected,
        include_content=config.include_content,
    )
    return SkillsPromptResult(prompt=prompt.rstrip("\n"), skills=selected)
