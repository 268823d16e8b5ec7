"""Tests for skill configuration models and request validation."""

from __future__ import annotations

import pytest

from skillport.skills.config import (
    DEFAULT_MAX_CHARS_PER_SKILL,
    DEFAULT_MAX_SKILLS,
    DEFAULT_MAX_TOTAL_CHARS,
    AgentSkillRemoval,
    InstallRequest,
    PromptConfig,
    RemoveRequest,
    SkillsConfig,
    SkillsConfigInput,
    SkillScope,
    resolve_skills_config,
)


class TestResolveSkillsConfig:
    """Defaults and lenient coercion of ``runtime.skills``."""

    def test_none_gives_defaults(self) -> None:
        config = resolve_skills_config(None)

        assert config == SkillsConfig()
        assert config.enabled is True
        assert config.include_managed is True
        assert config.assigned == []
        assert config.prompt == PromptConfig(
            max_skills=DEFAULT_MAX_SKILLS,
            max_chars_per_skill=DEFAULT_MAX_CHARS_PER_SKILL,
            max_total_chars=DEFAULT_MAX_TOTAL_CHARS,
            include_content=True,
        )

    def test_camel_case_keys(self) -> None:
        config = resolve_skills_config(
            {
                "enabled": False,
                "includeManaged": False,
                "load": {"extraDirs": ["~/skills"]},
                "prompt": {"maxSkills": 3, "maxCharsPerSkill": 100, "maxTotalChars": 500, "includeContent": False},
            }
        )

        assert config.enabled is False
        assert config.include_managed is False
        assert config.load.extra_dirs == ["~/skills"]
        assert config.prompt == PromptConfig(
            max_skills=3, max_chars_per_skill=100, max_total_chars=500, include_content=False
        )

    def test_assigned_normalized_and_deduped(self) -> None:
        config = resolve_skills_config({"assigned": [" Writing ", "writing", "", "Review", None]})

        assert config.assigned == ["writing", "review"]

    def test_extra_dirs_trimmed(self) -> None:
        config = resolve_skills_config({"load": {"extraDirs": ["  /a  ", "", "   "]}})

        assert config.load.extra_dirs == ["/a"]

    @pytest.mark.parametrize("value", [0, -3, float("nan"), float("inf"), "12", True, None])
    def test_invalid_budgets_fall_back(self, value: object) -> None:
        config = resolve_skills_config({"prompt": {"maxSkills": value}})

        assert config.prompt.max_skills == DEFAULT_MAX_SKILLS

    def test_fractional_budget_floored(self) -> None:
        config = resolve_skills_config({"prompt": {"maxSkills": 4.9, "maxTotalChars": 0.5}})

        assert config.prompt.max_skills == 4
        assert config.prompt.max_total_chars == DEFAULT_MAX_TOTAL_CHARS

    def test_wrong_types_are_ignored(self) -> None:
        config = resolve_skills_config(
            {"enabled": "no", "includeManaged": 0, "assigned": "writing", "load": [], "prompt": "big"}
        )

        assert config == SkillsConfig()

    def test_accepts_parsed_input(self) -> None:
        raw = SkillsConfigInput.model_validate({"assigned": ["A"]})

        assert resolve_skills_config(raw).assigned == ["a"]

    def test_snake_case_keys_accepted(self) -> None:
        assert resolve_skills_config({"include_managed": False}).include_managed is False


class TestInstallRequest:
    def test_defaults(self) -> None:
        request = InstallRequest(skill_name="writing")

        assert request.scope is SkillScope.AGENT
        assert request.agent_id is None
        assert request.content is None

    def test_blank_strings_become_none(self) -> None:
        request = InstallRequest(
            skill_name="writing",
            agent_id=" ",
            source_path="",
            source_url="   ",
            source_skill_name="",
            description="\n",
            content="  ",
        )

        assert request.agent_id is None
        assert request.source_path is None
        assert request.source_url is None
        assert request.source_skill_name is None
        assert request.description is None
        assert request.content is None

    def test_scope_from_string(self) -> None:
        assert InstallRequest(skill_name="x", scope="global").scope is SkillScope.GLOBAL


class TestRemoveRequest:
    def test_blank_agent(self) -> None:
        request = RemoveRequest(skill_id="writing", agent_id="")

        assert request.agent_id is None
        assert request.scope is SkillScope.AGENT


class TestAgentSkillRemoval:
    @pytest.mark.parametrize(
        ("fields", "changed"),
        [
            ({}, False),
            ({"removed_from_config": True}, True),
            ({"removed_from_agent_store": True}, True),
            ({"removed_from_workspace": True}, True),
        ],
    )
    def test_changed(self, fields: dict[str, bool], changed: bool) -> None:
        assert AgentSkillRemoval(**fields).changed is changed
