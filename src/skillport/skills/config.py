"""Skill data models, enums, and configuration."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SkillSource(str, Enum):
    """Layer a skill was discovered in.

    Attributes:
        MANAGED: Global store or the agent-scoped override store.
        EXTRA: An externally configured directory (``load.extraDirs``).
    """

    MANAGED = "managed"
    EXTRA = "extra"


class SkillScope(str, Enum):
    """Storage tier targeted by install and remove operations.

    Attributes:
        GLOBAL: Shared store visible to every agent.
        AGENT: Override store keyed by agent id.
    """

    GLOBAL = "global"
    AGENT = "agent"


class InstallSourceKind(str, Enum):
    """Where the files of an installed skill came from."""

    SOURCE_PATH = "source-path"
    SOURCE_URL = "source-url"
    GENERATED = "generated"
    MANAGED = "managed"


class SkipReason(str, Enum):
    """Why a candidate directory was left out of a discovery scan."""

    MISSING_DEFINITION = "missing-definition"
    UNREADABLE = "unreadable"
    DISABLED = "disabled"
    EMPTY_ID = "empty-id"


@dataclass
class SkillFrontmatter:
    """Recognised frontmatter fields. ``None`` means the key was not set."""

    name: str | None = None
    description: str | None = None
    enabled: bool | None = None
    user_invocable: bool | None = None
    disable_model_invocation: bool | None = None


@dataclass
class SkillRecord:
    """A skill discovered on disk.

    Records are rebuilt from the directory tree on every read and are never
    cached between calls.

    Attributes:
        id: Canonical slug, unique within a merged listing.
        name: Display name.
        description: One-line description (frontmatter or body summary).
        source: Layer the record was discovered in.
        definition_dir: Directory owning the ``SKILL.md`` file.
        definition_file_path: Path to the ``SKILL.md`` file.
        content: Trimmed markdown body.
        frontmatter: Parsed frontmatter fields.
    """

    id: str
    name: str
    description: str
    source: SkillSource
    definition_dir: Path
    definition_file_path: Path
    content: str
    frontmatter: SkillFrontmatter = field(default_factory=SkillFrontmatter)


@dataclass
class SkippedSkill:
    """A directory skipped during discovery and the reason for it."""

    directory: Path
    reason: SkipReason
    detail: str | None = None


@dataclass
class DiscoveryReport:
    """Outcome of scanning one directory.

    Attributes:
        skills: Records that were loaded successfully.
        skipped: Directories that were left out, with the reason.
    """

    skills: list[SkillRecord] = field(default_factory=list)
    skipped: list[SkippedSkill] = field(default_factory=list)


@dataclass
class SkillsPromptResult:
    """Rendered skills block and the skills that made it into the budget."""

    prompt: str
    skills: list[SkillRecord] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Agent skills configuration
# ---------------------------------------------------------------------------

DEFAULT_MAX_SKILLS = 12
DEFAULT_MAX_CHARS_PER_SKILL = 6_000
DEFAULT_MAX_TOTAL_CHARS = 36_000


def _optional_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _optional_positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    floored = math.floor(value)
    return floored if floored > 0 else None


def _optional_string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value if item is not None]


def _optional_mapping(value: Any) -> Any:
    return value if isinstance(value, (Mapping, BaseModel)) else None


class _CamelInput(BaseModel):
    """Base for loosely-typed JSON sections using camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PromptConfigInput(_CamelInput):
    """``runtime.skills.prompt`` as found in an agent config document."""

    max_skills: int | None = None
    max_chars_per_skill: int | None = None
    max_total_chars: int | None = None
    include_content: bool | None = None

    @field_validator("max_skills", "max_chars_per_skill", "max_total_chars", mode="before")
    @classmethod
    def _positive_int(cls, value: Any) -> int | None:
        return _optional_positive_int(value)

    @field_validator("include_content", mode="before")
    @classmethod
    def _bool(cls, value: Any) -> bool | None:
        return _optional_bool(value)


class LoadConfigInput(_CamelInput):
    """``runtime.skills.load`` as found in an agent config document."""

    extra_dirs: list[str] | None = None

    @field_validator("extra_dirs", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str] | None:
        return _optional_string_list(value)


class SkillsConfigInput(_CamelInput):
    """``runtime.skills`` as found in an agent config document.

    Every field is optional. Values of the wrong type are treated as unset
    instead of failing validation, so a hand-edited document never breaks a
    listing. Use ``resolve_skills_config`` to apply defaults.
    """

    enabled: bool | None = None
    include_managed: bool | None = None
    assigned: list[str] | None = None
    load: LoadConfigInput | None = None
    prompt: PromptConfigInput | None = None

    @field_validator("enabled", "include_managed", mode="before")
    @classmethod
    def _bool(cls, value: Any) -> bool | None:
        return _optional_bool(value)

    @field_validator("assigned", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str] | None:
        return _optional_string_list(value)

    @field_validator("load", "prompt", mode="before")
    @classmethod
    def _section(cls, value: Any) -> Any:
        return _optional_mapping(value)


class PromptConfig(BaseModel):
    """Budget applied when rendering the skills prompt block.

    Attributes:
        max_skills: Maximum number of skills included.
        max_chars_per_skill: Body characters kept per skill.
        max_total_chars: Estimated character budget for all included skills.
        include_content: Whether skill bodies are rendered at all.
    """

    model_config = ConfigDict(frozen=True)

    max_skills: int = Field(default=DEFAULT_MAX_SKILLS, gt=0)
    max_chars_per_skill: int = Field(default=DEFAULT_MAX_CHARS_PER_SKILL, gt=0)
    max_total_chars: int = Field(default=DEFAULT_MAX_TOTAL_CHARS, gt=0)
    include_content: bool = True


class LoadConfig(BaseModel):
    """Additional directories scanned after the managed stores."""

    model_config = ConfigDict(frozen=True)

    extra_dirs: list[str] = Field(default_factory=list)


class SkillsConfig(BaseModel):
    """Resolved skills configuration for one agent.

    Attributes:
        enabled: Whether skills are available to the agent at all.
        include_managed: Whether the global and agent-scoped stores are scanned.
        assigned: Allow-list of skill ids. Empty means every discovered skill.
        load: Extra directory configuration.
        prompt: Prompt budget configuration.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    include_managed: bool = True
    assigned: list[str] = Field(default_factory=list)
    load: LoadConfig = Field(default_factory=LoadConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)


def resolve_skills_config(
    value: SkillsConfigInput | Mapping[str, Any] | None,
) -> SkillsConfig:
    """Apply defaults to a raw skills configuration section.

    Assigned ids are trimmed, lowercased and de-duplicated (first occurrence
    wins); extra directories are trimmed and blank entries dropped.

    Args:
        value: Parsed section, a raw mapping, or ``None``.

    Returns:
        Fully populated ``SkillsConfig``.
    """
    if value is None:
        return SkillsConfig()
    raw = value if isinstance(value, SkillsConfigInput) else SkillsConfigInput.model_validate(value)

    assigned: list[str] = []
    for entry in raw.assigned or []:
        normalized = entry.strip().lower()
        if normalized and normalized not in assigned:
            assigned.append(normalized)

    extra_dirs = [entry.strip() for entry in (raw.load.extra_dirs or []) if entry.strip()] if raw.load else []
    prompt = raw.prompt or PromptConfigInput()

    return SkillsConfig(
        enabled=raw.enabled if raw.enabled is not None else True,
        include_managed=raw.include_managed if raw.include_managed is not None else True,
        assigned=assigned,
        load=LoadConfig(extra_dirs=extra_dirs),
        prompt=PromptConfig(
            max_skills=prompt.max_skills or DEFAULT_MAX_SKILLS,
            max_chars_per_skill=prompt.max_chars_per_skill or DEFAULT_MAX_CHARS_PER_SKILL,
            max_total_chars=prompt.max_total_chars or DEFAULT_MAX_TOTAL_CHARS,
            include_content=(
                prompt.include_content if prompt.include_content is not None else True
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Requests and results
# ---------------------------------------------------------------------------


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class InstallRequest(BaseModel):
    """Request to install a skill into the global or an agent-scoped store.

    At most one of ``source_path`` and ``source_url`` may be given. With
    neither, ``content`` (or a generated template) is written instead.
    Blank strings are treated as absent.

    Attributes:
        skill_name: Requested skill name; normalised into the skill id.
        scope: Target store.
        agent_id: Target agent when ``scope`` is ``agent``.
        source_path: Local skill directory or ``SKILL.md`` path.
        source_url: Remote repository URL.
        source_skill_name: Hint used to pick a skill inside a repository.
        description: Description for generated skills.
        content: Inline ``SKILL.md`` content.
    """

    skill_name: str = ""
    scope: SkillScope = SkillScope.AGENT
    agent_id: str | None = None
    source_path: str | None = None
    source_url: str | None = None
    source_skill_name: str | None = None
    description: str | None = None
    content: str | None = None

    @field_validator(
        "agent_id",
        "source_path",
        "source_url",
        "source_skill_name",
        "description",
        "content",
        mode="before",
    )
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("skill_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class RemoveRequest(BaseModel):
    """Request to remove a skill from a store."""

    skill_id: str
    scope: SkillScope = SkillScope.AGENT
    agent_id: str | None = None

    @field_validator("agent_id", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("skill_id", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


@dataclass
class WorkspaceOptions:
    """Where agent-scoped installs are mirrored.

    Attributes:
        workspace_dir: Workspace root; defaults to ``<workspaces>/<agent>``.
        skill_directories: Workspace-relative skill directories that receive
            a mirror (for example ``.agents/skills``).
    """

    workspace_dir: Path | None = None
    skill_directories: list[str] = field(default_factory=list)


@dataclass
class InstallResult:
    """Outcome of an install operation."""

    scope: SkillScope
    skill_id: str
    skill_name: str
    source: InstallSourceKind
    installed_path: Path
    agent_id: str | None = None
    workspace_install_paths: list[Path] = field(default_factory=list)
    replaced: bool = False


@dataclass
class AgentSkillRemoval:
    """Which agent-level locations a removal touched."""

    removed_from_config: bool = False
    removed_from_agent_store: bool = False
    removed_from_workspace: bool = False
    removed_workspace_paths: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether anything was removed."""
        return self.removed_from_config or self.removed_from_agent_store or self.removed_from_workspace


@dataclass
class RemoveResult:
    """Outcome of a remove operation.

    Attributes:
        scope: Store the removal targeted.
        skill_id: Normalised skill id.
        agent_id: Target agent for agent-scoped removals.
        removed_from_global: The global store copy was deleted.
        removed_from_agent_store: The agent-scoped store copy was deleted.
        removed_from_config: The id was dropped from the agent's assigned list.
        removed_from_workspace: At least one workspace mirror was deleted.
        removed_from_agent_ids: Agents for which anything was removed.
        removed_workspace_paths: Workspace ``SKILL.md`` paths that were deleted.
    """

    scope: SkillScope
    skill_id: str
    agent_id: str | None = None
    removed_from_global: bool = False
    removed_from_agent_store: bool = False
    removed_from_config: bool = False
    removed_from_workspace: bool = False
    removed_from_agent_ids: list[str] = field(default_factory=list)
    removed_workspace_paths: list[Path] = field(default_factory=list)
