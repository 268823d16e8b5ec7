"""Skill resolution and distribution engine.

Discovers ``SKILL.md`` packages across the global store, agent-scoped
override stores and extra directories, assembles budgeted prompt blocks,
and installs, assigns, mirrors and removes skills. The ``SkillService``
facade composes all subsystem components behind a single API.

Quick Start:
    >>> from skillport.skills import InstallRequest, SkillService
    >>> service = SkillService.from_settings()
    >>> service.install_skill(InstallRequest(skill_name="writing", scope="global"))
    >>> skills = service.list_skills("main")

Classes:
    SkillService: Top-level facade for the skills engine.
    SkillRecord: A skill discovered on disk.
    SkillsConfig: Resolved per-agent skills configuration.
    InstallRequest / InstallResult: Install operation input and outcome.
    RemoveRequest / RemoveResult: Remove operation input and outcome.
    WorkspaceOptions: Where agent-scoped installs are mirrored.

Exceptions:
    SkillError: Base exception for all skill-related errors.
    SkillValidationError: Request rejected before any side effect.
    SkillNotFoundError: Source or installed skill does not exist.
    SkillAmbiguityError: Several repository skills and no selection.
    SkillSourceError: Remote source could not be cloned.
    SkillConfigError: Agent configuration document cannot be parsed.
"""

from __future__ import annotations

from skillport.skills.config import (
    AgentSkillRemoval,
    DiscoveryReport,
    InstallRequest,
    InstallResult,
    InstallSourceKind,
    PromptConfig,
    RemoveRequest,
    RemoveResult,
    SkillFrontmatter,
    SkillRecord,
    SkillsConfig,
    SkillsConfigInput,
    SkillScope,
    SkillSource,
    SkillsPromptResult,
    SkippedSkill,
    SkipReason,
    WorkspaceOptions,
    resolve_skills_config,
)
from skillport.skills.errors import (
    SkillAmbiguityError,
    SkillConfigError,
    SkillError,
    SkillNotFoundError,
    SkillSourceError,
    SkillValidationError,
)
from skillport.skills.service import SkillService

__all__ = [
    "AgentSkillRemoval",
    "DiscoveryReport",
    "InstallRequest",
    "InstallResult",
    "InstallSourceKind",
    "PromptConfig",
    "RemoveRequest",
    "RemoveResult",
    "SkillAmbiguityError",
    "SkillConfigError",
    "SkillError",
    "SkillFrontmatter",
    "SkillNotFoundError",
    "SkillRecord",
    "SkillScope",
    "SkillService",
    "SkillSource",
    "SkillSourceError",
    "SkillValidationError",
    "SkillsConfig",
    "SkillsConfigInput",
    "SkillsPromptResult",
    "SkippedSkill",
    "SkipReason",
    "WorkspaceOptions",
    "resolve_skills_config",
]
