"""
skillport - skill resolution and distribution for autonomous agents.

Quick Start:
    >>> from skillport import SkillService, SkillportSettings
    >>> service = SkillService.from_settings(SkillportSettings())
    >>> result = service.build_skills_prompt("main")
    >>> print(result.prompt)

Installing:
    >>> from skillport import InstallRequest
    >>> service.install_skill(
    ...     InstallRequest(
    ...         skill_name="writing",
    ...         agent_id="eng",
    ...         source_url="https://github.com/acme/skills/tree/main/writing",
    ...     )
    ... )

Key Features:
    - Global, agent-scoped and extra skill directories with last-wins precedence
    - Budgeted prompt block rendering
    - Installs from local paths, inline content or remote repositories
    - Workspace mirroring and per-agent assignment bookkeeping
"""

from importlib.metadata import PackageNotFoundError, version

# Configuration
from skillport.config import LoggingConfig, SkillportSettings, StorePaths, configure_logging

# Identifiers
from skillport.ids import DEFAULT_AGENT_ID, normalize_id

# Skills engine
from skillport.skills import (
    InstallRequest,
    InstallResult,
    RemoveRequest,
    RemoveResult,
    SkillError,
    SkillRecord,
    SkillScope,
    SkillService,
    SkillsPromptResult,
    WorkspaceOptions,
)

__all__ = [
    # Configuration
    "LoggingConfig",
    "SkillportSettings",
    "StorePaths",
    "configure_logging",
    # Identifiers
    "DEFAULT_AGENT_ID",
    "normalize_id",
    # Skills
    "InstallRequest",
    "InstallResult",
    "RemoveRequest",
    "RemoveResult",
    "SkillError",
    "SkillRecord",
    "SkillScope",
    "SkillService",
    "SkillsPromptResult",
    "WorkspaceOptions",
    # Version
    "__version__",
]

try:
    __version__ = version("skillport")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
