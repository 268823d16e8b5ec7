"""Mirroring of installed skills into agent workspaces.

An agent workspace (``<workspaces>/<agent>`` unless overridden) may contain
one or more skill directories read by the agent runtime, for example
``.agents/skills``. Agent-scoped installs copy the skill into each of them;
removals delete those copies again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from skillport.config.settings import StorePaths
from skillport.ports.base import FileStore, PathResolver
from skillport.skills.config import WorkspaceOptions
from skillport.skills.loader import SKILL_FILE_NAME
from skillport.skills.sources import normalize_relative_directory

logger = logging.getLogger(__name__)


def normalize_workspace_skill_directories(directories: Iterable[str] | None) -> list[str]:
    """Normalise workspace-relative skill directories.

    Entries that are blank or escape the workspace (``..``) are dropped and
    duplicates are removed, keeping the first occurrence.
    """
    normalized: list[str] = []
    for candidate in directories or []:
        directory = normalize_relative_directory(candidate)
        if directory and directory not in normalized:
            normalized.append(directory)
    return normalized


class WorkspaceSynchronizer:
    """Copies skills into, and removes them from, agent workspaces.

    Args:
        file_store: Filesystem port.
        path_resolver: Path port.
        paths: Store layout.
    """

    def __init__(self, file_store: FileStore, path_resolver: PathResolver, paths: StorePaths) -> None:
        self._files = file_store
        self._paths = path_resolver
        self._store = paths

    def workspace_dir(self, agent_id: str, options: WorkspaceOptions) -> Path:
        """Workspace root used for ``agent_id``."""
        if options.workspace_dir is not None:
            return self._paths.expand_user(str(options.workspace_dir))
        return self._store.agent_workspace_dir(agent_id)

    def resolve_installed_source(self, agent_id: str, skill_id: str) -> Path | None:
        """Return the installed copy of a skill, agent-scoped first, then global."""
        for candidate in (
            self._paths.join(self._store.agent_skills_dir(agent_id), skill_id),
            self._paths.join(self._store.skills_dir, skill_id),
        ):
            if self._files.exists(candidate):
                return candidate
        return None

    def sync(
        self,
        agent_id: str,
        skill_id: str,
        options: WorkspaceOptions,
        source_dir: Path | None = None,
    ) -> list[Path]:
        """Mirror a skill into every configured workspace skill directory.

        Each mirror is replaced (removed, then copied) so repeated syncs of
        the same source produce identical trees.

        Args:
            agent_id: Normalised agent id.
            skill_id: Normalised skill id.
            options: Workspace root and skill directories.
            source_dir: Directory to copy. Defaults to the installed skill.

        Returns:
            Paths of the mirrored ``SKILL.md`` files. Empty when no
            directories are configured or no source exists.
        """
        directories = normalize_workspace_skill_directories(options.skill_directories)
        if not directories:
            return []

        source = source_dir or self.resolve_installed_source(agent_id, skill_id)
        if source is None or not self._files.exists(source):
            logger.debug("No installed copy of skill '%s' to mirror for agent '%s'", skill_id, agent_id)
            return []

        workspace_dir = self.workspace_dir(agent_id, options)
        installed: list[Path] = []
        for relative_dir in directories:
            skills_dir = self._paths.join(workspace_dir, relative_dir)
            target_dir = self._paths.join(skills_dir, skill_id)
            self._files.ensure_dir(skills_dir)
            self._files.remove_dir(target_dir)
            self._files.copy_dir(source, target_dir)
            installed.append(self._paths.join(target_dir, SKILL_FILE_NAME))

        logger.debug("Mirrored skill '%s' into %d workspace directories", skill_id, len(installed))
        return installed

    def remove(self, agent_id: str, skill_id: str, options: WorkspaceOptions) -> list[Path]:
        """Delete the workspace mirrors of a skill.

        Returns:
            ``SKILL.md`` paths of the mirrors that existed and were removed.
        """
        directories = normalize_workspace_skill_directories(options.skill_directories)
        workspace_dir = self.workspace_dir(agent_id, options)

        removed: list[Path] = []
        for relative_dir in directories:
            target_dir = self._paths.join(workspace_dir, relative_dir, skill_id)
            if not self._files.exists(target_dir):
                continue
            self._files.remove_dir(target_dir)
            removed.append(self._paths.join(target_dir, SKILL_FILE_NAME))
        return removed
