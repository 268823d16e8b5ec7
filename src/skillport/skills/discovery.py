"""Skill discovery and scope-precedence merging.

Scans skill store directories for ``<skill>/SKILL.md`` definitions and merges
the results of several directories into a single listing.

Precedence (later entries override earlier ones by skill id):
1. Global store: ``<skills_dir>/``
2. Agent-scoped store: ``<skills_dir>/.agent-scoped/<agent_id>/``
3. Extra directories from ``runtime.skills.load.extraDirs``, in order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from skillport.config.settings import StorePaths
from skillport.ids import normalize_id
from skillport.ports.base import FileStore, PathResolver
from skillport.skills.config import (
    DiscoveryReport,
    SkillRecord,
    SkillsConfig,
    SkillSource,
    SkippedSkill,
    SkipReason,
)
from skillport.skills.loader import (
    SKILL_FILE_NAME,
    humanize_skill_name,
    parse_frontmatter,
    summarize_skill_body,
)

logger = logging.getLogger(__name__)


@dataclass
class SkillSourceEntry:
    """One directory taking part in a precedence merge.

    Attributes:
        source: Layer label assigned to skills found here.
        directory: Directory whose children are skill directories.
        enabled: Disabled entries are skipped entirely.
    """

    source: SkillSource
    directory: Path
    enabled: bool = True


class SkillRepository:
    """Loads skill records from a directory of skill directories.

    Example::

        repository = SkillRepository(LocalFileStore(), LocalPathResolver())
        skills = repository.discover(Path("~/.skillport/skills"), SkillSource.MANAGED)

    Args:
        file_store: Filesystem port.
        path_resolver: Path port.
    """

    def __init__(self, file_store: FileStore, path_resolver: PathResolver) -> None:
        self._files = file_store
        self._paths = path_resolver

    def scan(self, base_dir: Path, source: SkillSource) -> DiscoveryReport:
        """Scan the immediate children of ``base_dir`` for skills.

        Children without a ``SKILL.md``, with an unreadable ``SKILL.md``,
        with ``enabled: false`` frontmatter, or whose id normalises to an
        empty string are skipped and reported, never raised.

        Args:
            base_dir: Directory to scan. A missing directory yields nothing.
            source: Layer label assigned to every loaded record.

        Returns:
            ``DiscoveryReport`` with the loaded records (unsorted) and the
            skipped directories.
        """
        report = DiscoveryReport()

        for directory_name in self._files.list_directories(base_dir):
            skill_dir = self._paths.join(base_dir, directory_name)
            skill_file = self._paths.join(skill_dir, SKILL_FILE_NAME)

            if not self._files.exists(skill_file):
                logger.debug("No %s in %s, skipping", SKILL_FILE_NAME, skill_dir)
                report.skipped.append(SkippedSkill(skill_dir, SkipReason.MISSING_DEFINITION))
                continue

            try:
                raw = self._files.read_file(skill_file)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Failed to read skill definition %s: %s", skill_file, exc)
                report.skipped.append(SkippedSkill(skill_dir, SkipReason.UNREADABLE, str(exc)))
                continue

            parsed = parse_frontmatter(raw)
            frontmatter = parsed.frontmatter
            if frontmatter.enabled is False:
                logger.debug("Skill at %s is disabled, skipping", skill_dir)
                report.skipped.append(SkippedSkill(skill_dir, SkipReason.DISABLED))
                continue

            skill_id = normalize_id(frontmatter.name or directory_name) or normalize_id(
                directory_name
            )
            if not skill_id:
                logger.debug("Skill at %s has no usable id, skipping", skill_dir)
                report.skipped.append(SkippedSkill(skill_dir, SkipReason.EMPTY_ID))
                continue

            report.skills.append(
                SkillRecord(
                    id=skill_id,
                    name=frontmatter.name or humanize_skill_name(directory_name),
                    description=frontmatter.description or summarize_skill_body(parsed.body),
                    source=source,
                    definition_dir=skill_dir,
                    definition_file_path=skill_file,
                    content=parsed.body.strip(),
                    frontmatter=frontmatter,
                )
            )

        return report

    def discover(self, base_dir: Path, source: SkillSource) -> list[SkillRecord]:
        """Return the skills loaded by ``scan()``, without the skip report."""
        return self.scan(base_dir, source).skills


def resolve_precedence(
    repository: SkillRepository,
    entries: Iterable[SkillSourceEntry],
) -> list[SkillRecord]:
    """Merge skills from several directories, last writer wins.

    Each enabled entry is scanned in order and its records replace any
    earlier record with the same id. The result follows first-seen id order;
    callers impose their own ordering.

    Args:
        repository: Repository used to scan each directory.
        entries: Directories in increasing precedence.

    Returns:
        Merged records, one per id.
    """
    merged: dict[str, SkillRecord] = {}

    for entry in entries:
        if not entry.enabled:
            continue
        for skill in repository.discover(entry.directory, entry.source):
            existing = merged.get(skill.id)
            if existing is not None:
                logger.debug(
                    "Skill '%s' from %s overrides %s",
                    skill.id,
                    skill.definition_dir,
                    existing.definition_dir,
                )
            merged[skill.id] = skill

    return list(merged.values())


def build_source_entries(
    paths: StorePaths,
    agent_id: str,
    config: SkillsConfig,
    path_resolver: PathResolver,
) -> list[SkillSourceEntry]:
    """Return the canonical precedence order for an agent listing.

    Args:
        paths: Store layout.
        agent_id: Normalised agent id.
        config: Resolved skills configuration of the agent.
        path_resolver: Used to expand ``~`` in extra directories.

    Returns:
        Global store, agent-scoped store, then every extra directory.
    """
    entries = [
        SkillSourceEntry(SkillSource.MANAGED, paths.skills_dir, config.include_managed),
        SkillSourceEntry(
            SkillSource.MANAGED, paths.agent_skills_dir(agent_id), config.include_managed
        ),
    ]
    entries.extend(
        SkillSourceEntry(SkillSource.EXTRA, path_resolver.expand_user(extra_dir))
        for extra_dir in config.load.extra_dirs
    )
    return entries
