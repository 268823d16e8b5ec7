"""Install source resolution.

Turns an install source (local path, remote repository, or an existing
managed skill) into a concrete directory holding a ``SKILL.md``.

Remote repositories are shallow-cloned into a temporary directory below
``<home>/.tmp/skill-installs/``. The skill inside the clone is located by,
in order:

1. the sub-path embedded in a ``github.com/<owner>/<repo>/tree/<ref>/<path>`` URL,
2. conventional locations for the skill name (``<id>``, ``skills/<id>``,
   ``.claude/skills/<id>`` and other per-provider directories),
3. a depth-bounded walk of the whole clone, matched against the skill name,
   or the only skill found.

The clone is removed when the ``resolve()`` context exits, on success and
on failure.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from skillport.config.settings import StorePaths
from skillport.ids import normalize_id
from skillport.ports.base import CommandRequest, CommandRunner, FileStore, PathResolver
from skillport.skills.config import InstallSourceKind
from skillport.skills.errors import (
    SkillAmbiguityError,
    SkillNotFoundError,
    SkillSourceError,
    SkillValidationError,
)
from skillport.skills.loader import SKILL_FILE_NAME

logger = logging.getLogger(__name__)

# Deepest directory level inspected when searching a cloned repository.
MAX_SEARCH_DEPTH = 7

# Repository-relative directories that conventionally hold skills.
_CONVENTIONAL_SKILL_PARENTS: tuple[str, ...] = (
    "",
    "skills",
    ".claude/skills",
    ".claude-plugin/skills",
    ".agents/skills",
    ".agent/skills",
    ".cursor/skills",
    ".copilot/skills",
    ".opencode/skills",
    ".gemini/skills",
)

_GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})


# ---------------------------------------------------------------------------
# Source variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocalPathSource:
    """A skill directory, or a ``SKILL.md`` file, on the local filesystem."""

    path: str


@dataclass(frozen=True)
class RemoteUrlSource:
    """A remote repository plus the skill name used to search inside it."""

    url: str
    skill_hint: str


@dataclass(frozen=True)
class InlineSource:
    """Inline ``SKILL.md`` content; ``None`` asks for a generated template."""

    content: str | None
    description: str


@dataclass(frozen=True)
class ManagedSource:
    """An existing skill directory in the global store."""

    skill_dir: Path


InstallSource = LocalPathSource | RemoteUrlSource | InlineSource | ManagedSource


@dataclass(frozen=True)
class ResolvedSource:
    """A directory containing the skill files to install."""

    source_dir: Path
    kind: InstallSourceKind


@dataclass(frozen=True)
class TreeUrl:
    """A clonable URL and the repository sub-path extracted from it."""

    clone_url: str
    path_hint: str | None = None


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def parse_tree_url(url: str) -> TreeUrl:
    """Split a GitHub ``tree`` URL into a clonable URL and a path hint.

    ``https://github.com/acme/skills/tree/main/writing`` becomes
    ``https://github.com/acme/skills.git`` with hint ``writing``. Any other
    URL is returned unchanged with no hint.
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return TreeUrl(url)

    if hostname not in _GITHUB_HOSTS:
        return TreeUrl(url)

    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 4 or segments[2] != "tree":
        return TreeUrl(url)

    owner = segments[0]
    repo = segments[1]
    if repo.lower().endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return TreeUrl(url)

    path_hint = "/".join(segments[4:]) or None
    return TreeUrl(f"https://github.com/{owner}/{repo}.git", path_hint)


def normalize_relative_directory(value: str | None) -> str | None:
    """Normalise a relative directory, rejecting anything that escapes upward.

    Backslashes become ``/``, leading and trailing slashes and empty segments
    are dropped. Returns ``None`` for blank input or any ``..`` segment.
    """
    if not value:
        return None

    normalized = value.strip().replace("\\", "/").strip("/")
    if not normalized or normalized.startswith(".."):
        return None

    parts = [part.strip() for part in normalized.split("/") if part.strip()]
    if not parts or ".." in parts:
        return None
    return "/".join(parts)


def walk_skill_directories(
    file_store: FileStore,
    path_resolver: PathResolver,
    root: Path,
    max_depth: int = MAX_SEARCH_DEPTH,
) -> Iterator[Path]:
    """Yield every directory under ``root`` that contains a ``SKILL.md``.

    ``root`` itself is depth 0; directories deeper than ``max_depth`` are not
    inspected. Children whose name starts with ``.git`` are skipped. The
    order is depth-first; use ``dedupe_sorted`` for a stable listing.
    """
    pending: list[tuple[Path, int]] = [(root, 0)]

    while pending:
        directory, depth = pending.pop()
        if file_store.exists(path_resolver.join(directory, SKILL_FILE_NAME)):
            yield directory
        if depth >= max_depth:
            continue

        children = [
            name
            for name in file_store.list_directories(directory)
            if name and not name.startswith(".git")
        ]
        pending.extend((path_resolver.join(directory, name), depth + 1) for name in reversed(children))


def dedupe_sorted(paths: Iterable[Path]) -> list[Path]:
    """Drop duplicate paths and sort by their string form."""
    return sorted(set(paths), key=str)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class InstallSourceResolver:
    """Resolves install sources into directories ready to be copied.

    Example::

        resolver = InstallSourceResolver(files, path_resolver, paths, runner)
        with resolver.resolve(RemoteUrlSource(url, "writing")) as resolved:
            files.copy_dir(resolved.source_dir, target_dir)

    Args:
        file_store: Filesystem port.
        path_resolver: Path port.
        paths: Store layout (hosts the temporary clone directories).
        command_runner: Runs the clone command. Required for remote sources.
        clone_command: Version-control executable.
    """

    def __init__(
        self,
        file_store: FileStore,
        path_resolver: PathResolver,
        paths: StorePaths,
        command_runner: CommandRunner | None = None,
        clone_command: str = "git",
    ) -> None:
        self._files = file_store
        self._paths = path_resolver
        self._store = paths
        self._runner = command_runner
        self._clone_command = clone_command

    @contextmanager
    def resolve(
        self,
        source: LocalPathSource | RemoteUrlSource | ManagedSource,
    ) -> Iterator[ResolvedSource]:
        """Resolve ``source`` for the duration of the ``with`` block.

        Raises:
            SkillNotFoundError: If no skill definition can be located.
            SkillAmbiguityError: If a repository holds several unmatched skills.
            SkillSourceError: If the repository cannot be cloned.
            SkillValidationError: If the source is malformed.
        """
        if isinstance(source, LocalPathSource):
            yield self.resolve_local_path(source.path)
        elif isinstance(source, RemoteUrlSource):
            with self.resolve_remote(source.url, source.skill_hint) as resolved:
                yield resolved
        elif isinstance(source, ManagedSource):
            yield ResolvedSource(source.skill_dir, InstallSourceKind.MANAGED)
        else:
            raise TypeError(f"Unsupported install source: {type(source).__name__}")

    def resolve_local_path(self, path: str) -> ResolvedSource:
        """Resolve a local skill directory or ``SKILL.md`` file.

        Raises:
            SkillNotFoundError: If no ``SKILL.md`` exists at the location.
        """
        source_path = self._paths.expand_user(path.strip())
        if source_path.name.lower() == SKILL_FILE_NAME.lower():
            skill_file = source_path
            source_dir = source_path.parent
        else:
            skill_file = self._paths.join(source_path, SKILL_FILE_NAME)
            source_dir = source_path

        if not self._files.exists(skill_file):
            raise SkillNotFoundError(
                name=source_dir.name,
                path=skill_file,
                message=f"Source skill not found: {skill_file}",
            )
        return ResolvedSource(source_dir, InstallSourceKind.SOURCE_PATH)

    @contextmanager
    def resolve_remote(self, url: str, skill_hint: str) -> Iterator[ResolvedSource]:
        """Clone ``url`` and locate the skill matching ``skill_hint``.

        The temporary clone root is removed when the context exits.

        Raises:
            SkillSourceError: If no command runner is configured or the clone fails.
            SkillValidationError: If ``url`` is blank.
            SkillNotFoundError: If the repository holds no skill.
            SkillAmbiguityError: If several skills remain and none matches.
        """
        if self._runner is None:
            raise SkillSourceError(
                url,
                message="Installing skills from URL requires a configured command runner.",
            )

        source_url = url.strip()
        if not source_url:
            raise SkillValidationError("sourceUrl cannot be empty.")

        temp_root = self._paths.join(self._store.install_temp_dir, str(uuid.uuid4()))
        clone_dir = self._paths.join(temp_root, "repo")
        tree_url = parse_tree_url(source_url)

        self._files.ensure_dir(temp_root)
        try:
            self._clone(source_url, tree_url.clone_url, clone_dir)
            skill_dir = self.find_skill_directory(clone_dir, skill_hint, tree_url.path_hint)
            logger.info("Resolved skill '%s' from %s at %s", skill_hint, source_url, skill_dir)
            yield ResolvedSource(skill_dir, InstallSourceKind.SOURCE_URL)
        finally:
            self._files.remove_dir(temp_root)

    def find_skill_directory(
        self,
        repository_dir: Path,
        skill_hint: str,
        path_hint: str | None = None,
    ) -> Path:
        """Locate the skill to install inside a repository checkout.

        Args:
            repository_dir: Root of the checkout.
            skill_hint: Skill name to look for; normalised before matching.
            path_hint: Repository-relative directory taken from the URL.

        Returns:
            Directory containing the chosen ``SKILL.md``.

        Raises:
            SkillNotFoundError: If the repository holds no skill.
            SkillAmbiguityError: If several skills remain and none matches.
        """
        normalized_hint = normalize_id(skill_hint)
        normalized_path_hint = normalize_relative_directory(path_hint)

        if normalized_path_hint:
            hinted = self._paths.join(repository_dir, normalized_path_hint)
            if self._has_skill_file(hinted):
                return hinted

        if normalized_hint:
            for parent in _CONVENTIONAL_SKILL_PARENTS:
                relative = f"{parent}/{normalized_hint}" if parent else normalized_hint
                candidate = self._paths.join(repository_dir, relative)
                if self._has_skill_file(candidate):
                    return candidate

        discovered = dedupe_sorted(walk_skill_directories(self._files, self._paths, repository_dir))

        if normalized_hint:
            for directory in discovered:
                relative = self._paths.relative(directory, repository_dir)
                if (
                    normalize_id(directory.name.strip()) == normalized_hint
                    or normalize_id(relative) == normalized_hint
                ):
                    return directory

        if len(discovered) == 1:
            return discovered[0]

        if not discovered:
            raise SkillNotFoundError(
                name=skill_hint,
                message="No valid SKILL.md definitions were found in the source URL.",
            )

        raise SkillAmbiguityError(
            [self._paths.relative(directory, repository_dir) for directory in discovered]
        )

    def _has_skill_file(self, directory: Path) -> bool:
        return self._files.exists(self._paths.join(directory, SKILL_FILE_NAME))

    def _clone(self, source_url: str, clone_url: str, clone_dir: Path) -> None:
        result = self._runner.run(
            CommandRequest(
                command=self._clone_command,
                args=["clone", "--depth", "1", clone_url, str(clone_dir)],
                cwd=self._store.home_dir,
            )
        )
        if result.code != 0:
            detail = result.stderr.strip() or result.stdout.strip()
            logger.error("Clone of %s failed with exit code %d: %s", source_url, result.code, detail)
            raise SkillSourceError(source_url, detail)
