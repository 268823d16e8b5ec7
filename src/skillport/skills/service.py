"""Top-level SkillService facade for the skills engine.

Composes discovery, precedence merging, prompt assembly, install-source
resolution, workspace mirroring and assignment bookkeeping behind the
public list / prompt / install / assign / remove operations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from skillport.config.logging_config import configure_logging
from skillport.config.settings import SkillportSettings, StorePaths
from skillport.ids import DEFAULT_AGENT_ID, normalize_id
from skillport.ports.base import CommandRunner, FileStore, PathResolver
from skillport.ports.local import LocalFileStore, LocalPathResolver, SubprocessCommandRunner
from skillport.skills.assignments import AssignmentStore
from skillport.skills.config import (
    AgentSkillRemoval,
    InstallRequest,
    InstallResult,
    InstallSourceKind,
    RemoveRequest,
    RemoveResult,
    SkillRecord,
    SkillsConfig,
    SkillsConfigInput,
    SkillScope,
    SkillSource,
    SkillsPromptResult,
    WorkspaceOptions,
    resolve_skills_config,
)
from skillport.skills.discovery import SkillRepository, build_source_entries, resolve_precedence
from skillport.skills.errors import SkillNotFoundError, SkillValidationError
from skillport.skills.loader import SKILL_FILE_NAME, ensure_trailing_newline, humanize_skill_name
from skillport.skills.prompt import build_skills_prompt
from skillport.skills.sources import (
    InlineSource,
    InstallSource,
    InstallSourceResolver,
    LocalPathSource,
    ManagedSource,
    RemoteUrlSource,
)
from skillport.skills.templates import render_skill_markdown
from skillport.skills.workspace import WorkspaceSynchronizer

logger = logging.getLogger(__name__)

RuntimeSkillsConfig = SkillsConfigInput | Mapping[str, Any] | None


RequestT = TypeVar("RequestT", bound=BaseModel)


def _sorted_by_id(skills: list[SkillRecord]) -> list[SkillRecord]:
    return sorted(skills, key=lambda skill: skill.id)


def _validate_request(model: type[RequestT], request: Any) -> RequestT:
    """Coerce a mapping into ``model``, reporting the first invalid field."""
    if isinstance(request, model):
        return request
    try:
        return model.model_validate(request)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "request"
        raise SkillValidationError(f"Invalid {field}: {error['msg']}") from exc


class SkillService:
    """Facade for the skills engine.

    Every call reads the directory tree afresh; nothing is cached between
    calls. Operations are not serialised against each other, so concurrent
    installs of the same skill id race on directory replacement.

    Example::

        service = SkillService.from_settings()
        service.install_skill(InstallRequest(skill_name="writing", scope="global"))
        prompt = service.build_skills_prompt("main").prompt

    Args:
        paths: Store layout.
        file_store: Filesystem port.
        path_resolver: Path port.
        command_runner: Command port; required only for URL installs.
        clone_command: Version-control executable for URL installs.
        default_agent_id: Agent used when a request names none.
        workspace_skill_directories: Mirror directories used when an
            operation receives no ``WorkspaceOptions``.
    """

    def __init__(
        self,
        paths: StorePaths,
        file_store: FileStore | None = None,
        path_resolver: PathResolver | None = None,
        command_runner: CommandRunner | None = None,
        *,
        clone_command: str = "git",
        default_agent_id: str = DEFAULT_AGENT_ID,
        workspace_skill_directories: list[str] | None = None,
    ) -> None:
        self._store = paths
        self._files = file_store or LocalFileStore()
        self._paths = path_resolver or LocalPathResolver()
        self._default_agent_id = normalize_id(default_agent_id) or DEFAULT_AGENT_ID
        self._workspace_skill_directories = list(workspace_skill_directories or [])

        self._repository = SkillRepository(self._files, self._paths)
        self._sources = InstallSourceResolver(
            self._files,
            self._paths,
            paths,
            command_runner=command_runner,
            clone_command=clone_command,
        )
        self._workspace = WorkspaceSynchronizer(self._files, self._paths, paths)
        self._assignments = AssignmentStore(self._files, paths)

    @classmethod
    def from_settings(cls, settings: SkillportSettings | None = None) -> SkillService:
        """Build a service backed by the local filesystem and ``subprocess``.

        Also applies ``settings.logging`` to the ``skillport`` logger.
        """
        settings = settings or SkillportSettings()
        configure_logging(settings.logging)
        return cls(
            settings.paths,
            LocalFileStore(),
            LocalPathResolver(),
            SubprocessCommandRunner(timeout=settings.clone_timeout_seconds),
            clone_command=settings.clone_command,
            default_agent_id=settings.default_agent_id,
            workspace_skill_directories=settings.workspace_skill_directories,
        )

    @property
    def paths(self) -> StorePaths:
        """Get the store layout."""
        return self._store

    @property
    def assignments(self) -> AssignmentStore:
        """Get the assignment store (for advanced use)."""
        return self._assignments

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_skills(
        self,
        agent_id: str | None = None,
        runtime_config: RuntimeSkillsConfig = None,
    ) -> list[SkillRecord]:
        """List the skills visible to an agent, sorted by id.

        Merges the global store, the agent-scoped store and any extra
        directories (later layers win), then applies the ``assigned``
        allow-list when it is non-empty.

        Args:
            agent_id: Agent to list for. Defaults to the default agent.
            runtime_config: ``runtime.skills`` override. Read from the
                agent's configuration document when ``None``.

        Returns:
            Skill records; empty when skills are disabled for the agent.
        """
        normalized_agent = self._agent_id(agent_id)
        config = self._resolve_config(normalized_agent, runtime_config)
        return self._list(normalized_agent, config)

    def list_global_skills(self) -> list[SkillRecord]:
        """List the skills in the global store, sorted by id."""
        return _sorted_by_id(self._repository.discover(self._store.skills_dir, SkillSource.MANAGED))

    def build_skills_prompt(
        self,
        agent_id: str | None = None,
        runtime_config: RuntimeSkillsConfig = None,
    ) -> SkillsPromptResult:
        """Render the skills block for an agent's model prompt.

        Skills with ``disable-model-invocation: true`` are left out and the
        remainder is packed greedily into the configured budget.

        Returns:
            ``SkillsPromptResult``; the prompt is empty when skills are
            disabled for the agent.
        """
        normalized_agent = self._agent_id(agent_id)
        config = self._resolve_config(normalized_agent, runtime_config)
        if not config.enabled:
            return SkillsPromptResult(prompt="", skills=[])

        eligible = [
            skill
            for skill in self._list(normalized_agent, config)
            if skill.frontmatter.disable_model_invocation is not True
        ]
        return build_skills_prompt(eligible, config.prompt)

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install_skill(
        self,
        request: InstallRequest | Mapping[str, Any],
        options: WorkspaceOptions | None = None,
    ) -> InstallResult:
        """Install a skill into the global or an agent-scoped store.

        The source is, in order of preference: ``source_path``,
        ``source_url``, inline ``content``, the existing global copy (agent
        scope only), or a generated placeholder. Sources with files replace
        the target directory. Agent-scoped installs are then assigned,
        role-reconciled and mirrored into the agent's workspace.

        Args:
            request: Install request, or a mapping validated into one.
            options: Workspace mirror options for agent-scoped installs.

        Returns:
            ``InstallResult`` describing what was written.

        Raises:
            SkillValidationError: If the request is invalid.
            SkillNotFoundError: If the source skill cannot be located.
            SkillAmbiguityError: If a repository holds several unmatched skills.
            SkillSourceError: If a repository cannot be cloned.
            SkillConfigError: If the agent configuration document is malformed.
        """
        request = _validate_request(InstallRequest, request)
        if request.source_path and request.source_url:
            raise SkillValidationError("Use either sourcePath or sourceUrl, not both.")

        scope = request.scope
        agent_id = self._agent_id(request.agent_id)
        requested_name = request.skill_name.strip() or (request.source_skill_name or "").strip()
        skill_id = normalize_id(requested_name)
        if not skill_id:
            raise SkillValidationError("Skill name must contain at least one alphanumeric character.")

        global_dir = self._paths.join(self._store.skills_dir, skill_id)
        store_dir = self._store.skills_dir if scope is SkillScope.GLOBAL else self._store.agent_skills_dir(agent_id)
        target_dir = self._paths.join(store_dir, skill_id)
        target_file = self._paths.join(target_dir, SKILL_FILE_NAME)
        replaced = self._files.exists(target_dir)

        source = self._select_source(request, scope, requested_name or skill_id, skill_id, global_dir)
        installed_path = target_file
        mirror_source = target_dir

        if isinstance(source, InlineSource):
            kind = InstallSourceKind.GENERATED
            content = source.content
            if content is None:
                content = render_skill_markdown(humanize_skill_name(skill_id), source.description)
            self._files.ensure_dir(target_dir)
            self._files.write_file(target_file, ensure_trailing_newline(content))
        elif isinstance(source, ManagedSource):
            with self._sources.resolve(source) as resolved:
                kind = resolved.kind
                if replaced:
                    self._files.remove_dir(target_dir)
                installed_path = self._paths.join(resolved.source_dir, SKILL_FILE_NAME)
                mirror_source = resolved.source_dir
        else:
            self._files.ensure_dir(store_dir)
            with self._sources.resolve(source) as resolved:
                kind = resolved.kind
                self._files.remove_dir(target_dir)
                self._files.copy_dir(resolved.source_dir, target_dir)

        logger.info("Installed skill '%s' into %s store (source=%s)", skill_id, scope.value, kind.value)

        workspace_paths: list[Path] = []
        if scope is SkillScope.AGENT:
            workspace_paths = self._install_for_agent(agent_id, skill_id, options, mirror_source)

        return InstallResult(
            scope=scope,
            skill_id=skill_id,
            skill_name=requested_name or skill_id,
            source=kind,
            installed_path=installed_path,
            agent_id=agent_id if scope is SkillScope.AGENT else None,
            workspace_install_paths=workspace_paths,
            replaced=replaced,
        )

    def assign_installed_skill_to_agent(
        self,
        agent_id: str | None,
        skill_id: str,
        options: WorkspaceOptions | None = None,
    ) -> list[Path]:
        """Assign a globally installed skill to an agent and mirror it.

        Returns:
            Workspace ``SKILL.md`` paths written.

        Raises:
            SkillValidationError: If ``skill_id`` has no alphanumeric character.
            SkillNotFoundError: If the skill is not in the global store.
        """
        normalized_agent = self._agent_id(agent_id)
        normalized_skill = self._skill_id(skill_id)

        global_dir = self._paths.join(self._store.skills_dir, normalized_skill)
        skill_file = self._paths.join(global_dir, SKILL_FILE_NAME)
        if not self._files.exists(skill_file):
            raise SkillNotFoundError(
                name=normalized_skill,
                path=skill_file,
                message=f'Skill "{normalized_skill}" is not installed in global storage.',
            )

        logger.info("Assigning skill '%s' to agent '%s'", normalized_skill, normalized_agent)
        return self._install_for_agent(normalized_agent, normalized_skill, options, global_dir)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_skill(
        self,
        request: RemoveRequest | Mapping[str, Any],
        options: WorkspaceOptions | None = None,
    ) -> RemoveResult:
        """Remove a skill from the global store or from an agent.

        Global removals delete only the global copy; agent assignments and
        workspace mirrors are left in place. Agent removals delete the
        agent-scoped copy, the assignment and the workspace mirrors.

        Raises:
            SkillValidationError: If the skill id has no alphanumeric character.
            SkillConfigError: If the agent configuration document is malformed.
        """
        request = _validate_request(RemoveRequest, request)
        skill_id = self._skill_id(request.skill_id)

        if request.scope is SkillScope.GLOBAL:
            global_dir = self._paths.join(self._store.skills_dir, skill_id)
            removed = self._files.exists(global_dir)
            self._files.remove_dir(global_dir)
            if removed:
                logger.info("Removed skill '%s' from global store", skill_id)
            return RemoveResult(scope=SkillScope.GLOBAL, skill_id=skill_id, removed_from_global=removed)

        agent_id = self._agent_id(request.agent_id)
        removal = self._remove_for_agent(agent_id, skill_id, options)
        return RemoveResult(
            scope=SkillScope.AGENT,
            skill_id=skill_id,
            agent_id=agent_id,
            removed_from_agent_store=removal.removed_from_agent_store,
            removed_from_config=removal.removed_from_config,
            removed_from_workspace=removal.removed_from_workspace,
            removed_from_agent_ids=[agent_id] if removal.changed else [],
            removed_workspace_paths=removal.removed_workspace_paths,
        )

    def remove_assigned_skill_from_agent(
        self,
        agent_id: str | None,
        skill_id: str,
        options: WorkspaceOptions | None = None,
    ) -> AgentSkillRemoval:
        """Remove a skill from an agent's store, assignments and workspace."""
        return self._remove_for_agent(self._agent_id(agent_id), self._skill_id(skill_id), options)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _agent_id(self, value: str | None) -> str:
        return normalize_id(value) or self._default_agent_id

    @staticmethod
    def _skill_id(value: str | None) -> str:
        skill_id = normalize_id(value)
        if not skill_id:
            raise SkillValidationError("Skill id must contain at least one alphanumeric character.")
        return skill_id

    def _workspace_options(self, options: WorkspaceOptions | None) -> WorkspaceOptions:
        if options is not None:
            return options
        return WorkspaceOptions(skill_directories=list(self._workspace_skill_directories))

    def _resolve_config(self, agent_id: str, runtime_config: RuntimeSkillsConfig) -> SkillsConfig:
        if runtime_config is None:
            runtime_config = self._assignments.read_skills_config(agent_id)
        return resolve_skills_config(runtime_config)

    def _list(self, agent_id: str, config: SkillsConfig) -> list[SkillRecord]:
        if not config.enabled:
            return []

        entries = build_source_entries(self._store, agent_id, config, self._paths)
        merged = resolve_precedence(self._repository, entries)
        if config.assigned:
            allowed = set(config.assigned)
            merged = [skill for skill in merged if skill.id in allowed]
        return _sorted_by_id(merged)

    def _select_source(
        self,
        request: InstallRequest,
        scope: SkillScope,
        requested_name: str,
        skill_id: str,
        global_dir: Path,
    ) -> InstallSource:
        if request.source_path:
            return LocalPathSource(request.source_path)
        if request.source_url:
            return RemoteUrlSource(request.source_url, request.source_skill_name or skill_id)
        if (
            request.content is None
            and scope is SkillScope.AGENT
            and self._files.exists(self._paths.join(global_dir, SKILL_FILE_NAME))
        ):
            return ManagedSource(global_dir)

        description = (request.description or "").strip() or f"Skill instructions for {requested_name}."
        return InlineSource(request.content, description)

    def _install_for_agent(
        self,
        agent_id: str,
        skill_id: str,
        options: WorkspaceOptions | None,
        source_dir: Path | None,
    ) -> list[Path]:
        self._assignments.assign(agent_id, skill_id)
        self._assignments.reconcile_roles(agent_id, skill_id)
        return self._workspace.sync(agent_id, skill_id, self._workspace_options(options), source_dir)

    def _remove_for_agent(
        self,
        agent_id: str,
        skill_id: str,
        options: WorkspaceOptions | None,
    ) -> AgentSkillRemoval:
        agent_dir = self._paths.join(self._store.agent_skills_dir(agent_id), skill_id)
        removed_from_store = self._files.exists(agent_dir)
        if removed_from_store:
            self._files.remove_dir(agent_dir)

        removed_from_config = self._assignments.unassign(agent_id, skill_id)
        workspace_paths = self._workspace.remove(agent_id, skill_id, self._workspace_options(options))

        removal = AgentSkillRemoval(
            removed_from_config=removed_from_config,
            removed_from_agent_store=removed_from_store,
            removed_from_workspace=bool(workspace_paths),
            removed_workspace_paths=workspace_paths,
        )
        if removal.changed:
            logger.info("Removed skill '%s' from agent '%s'", skill_id, agent_id)
        return removal
