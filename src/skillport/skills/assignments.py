"""Per-agent skill assignment bookkeeping.

Each agent may own a JSON configuration document at
``<agents>/<agent>/config.json``. This module reads its
``runtime.skills`` section and maintains the ``runtime.skills.assigned``
list and the ``organization.type`` field. Every other key in the document
is preserved as-is.

Role skills are reserved skill ids that switch the agent's organization
type. Whether an agent holds a role is tracked by which role skill is
installed in its store, so role ids are never kept in ``assigned``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from skillport.config.settings import StorePaths
from skillport.ports.base import FileStore
from skillport.skills.config import SkillsConfigInput
from skillport.skills.errors import SkillConfigError

logger = logging.getLogger(__name__)

BOARDS_SKILL_ID = "og-boards"
BOARD_MANAGER_SKILL_ID = "og-board-manager"
BOARD_INDIVIDUAL_SKILL_ID = "og-board-individual"
LEGACY_BOARD_MANAGER_SKILL_ID = "board-manager"
LEGACY_BOARD_INDIVIDUAL_SKILL_ID = "board-individual"

MANAGER_ROLE = "manager"
INDIVIDUAL_ROLE = "individual"

ROLE_SKILL_IDS = frozenset(
    {
        BOARDS_SKILL_ID,
        BOARD_MANAGER_SKILL_ID,
        BOARD_INDIVIDUAL_SKILL_ID,
        LEGACY_BOARD_MANAGER_SKILL_ID,
        LEGACY_BOARD_INDIVIDUAL_SKILL_ID,
    }
)

# Organization type set when a role skill is installed or assigned.
ROLE_ORGANIZATION_TYPES: dict[str, str] = {
    BOARD_MANAGER_SKILL_ID: MANAGER_ROLE,
    LEGACY_BOARD_MANAGER_SKILL_ID: MANAGER_ROLE,
    BOARD_INDIVIDUAL_SKILL_ID: INDIVIDUAL_ROLE,
    LEGACY_BOARD_INDIVIDUAL_SKILL_ID: INDIVIDUAL_ROLE,
}

_RUNTIME_KEY = "runtime"
_ORGANIZATION_KEY = "organization"


def _mapping_or_none(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else None


class _Section(BaseModel):
    model_config = ConfigDict(extra="allow")


class SkillsSection(_Section):
    """``runtime.skills``; only ``assigned`` is interpreted here."""

    assigned: list[Any] | None = None

    @field_validator("assigned", mode="before")
    @classmethod
    def _list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else None

    def normalized_assigned(self) -> list[str]:
        """Trimmed, lowercased and de-duplicated assigned ids."""
        assigned: list[str] = []
        for entry in self.assigned or []:
            normalized = str(entry).strip().lower()
            if normalized and normalized not in assigned:
                assigned.append(normalized)
        return assigned


class RuntimeSection(_Section):
    """``runtime`` section of an agent configuration document."""

    skills: SkillsSection | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _mapping(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class OrganizationSection(_Section):
    """``organization`` section of an agent configuration document."""

    type: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _string(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class AgentConfigDocument(_Section):
    """An agent configuration document.

    Sections holding the wrong JSON type are read as absent. They are only
    replaced when an operation rewrites that section; every other top-level
    key is written back exactly as it was read. Unknown keys at every level
    are kept.
    """

    runtime: RuntimeSection | None = None
    organization: OrganizationSection | None = None

    @field_validator("runtime", "organization", mode="before")
    @classmethod
    def _mapping(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    def ensure_skills_section(self) -> SkillsSection:
        """Return ``runtime.skills``, creating (and marking set) missing sections."""
        if self.runtime is None:
            self.runtime = RuntimeSection()
        if self.runtime.skills is None:
            self.runtime.skills = SkillsSection()
        return self.runtime.skills

    def to_json(
        self,
        original: dict[str, Any] | None = None,
        sections: Iterable[str] | None = None,
    ) -> str:
        """Serialise with 2-space indentation and a trailing newline.

        Keys keep the order they had in ``original``; new keys follow.

        Args:
            original: Document as read from disk.
            sections: Top-level keys taken from the model. Every other key is
                copied from ``original`` unchanged. ``None`` dumps the whole
                model.
        """
        dumped = self.model_dump(mode="json", exclude_unset=True)
        if original is not None:
            if sections is not None:
                dumped = {**original, **{key: dumped[key] for key in sections if key in dumped}}
            dumped = _restore_key_order(dumped, original)
        return json.dumps(dumped, indent=2, ensure_ascii=False) + "\n"


def _restore_key_order(dumped: dict[str, Any], original: dict[str, Any]) -> dict[str, Any]:
    ordered: dict[str, Any] = {}
    for key in [*(k for k in original if k in dumped), *(k for k in dumped if k not in original)]:
        value = dumped[key]
        previous = original.get(key)
        if isinstance(value, dict) and isinstance(previous, dict):
            value = _restore_key_order(value, previous)
        ordered[key] = value
    return ordered


class AssignmentStore:
    """Reads and updates agent configuration documents.

    Agents without a configuration document are left alone: reads return
    ``None`` and writes are silent no-ops.

    Args:
        file_store: Filesystem port.
        paths: Store layout.
    """

    def __init__(self, file_store: FileStore, paths: StorePaths) -> None:
        self._files = file_store
        self._store = paths

    def config_path(self, agent_id: str) -> Path:
        """Location of the configuration document of ``agent_id``."""
        return self._store.agent_config_path(agent_id)

    def read_skills_config(self, agent_id: str) -> SkillsConfigInput | None:
        """Return the raw ``runtime.skills`` section, best-effort.

        Missing, unreadable or malformed documents yield ``None``.
        """
        path = self.config_path(agent_id)
        if not self._files.exists(path):
            return None
        try:
            document, _ = self._load(path)
        except SkillConfigError as exc:
            logger.debug("Ignoring agent configuration: %s", exc)
            return None

        if document.runtime is None or document.runtime.skills is None:
            return None
        return SkillsConfigInput.model_validate(document.runtime.skills.model_dump(exclude_unset=True))

    def assign(self, agent_id: str, skill_id: str) -> bool:
        """Add ``skill_id`` to the agent's assigned skills.

        Returns:
            ``True`` if the document was written.

        Raises:
            SkillConfigError: If the document exists but cannot be parsed.
        """
        path = self.config_path(agent_id)
        if not self._files.exists(path):
            return False

        document, original = self._load(path)
        skills = document.ensure_skills_section()
        assigned = skills.normalized_assigned()
        if skill_id not in assigned:
            assigned.append(skill_id)
        skills.assigned = assigned

        self._write(path, document, original, [_RUNTIME_KEY])
        return True

    def unassign(self, agent_id: str, skill_id: str) -> bool:
        """Remove ``skill_id`` from the agent's assigned skills.

        Returns:
            ``True`` if the id was present and the document was rewritten.

        Raises:
            SkillConfigError: If the document exists but cannot be parsed.
        """
        path = self.config_path(agent_id)
        if not self._files.exists(path):
            return False

        document, original = self._load(path)
        assigned = (
            document.runtime.skills.normalized_assigned()
            if document.runtime is not None and document.runtime.skills is not None
            else []
        )
        remaining = [entry for entry in assigned if entry != skill_id]
        if len(remaining) == len(assigned):
            return False

        document.ensure_skills_section().assigned = remaining
        self._write(path, document, original, [_RUNTIME_KEY])
        return True

    def reconcile_roles(self, agent_id: str, skill_id: str) -> bool:
        """Apply the side effects of installing a role skill.

        Sets ``organization.type`` for manager and individual role skills and
        strips every role id from ``assigned``. Non-role ids are ignored.

        Returns:
            ``True`` if the document was written.

        Raises:
            SkillConfigError: If the document exists but cannot be parsed.
        """
        normalized = skill_id.strip().lower()
        if normalized not in ROLE_SKILL_IDS:
            return False

        path = self.config_path(agent_id)
        if not self._files.exists(path):
            return False

        document, original = self._load(path)
        sections = [_RUNTIME_KEY]
        role = ROLE_ORGANIZATION_TYPES.get(normalized)
        if role is not None:
            organization = document.organization or OrganizationSection()
            organization.type = role
            document.organization = organization
            sections.append(_ORGANIZATION_KEY)

        skills = document.ensure_skills_section()
        skills.assigned = [entry for entry in skills.normalized_assigned() if entry not in ROLE_SKILL_IDS]

        self._write(path, document, original, sections)
        logger.info("Reconciled role skill '%s' for agent '%s' (type=%s)", normalized, agent_id, role)
        return True

    def _load(self, path: Path) -> tuple[AgentConfigDocument, dict[str, Any]]:
        try:
            raw = self._files.read_file(path)
            data = json.loads(raw)
            return AgentConfigDocument.model_validate(data), data
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise SkillConfigError(path, cause=exc) from exc

    def _write(
        self,
        path: Path,
        document: AgentConfigDocument,
        original: dict[str, Any],
        sections: list[str],
    ) -> None:
        self._files.write_file(path, document.to_json(original, sections))
