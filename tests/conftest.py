"""Shared test fixtures and configuration for skillport tests."""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from skillport.config.settings import StorePaths
from skillport.ports.base import CommandRequest, CommandResult, CommandRunner
from skillport.ports.local import LocalFileStore, LocalPathResolver
from skillport.skills.service import SkillService

_SKILL_MD_TEMPLATE = """\
---
name: {name}
description: {description}
---

# {name}

{body}
"""


class FakeCloneRunner(CommandRunner):
    """``CommandRunner`` that emulates ``git clone`` by copying a local tree.

    Args:
        repository: Directory copied to the clone target. ``None`` clones
            an empty repository.
        code: Exit code to report. Non-zero codes skip the copy.
        stdout: Captured standard output to report.
        stderr: Captured standard error to report.
    """

    def __init__(
        self,
        repository: Path | None = None,
        *,
        code: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.repository = repository
        self.code = code
        self.stdout = stdout
        self.stderr = stderr
        self.requests: list[CommandRequest] = []
        self.clone_targets: list[Path] = []

    def run(self, request: CommandRequest) -> CommandResult:
        self.requests.append(request)
        target = Path(request.args[-1])
        self.clone_targets.append(target)
        if self.code != 0:
            return CommandResult(code=self.code, stdout=self.stdout, stderr=self.stderr)

        if self.repository is not None:
            shutil.copytree(self.repository, target)
        else:
            target.mkdir(parents=True)
        return CommandResult(code=0, stdout=self.stdout, stderr=self.stderr)


def write_skill(
    base_dir: Path,
    directory: str,
    *,
    name: str | None = None,
    description: str | None = None,
    body: str = "Follow these steps.",
    content: str | None = None,
) -> Path:
    """Create ``<base_dir>/<directory>/SKILL.md`` and return the file path.

    ``content`` replaces the generated document entirely.
    """
    skill_dir = base_dir / directory
    skill_dir.mkdir(parents=True, exist_ok=True)
    if content is None:
        content = _SKILL_MD_TEMPLATE.format(
            name=name or directory,
            description=description or f"Use {directory} when needed.",
            body=body,
        )
    skill_file = skill_dir / "SKILL.md"
    skill_file.write_text(content, encoding="utf-8")
    return skill_file


@pytest.fixture
def store_paths(tmp_path: Path) -> StorePaths:
    """Store layout rooted in a temporary home directory."""
    return StorePaths.from_home(tmp_path / "home")


@pytest.fixture
def file_store() -> LocalFileStore:
    return LocalFileStore()


@pytest.fixture
def path_resolver() -> LocalPathResolver:
    return LocalPathResolver()


@pytest.fixture
def make_skill() -> Callable[..., Path]:
    """Factory fixture creating skill directories.

    Usage:
        def test_something(make_skill, store_paths):
            make_skill(store_paths.skills_dir, "writing", name="Writing")
    """
    return write_skill


@pytest.fixture
def write_agent_config(store_paths: StorePaths) -> Callable[[str, dict[str, Any]], Path]:
    """Factory fixture writing ``<agents>/<agent>/config.json``."""

    def _write(agent_id: str, document: dict[str, Any]) -> Path:
        path = store_paths.agent_config_path(agent_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_agent_config(store_paths: StorePaths) -> Callable[[str], dict[str, Any]]:
    """Factory fixture reading an agent configuration document."""

    def _read(agent_id: str) -> dict[str, Any]:
        return json.loads(store_paths.agent_config_path(agent_id).read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def repository(tmp_path: Path) -> Path:
    """Empty directory used as the source of a fake clone."""
    repo = tmp_path / "remote-repo"
    repo.mkdir()
    return repo


@pytest.fixture
def make_clone_runner() -> type[FakeCloneRunner]:
    """Factory fixture for clone runners with custom results.

    Usage:
        def test_failure(make_clone_runner):
            runner = make_clone_runner(code=128, stderr="fatal: not found")
    """
    return FakeCloneRunner


@pytest.fixture
def clone_runner(repository: Path) -> FakeCloneRunner:
    """Clone runner copying the ``repository`` fixture."""
    return FakeCloneRunner(repository)


@pytest.fixture
def service(store_paths: StorePaths, clone_runner: FakeCloneRunner) -> SkillService:
    """SkillService on the local filesystem with a fake clone runner."""
    return SkillService(
        store_paths,
        LocalFileStore(),
        LocalPathResolver(),
        clone_runner,
    )
