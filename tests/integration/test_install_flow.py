"""End-to-end install, assign, list and remove flows on a real directory tree.

These tests drive ``SkillService`` through the local filesystem ports. Remote
clones are emulated by copying a prepared repository directory.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from skillport.config.settings import StorePaths
from skillport.skills import (
    InstallRequest,
    InstallSourceKind,
    RemoveRequest,
    SkillAmbiguityError,
    SkillScope,
    SkillService,
    SkillSource,
    SkillSourceError,
    WorkspaceOptions,
)

pytestmark = pytest.mark.integration

WriteConfig = Callable[[str, dict[str, Any]], Path]
ReadConfig = Callable[[str], dict[str, Any]]


def _leftover_clones(store_paths: StorePaths) -> list[Path]:
    if not store_paths.install_temp_dir.exists():
        return []
    return list(store_paths.install_temp_dir.iterdir())


class TestGlobalListing:
    def test_frontmatter_name_becomes_id(
        self, service: SkillService, store_paths: StorePaths, make_skill: Callable[..., Path]
    ) -> None:
        make_skill(store_paths.skills_dir, "writing", content="---\nname: Writing\n---\n\nWrite clearly.\n")

        skills = service.list_global_skills()

        assert len(skills) == 1
        assert skills[0].id == "writing"
        assert skills[0].source is SkillSource.MANAGED
        assert skills[0].description == "Write clearly."


class TestRemoteInstall:
    """Installs from a repository URL."""

    def test_tree_url_for_agent(
        self,
        service: SkillService,
        store_paths: StorePaths,
        repository: Path,
        clone_runner,
        make_skill: Callable[..., Path],
    ) -> None:
        make_skill(repository, "writing", body="Remote instructions.")

        result = service.install_skill(
            {
                "scope": "agent",
                "agent_id": "eng",
                "skill_name": "Writing",
                "source_url": "https://github.com/acme/skills/tree/main/writing",
            }
        )

        assert result.source is InstallSourceKind.SOURCE_URL
        assert result.skill_id == "writing"
        assert result.workspace_install_paths == []
        assert result.installed_path == store_paths.agent_skills_dir("eng") / "writing" / "SKILL.md"
        assert "Remote instructions." in result.installed_path.read_text(encoding="utf-8")

        [request] = clone_runner.requests
        assert request.command == "git"
        assert request.args[:4] == ["clone", "--depth", "1", "https://github.com/acme/skills.git"]
        assert _leftover_clones(store_paths) == []

    def test_tree_url_mirrors_when_configured(
        self,
        service: SkillService,
        store_paths: StorePaths,
        repository: Path,
        make_skill: Callable[..., Path],
    ) -> None:
        make_skill(repository, "writing")

        result = service.install_skill(
            InstallRequest(
                agent_id="eng",
                skill_name="Writing",
                source_url="https://github.com/acme/skills/tree/main/writing",
            ),
            WorkspaceOptions(skill_directories=[".agents/skills"]),
        )

        assert result.workspace_install_paths == [
            store_paths.workspaces_dir / "eng" / ".agents" / "skills" / "writing" / "SKILL.md"
        ]

    def test_ambiguous_repository(
        self,
        service: SkillService,
        store_paths: StorePaths,
        repository: Path,
        make_skill: Callable[..., Path],
    ) -> None:
        make_skill(repository, "a")
        make_skill(repository, "b")

        with pytest.raises(SkillAmbiguityError) as exc_info:
            service.install_skill(
                InstallRequest(skill_name="other", scope=SkillScope.GLOBAL, source_url="https://example.com/repo.git")
            )

        assert exc_info.value.candidates == ["a", "b"]
        assert "a, b" in str(exc_info.value)
        assert not (store_paths.skills_dir / "other").exists()
        assert _leftover_clones(store_paths) == []

    def test_clone_failure_surfaces_output(
        self,
        store_paths: StorePaths,
        make_clone_runner,
    ) -> None:
        runner = make_clone_runner(code=128, stderr="fatal: repository not found\n")
        service = SkillService(store_paths, command_runner=runner)

        with pytest.raises(SkillSourceError, match="fatal: repository not found"):
            service.install_skill(
                InstallRequest(skill_name="x", scope=SkillScope.GLOBAL, source_url="https://example.com/missing.git")
            )

        assert _leftover_clones(store_paths) == []


class TestRoleSkills:
    """Role skills switch the organization type and stay out of ``assigned``."""

    def test_install_manager_role(
        self,
        service: SkillService,
        write_agent_config: WriteConfig,
        read_agent_config: ReadConfig,
    ) -> None:
        write_agent_config(
            "eng",
            {"id": "eng", "organization": {"type": "individual"}, "runtime": {"skills": {"assigned": ["writing"]}}},
        )

        service.install_skill(InstallRequest(agent_id="eng", skill_name="og-board-manager"))

        config = read_agent_config("eng")
        assert config["organization"]["type"] == "manager"
        assert config["runtime"]["skills"]["assigned"] == ["writing"]

    def test_assign_manager_role(
        self,
        service: SkillService,
        store_paths: StorePaths,
        make_skill: Callable[..., Path],
        write_agent_config: WriteConfig,
        read_agent_config: ReadConfig,
    ) -> None:
        make_skill(store_paths.skills_dir, "og-board-manager")
        write_agent_config("eng", {"id": "eng"})

        service.assign_installed_skill_to_agent("eng", "og-board-manager")

        config = read_agent_config("eng")
        assert config["organization"] == {"type": "manager"}
        assert "og-board-manager" not in config["runtime"]["skills"]["assigned"]


class TestLifecycle:
    def test_install_list_prompt_remove(
        self,
        service: SkillService,
        store_paths: StorePaths,
        make_skill: Callable[..., Path],
        write_agent_config: WriteConfig,
        read_agent_config: ReadConfig,
    ) -> None:
        options = WorkspaceOptions(skill_directories=["skills"])
        write_agent_config("eng", {"id": "eng", "runtime": {"provider": "codex"}})
        make_skill(store_paths.skills_dir, "review", description="global review")

        service.install_skill(InstallRequest(skill_name="Writing", scope=SkillScope.GLOBAL, content="Write well."))
        service.install_skill(InstallRequest(skill_name="review", agent_id="eng", content="Agent review."), options)
        service.assign_installed_skill_to_agent("eng", "writing", options)

        config = read_agent_config("eng")
        assert config["runtime"] == {"provider": "codex", "skills": {"assigned": ["review", "writing"]}}

        listed = {skill.id: skill for skill in service.list_skills("eng")}
        assert set(listed) == {"review", "writing"}
        assert listed["review"].content == "Agent review."

        prompt = service.build_skills_prompt("eng").prompt
        assert "<id>review</id>" in prompt
        assert "Agent review." in prompt

        removed = service.remove_skill(RemoveRequest(skill_id="review", agent_id="eng"), options)
        assert removed.removed_from_agent_ids == ["eng"]
        assert [skill.description for skill in service.list_skills("eng")] == ["Write well."]
        assert read_agent_config("eng")["runtime"]["skills"]["assigned"] == ["writing"]

        global_removed = service.remove_skill(RemoveRequest(skill_id="writing", scope=SkillScope.GLOBAL))
        assert global_removed.removed_from_global is True
        assert (store_paths.workspaces_dir / "eng" / "skills" / "writing" / "SKILL.md").exists()

    def test_reinstall_is_idempotent(
        self,
        service: SkillService,
        write_agent_config: WriteConfig,
        read_agent_config: ReadConfig,
    ) -> None:
        write_agent_config("eng", {"id": "eng"})
        request = InstallRequest(skill_name="notes", agent_id="eng", content="Take notes.")

        first = service.install_skill(request)
        config_after_first = read_agent_config("eng")
        second = service.install_skill(request)

        assert (first.replaced, second.replaced) == (False, True)
        assert first.installed_path == second.installed_path
        assert read_agent_config("eng") == config_after_first
