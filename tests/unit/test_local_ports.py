"""Tests for the local filesystem, path and command ports."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from skillport.ports import CommandRequest
from skillport.ports.local import LocalFileStore, LocalPathResolver, SubprocessCommandRunner


class TestLocalFileStore:
    def test_write_creates_parents(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        target = tmp_path / "a" / "b" / "file.md"

        file_store.write_file(target, "héllo\n")

        assert file_store.read_file(target) == "héllo\n"

    def test_list_directories_sorted(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        for name in ("b", "a", ".hidden"):
            (tmp_path / name).mkdir()
        (tmp_path / "file.txt").write_text("x", encoding="utf-8")

        assert file_store.list_directories(tmp_path) == [".hidden", "a", "b"]

    def test_list_missing_directory(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        assert file_store.list_directories(tmp_path / "missing") == []

    def test_remove_dir_ignores_missing(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        file_store.remove_dir(tmp_path / "missing")

    def test_remove_dir_recursive(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        (tmp_path / "tree" / "nested").mkdir(parents=True)
        (tmp_path / "tree" / "nested" / "f").write_text("x", encoding="utf-8")

        file_store.remove_dir(tmp_path / "tree")

        assert not (tmp_path / "tree").exists()

    def test_copy_dir_overwrites(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "f").write_text("new", encoding="utf-8")
        (tmp_path / "dst").mkdir()
        (tmp_path / "dst" / "f").write_text("old", encoding="utf-8")

        file_store.copy_dir(tmp_path / "src", tmp_path / "dst")

        assert (tmp_path / "dst" / "f").read_text(encoding="utf-8") == "new"

    def test_ensure_dir_idempotent(self, tmp_path: Path, file_store: LocalFileStore) -> None:
        file_store.ensure_dir(tmp_path / "x" / "y")
        file_store.ensure_dir(tmp_path / "x" / "y")

        assert file_store.exists(tmp_path / "x" / "y")


class TestLocalPathResolver:
    def test_expand_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, path_resolver: LocalPathResolver) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        assert path_resolver.expand_user("~/skills") == tmp_path / "skills"

    def test_expand_user_makes_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, path_resolver: LocalPathResolver
    ) -> None:
        monkeypatch.chdir(tmp_path)

        assert path_resolver.expand_user("rel") == tmp_path / "rel"

    def test_relative_uses_forward_slashes(self, tmp_path: Path, path_resolver: LocalPathResolver) -> None:
        assert path_resolver.relative(tmp_path / "a" / "b", tmp_path) == "a/b"

    def test_join(self, tmp_path: Path, path_resolver: LocalPathResolver) -> None:
        assert path_resolver.join(tmp_path, "a", "b") == tmp_path / "a" / "b"


class TestSubprocessCommandRunner:
    def test_captures_output(self, tmp_path: Path) -> None:
        runner = SubprocessCommandRunner()

        result = runner.run(
            CommandRequest(
                command=sys.executable,
                args=["-c", "import os, sys; print(os.getcwd()); sys.stderr.write('warn'); sys.exit(3)"],
                cwd=tmp_path,
            )
        )

        assert result.code == 3
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
        assert result.stderr == "warn"

    def test_missing_executable(self) -> None:
        result = SubprocessCommandRunner().run(CommandRequest(command="skillport-no-such-binary"))

        assert result.code == 127
        assert result.stderr

    def test_timeout(self) -> None:
        runner = SubprocessCommandRunner(timeout=0.2)

        result = runner.run(CommandRequest(command=sys.executable, args=["-c", "import time; time.sleep(5)"]))

        assert result.code == 124
        assert "timed out" in result.stderr
