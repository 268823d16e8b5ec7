"""Local-machine implementations of the capability ports."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from skillport.ports.base import (
    CommandRequest,
    CommandResult,
    CommandRunner,
    FileStore,
    PathResolver,
)

logger = logging.getLogger(__name__)

# Exit codes reported when a command cannot be started or exceeds its timeout.
_COMMAND_NOT_FOUND_CODE = 127
_COMMAND_TIMEOUT_CODE = 124


class LocalFileStore(FileStore):
    """``FileStore`` backed by ``pathlib`` and ``shutil``."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_dir(self, path: Path) -> None:
        target = Path(path)
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.exists():
            shutil.rmtree(target)

    def copy_dir(self, source: Path, target: Path) -> None:
        shutil.copytree(source, target, dirs_exist_ok=True)

    def read_file(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_file(self, path: Path, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def list_directories(self, path: Path) -> list[str]:
        base = Path(path)
        if not base.is_dir():
            return []
        try:
            return sorted(entry.name for entry in base.iterdir() if entry.is_dir())
        except PermissionError:
            logger.warning("Permission denied listing directory: %s", base)
            return []


class LocalPathResolver(PathResolver):
    """``PathResolver`` using ``os.path`` conventions of the host platform."""

    def join(self, *segments: str | Path) -> Path:
        return Path(*segments)

    def expand_user(self, value: str | Path) -> Path:
        return Path(os.path.abspath(os.path.expanduser(str(value))))

    def relative(self, path: Path, start: Path) -> str:
        return Path(os.path.relpath(path, start)).as_posix()


class SubprocessCommandRunner(CommandRunner):
    """``CommandRunner`` built on ``subprocess.run``.

    A missing executable or an expired timeout is reported as a non-zero
    ``CommandResult`` rather than raised, so callers handle every failure
    through the exit code.

    Args:
        timeout: Seconds before the command is killed. ``None`` waits forever.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    def run(self, request: CommandRequest) -> CommandResult:
        argv = [request.command, *request.args]
        logger.debug("Running command: %s (cwd=%s)", " ".join(argv), request.cwd)
        try:
            completed = subprocess.run(
                argv,
                cwd=request.cwd,
                env=request.env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            return CommandResult(code=_COMMAND_NOT_FOUND_CODE, stderr=str(exc))
        except subprocess.TimeoutExpired:
            return CommandResult(
                code=_COMMAND_TIMEOUT_CODE,
                stderr=f"Command timed out after {self._timeout} seconds: {request.command}",
            )

        return CommandResult(
            code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
