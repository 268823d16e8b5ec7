"""Capability ports consumed by the skills engine.

The engine never touches the filesystem, path conventions or child
processes directly. It goes through three small abstract ports so hosts can
substitute sandboxed or in-memory implementations.

Classes:
    FileStore: Directory and text-file primitives.
    PathResolver: Path joining, relative paths and ``~`` expansion.
    CommandRunner: Runs an external command and captures its output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


class FileStore(ABC):
    """Abstract filesystem operations used by discovery and installation."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return whether a file or directory exists at ``path``."""
        ...

    @abstractmethod
    def ensure_dir(self, path: Path) -> None:
        """Create ``path`` and any missing parents."""
        ...

    @abstractmethod
    def remove_dir(self, path: Path) -> None:
        """Recursively remove ``path``. Missing paths are ignored."""
        ...

    @abstractmethod
    def copy_dir(self, source: Path, target: Path) -> None:
        """Recursively copy ``source`` into ``target``, overwriting files."""
        ...

    @abstractmethod
    def read_file(self, path: Path) -> str:
        """Read a UTF-8 text file.

        Raises:
            OSError: If the file cannot be read.
        """
        ...

    @abstractmethod
    def write_file(self, path: Path, content: str) -> None:
        """Write ``content`` to ``path`` as UTF-8, replacing any existing file."""
        ...

    @abstractmethod
    def list_directories(self, path: Path) -> list[str]:
        """Return the names of immediate child directories of ``path``.

        Returns an empty list when ``path`` does not exist.
        """
        ...


class PathResolver(ABC):
    """Abstract path manipulation."""

    @abstractmethod
    def join(self, *segments: str | Path) -> Path:
        """Join path segments using the platform separator."""
        ...

    @abstractmethod
    def expand_user(self, value: str | Path) -> Path:
        """Expand a leading ``~`` and make the path absolute."""
        ...

    @abstractmethod
    def relative(self, path: Path, start: Path) -> str:
        """Return ``path`` relative to ``start`` using ``/`` separators."""
        ...


@dataclass
class CommandRequest:
    """An external command invocation.

    Attributes:
        command: Executable name or path.
        args: Arguments passed to the executable.
        cwd: Working directory, if any.
        env: Environment override; ``None`` inherits the current one.
    """

    command: str
    args: list[str] = field(default_factory=list)
    cwd: Path | None = None
    env: dict[str, str] | None = None


@dataclass
class CommandResult:
    """Exit code and captured output of a finished command."""

    code: int
    stdout: str = ""
    stderr: str = ""


class CommandRunner(ABC):
    """Runs external commands (only needed for remote installs)."""

    @abstractmethod
    def run(self, request: CommandRequest) -> CommandResult:
        """Run ``request`` to completion and capture its output."""
        ...
