"""Capability ports (file store, path resolver, command runner)."""

from skillport.ports.base import (
    CommandRequest,
    CommandResult,
    CommandRunner,
    FileStore,
    PathResolver,
)
from skillport.ports.local import LocalFileStore, LocalPathResolver, SubprocessCommandRunner

__all__ = [
    "CommandRequest",
    "CommandResult",
    "CommandRunner",
    "FileStore",
    "LocalFileStore",
    "LocalPathResolver",
    "PathResolver",
    "SubprocessCommandRunner",
]
