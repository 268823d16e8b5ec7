"""Skill subsystem exceptions."""

from __future__ import annotations

from pathlib import Path


class SkillError(Exception):
    """Base exception for all skill-related errors.

    All custom exceptions in the skills subsystem inherit from this class,
    allowing callers to catch all skill errors with a single handler.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.message,))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{type(self).__name__}({self.message!r})"


class SkillValidationError(SkillError):
    """Raised when a request is rejected before any side effect happens.

    Covers empty or invalid ids, mutually exclusive source fields and blank
    source URLs. The message is meant to be shown to the user as-is.
    """


class SkillNotFoundError(SkillError):
    """Raised when a skill definition cannot be found.

    Attributes:
        name: Skill name or id that was not found.
        path: Filesystem path that was checked, if any.
    """

    def __init__(self, name: str, path: str | Path | None = None, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            name: Skill name or id that was not found.
            path: Filesystem path that was checked, if any.
            message: Custom message overriding the default one.
        """
        self.name = name
        self.path = Path(path) if path is not None else None
        if message is None:
            location = f" at path: {self.path}" if self.path else ""
            message = f"Skill '{name}' not found{location}"
        super().__init__(message)

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.name, str(self.path) if self.path else None, self.message))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"path={str(self.path) if self.path else None!r})"
        )


class SkillAmbiguityError(SkillError):
    """Raised when a repository holds several skills and none was selected.

    Attributes:
        candidates: Repository-relative paths of the candidate skills
            (at most ten are kept).
    """

    max_listed = 10

    def __init__(self, candidates: list[str]) -> None:
        """Initialize the error.

        Args:
            candidates: Repository-relative candidate paths, in sorted order.
        """
        self.candidates = list(candidates)[: self.max_listed]
        available = ", ".join(self.candidates)
        super().__init__(
            "Multiple skills were found in the source URL. Specify sourceSkillName. "
            f"Available candidates: {available}"
        )

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.candidates,))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{type(self).__name__}(candidates={self.candidates!r})"


class SkillSourceError(SkillError):
    """Raised when an install source cannot be fetched.

    Attributes:
        source: The URL or path that was being fetched.
        detail: Captured output or explanation from the failing step.
    """

    def __init__(self, source: str, detail: str = "", message: str | None = None) -> None:
        """Initialize the error.

        Args:
            source: The URL or path that was being fetched.
            detail: Captured output or explanation from the failing step.
            message: Custom message overriding the default one.
        """
        self.source = source
        self.detail = detail.strip()
        if message is None:
            message = f'Unable to clone skill source URL "{source}". {self.detail}'.strip()
        super().__init__(message)

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (type(self), (self.source, self.detail, self.message))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{type(self).__name__}(source={self.source!r}, detail={self.detail!r})"


class SkillConfigError(SkillError):
    """Raised when an agent configuration document cannot be parsed.

    Attributes:
        path: Location of the configuration document.
        cause: Original exception that caused the failure.
    """

    def __init__(self, path: str | Path, cause: Exception | None = None) -> None:
        """Initialize the error.

        Args:
            path: Location of the configuration document.
            cause: Original exception that caused the failure.
        """
        self.path = Path(path)
        self.cause = cause
        cause_str = f" ({cause})" if cause else ""
        super().__init__(f"Invalid agent configuration at {self.path}{cause_str}")

    def __reduce__(self) -> tuple:
        """Support pickling by returning constructor arguments."""
        return (_rebuild_skill_config_error, (str(self.path), self.cause))

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{type(self).__name__}(path={str(self.path)!r}, cause={self.cause!r})"


def _rebuild_skill_config_error(path: str, cause: Exception | None) -> SkillConfigError:
    """Rebuild a SkillConfigError from pickled arguments."""
    return SkillConfigError(path, cause=cause)
