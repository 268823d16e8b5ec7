"""Tests for skill error hierarchy."""

from __future__ import annotations

import json
import pickle
from pathlib import Path

import pytest

from skillport.skills.errors import (
    SkillAmbiguityError,
    SkillConfigError,
    SkillError,
    SkillNotFoundError,
    SkillSourceError,
    SkillValidationError,
)


class TestSkillError:
    """Tests for base SkillError."""

    def test_message(self) -> None:
        """Test error message stored and returned by str()."""
        error = SkillError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_repr(self) -> None:
        """Test repr produces useful debugging info."""
        assert repr(SkillError("boom")) == "SkillError('boom')"

    def test_picklable(self) -> None:
        """Test error can be pickled and unpickled."""
        restored = pickle.loads(pickle.dumps(SkillError("pickle test")))
        assert restored.message == "pickle test"

    @pytest.mark.parametrize(
        "error",
        [
            SkillValidationError("bad"),
            SkillNotFoundError("x"),
            SkillAmbiguityError(["a"]),
            SkillSourceError("https://example.com/x.git"),
            SkillConfigError("/tmp/config.json"),
        ],
    )
    def test_hierarchy(self, error: SkillError) -> None:
        """Test every error can be caught as SkillError."""
        assert isinstance(error, SkillError)


class TestSkillValidationError:
    """Tests for SkillValidationError."""

    def test_picklable_keeps_type(self) -> None:
        """Test subclass type survives pickling."""
        restored = pickle.loads(pickle.dumps(SkillValidationError("sourceUrl cannot be empty.")))
        assert type(restored) is SkillValidationError
        assert str(restored) == "sourceUrl cannot be empty."


class TestSkillNotFoundError:
    """Tests for SkillNotFoundError."""

    def test_default_message(self) -> None:
        """Test default message names the skill and the path."""
        error = SkillNotFoundError("web-search", "/skills/web-search")

        assert error.name == "web-search"
        assert error.path == Path("/skills/web-search")
        assert str(error) == "Skill 'web-search' not found at path: /skills/web-search"

    def test_without_path(self) -> None:
        """Test message without a path."""
        error = SkillNotFoundError("web-search")
        assert error.path is None
        assert str(error) == "Skill 'web-search' not found"

    def test_custom_message(self) -> None:
        """Test custom message overrides the default."""
        error = SkillNotFoundError("x", message="Source skill not found: /a/SKILL.md")
        assert str(error) == "Source skill not found: /a/SKILL.md"

    def test_repr(self) -> None:
        """Test repr shows name and path."""
        assert repr(SkillNotFoundError("x", "/p")) == "SkillNotFoundError(name='x', path='/p')"

    def test_picklable(self) -> None:
        """Test all attributes survive pickling."""
        error = SkillNotFoundError("x", "/p", message="custom")
        restored = pickle.loads(pickle.dumps(error))
        assert restored.name == "x"
        assert restored.path == Path("/p")
        assert str(restored) == "custom"


class TestSkillAmbiguityError:
    """Tests for SkillAmbiguityError."""

    def test_lists_candidates(self) -> None:
        """Test message asks for a skill name and lists candidates."""
        error = SkillAmbiguityError(["skills/a", "skills/b"])
        assert "Specify sourceSkillName" in str(error)
        assert str(error).endswith("Available candidates: skills/a, skills/b")

    def test_caps_candidates(self) -> None:
        """Test at most ten candidates are kept."""
        error = SkillAmbiguityError([f"s{i:02d}" for i in range(15)])
        assert len(error.candidates) == 10
        assert "s10" not in str(error)

    def test_picklable(self) -> None:
        """Test candidates survive pickling."""
        restored = pickle.loads(pickle.dumps(SkillAmbiguityError(["a", "b"])))
        assert restored.candidates == ["a", "b"]
        assert repr(restored) == "SkillAmbiguityError(candidates=['a', 'b'])"


class TestSkillSourceError:
    """Tests for SkillSourceError."""

    def test_message_includes_detail(self) -> None:
        """Test default message quotes the URL and appends the detail."""
        error = SkillSourceError("https://example.com/x.git", "  fatal: not found\n")
        assert error.detail == "fatal: not found"
        assert str(error) == 'Unable to clone skill source URL "https://example.com/x.git". fatal: not found'

    def test_message_without_detail(self) -> None:
        """Test no trailing whitespace when the detail is empty."""
        error = SkillSourceError("https://example.com/x.git")
        assert str(error) == 'Unable to clone skill source URL "https://example.com/x.git".'

    def test_picklable(self) -> None:
        """Test all attributes survive pickling."""
        error = SkillSourceError("u", "d", message="custom")
        restored = pickle.loads(pickle.dumps(error))
        assert (restored.source, restored.detail, str(restored)) == ("u", "d", "custom")


class TestSkillConfigError:
    """Tests for SkillConfigError."""

    def test_message_includes_cause(self) -> None:
        """Test message shows the path and the cause."""
        cause = ValueError("bad json")
        error = SkillConfigError("/agents/eng/config.json", cause=cause)
        assert error.path == Path("/agents/eng/config.json")
        assert error.cause is cause
        assert str(error) == "Invalid agent configuration at /agents/eng/config.json (bad json)"

    def test_picklable(self) -> None:
        """Test path and cause survive pickling."""
        try:
            json.loads("{broken")
        except json.JSONDecodeError as exc:
            error = SkillConfigError("/c.json", cause=exc)

        restored = pickle.loads(pickle.dumps(error))
        assert restored.path == Path("/c.json")
        assert isinstance(restored.cause, json.JSONDecodeError)
        assert "SkillConfigError(path='/c.json'" in repr(restored)
