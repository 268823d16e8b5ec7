"""Logging configuration for skillport."""

from __future__ import annotations

import logging
import sys

from pydantic import BaseModel, Field, field_validator

_VALID_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Name of the handler installed by ``configure_logging`` (used to avoid duplicates).
_HANDLER_NAME = "skillport-default"


class LoggingConfig(BaseModel):
    """Logging settings for the ``skillport`` logger hierarchy.

    Attributes:
        level: Minimum level emitted (``DEBUG`` .. ``CRITICAL``).
        format: ``logging.Formatter`` format string.
        date_format: ``logging.Formatter`` date format string.
    """

    level: str = Field(default="INFO", description="Minimum log level")
    format: str = Field(
        default="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        description="Log record format",
    )
    date_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Timestamp format")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> str:
        """Accept level names in any case."""
        level = str(value).strip().upper()
        if level not in _VALID_LEVELS:
            raise ValueError(f"level must be one of {', '.join(_VALID_LEVELS)}, got {value!r}")
        return level


def configure_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``skillport`` logger.

    Calling this more than once updates the level and formatter of the
    existing handler instead of adding another one.

    Args:
        config: Logging settings. Uses defaults if ``None``.

    Returns:
        The configured ``skillport`` logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger("skillport")
    logger.setLevel(config.level)

    handler = next((h for h in logger.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        logger.addHandler(handler)

    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))
    return logger
