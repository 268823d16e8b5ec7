"""Configuration system for skillport.

Main exports:
- SkillportSettings: Root configuration class
- StorePaths: On-disk store layout
- LoggingConfig: Logging configuration
"""

from skillport.config.logging_config import LoggingConfig, configure_logging
from skillport.config.settings import SkillportSettings, StorePaths

__all__ = [
    "LoggingConfig",
    "SkillportSettings",
    "StorePaths",
    "configure_logging",
]
