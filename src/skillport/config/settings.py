"""Root settings and on-disk store layout."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from skillport.config.logging_config import LoggingConfig
from skillport.ids import DEFAULT_AGENT_ID

# Agent-scoped stores live in this hidden directory inside the global store.
AGENT_SCOPED_STORE_DIR = ".agent-scoped"
AGENT_CONFIG_FILE_NAME = "config.json"


@dataclass(frozen=True)
class StorePaths:
    """Directory layout used by the skills engine.

    Attributes:
        home_dir: Root directory; also hosts temporary clone directories.
        skills_dir: Global skill store.
        agents_dir: Per-agent configuration documents.
        workspaces_dir: Default parent of agent workspaces.
    """

    home_dir: Path
    skills_dir: Path
    agents_dir: Path
    workspaces_dir: Path

    @classmethod
    def from_home(cls, home_dir: str | Path) -> StorePaths:
        """Build the default layout below ``home_dir``."""
        home = Path(home_dir)
        return cls(
            home_dir=home,
            skills_dir=home / "skills",
            agents_dir=home / "agents",
            workspaces_dir=home / "workspaces",
        )

    def agent_skills_dir(self, agent_id: str) -> Path:
        """Agent-scoped override store for ``agent_id``."""
        return self.skills_dir / AGENT_SCOPED_STORE_DIR / agent_id

    def agent_config_path(self, agent_id: str) -> Path:
        """Configuration document of ``agent_id``."""
        return self.agents_dir / agent_id / AGENT_CONFIG_FILE_NAME

    def agent_workspace_dir(self, agent_id: str) -> Path:
        """Default workspace root of ``agent_id``."""
        return self.workspaces_dir / agent_id

    @property
    def install_temp_dir(self) -> Path:
        """Parent directory of temporary repository clones."""
        return self.home_dir / ".tmp" / "skill-installs"


class SkillportSettings(BaseSettings):
    """Root configuration for skillport.

    Values are read, in decreasing priority, from constructor arguments,
    ``SKILLPORT_*`` environment variables (``__`` separates nested keys), a
    ``.env`` file and a ``skillport.yaml`` file in the working directory.

    Example::

        # SKILLPORT_HOME_DIR=/srv/skillport
        # SKILLPORT_LOGGING__LEVEL=debug
        settings = SkillportSettings()
        service = SkillService.from_settings(settings)

    Attributes:
        home_dir: Root of the store layout (``~`` is expanded).
        skills_dir: Override for the global skill store.
        agents_dir: Override for the agent configuration directory.
        workspaces_dir: Override for the agent workspaces directory.
        default_agent_id: Agent used when a request names none.
        workspace_skill_directories: Workspace-relative directories that
            receive mirrors of agent-scoped installs.
        clone_command: Version-control executable used for remote installs.
        clone_timeout_seconds: Timeout for a clone; ``None`` waits forever.
        logging: Logging configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKILLPORT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="skillport.yaml",
        extra="ignore",
    )

    home_dir: Path = Field(default=Path("~/.skillport"), description="Store root directory")
    skills_dir: Path | None = Field(default=None, description="Global skill store")
    agents_dir: Path | None = Field(default=None, description="Agent configuration directory")
    workspaces_dir: Path | None = Field(default=None, description="Agent workspaces directory")
    default_agent_id: str = Field(default=DEFAULT_AGENT_ID, description="Fallback agent id")
    workspace_skill_directories: list[str] = Field(
        default_factory=list,
        description="Workspace-relative skill mirror directories",
    )
    clone_command: str = Field(default="git", description="Clone executable")
    clone_timeout_seconds: float | None = Field(default=None, gt=0, description="Clone timeout")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Add ``skillport.yaml`` as the lowest-priority source."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @model_validator(mode="after")
    def _expand_user_dirs(self) -> SkillportSettings:
        """Expand ``~`` in every configured directory."""
        self.home_dir = self.home_dir.expanduser()
        for name in ("skills_dir", "agents_dir", "workspaces_dir"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, value.expanduser())
        return self

    @property
    def paths(self) -> StorePaths:
        """Store layout with directory overrides applied."""
        defaults = StorePaths.from_home(self.home_dir)
        return StorePaths(
            home_dir=defaults.home_dir,
            skills_dir=self.skills_dir or defaults.skills_dir,
            agents_dir=self.agents_dir or defaults.agents_dir,
            workspaces_dir=self.workspaces_dir or defaults.workspaces_dir,
        )
