"""Settings and configuration management for docker-updater."""

import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Tuple, Type

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from docker_updater.utils.exceptions import ConfigurationError
from docker_updater.utils.filters import NameFilter

APP_NAME = "docker-updater"
SYSTEM_CONFIG_FILE = Path("/etc") / f"{APP_NAME}.conf"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Fully resolved run configuration.

    Values are layered: defaults, then environment variables, then the config
    file (KEY=VALUE lines using the same upper-case names), then explicit
    keyword arguments from the command line.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Run behaviour
    dry_run: bool = Field(
        default=False,
        description="Log mutating actions instead of executing them",
    )

    prune_unused_images: bool = Field(
        default=True,
        description="Prune dangling images after the run",
    )

    compose_only: bool = Field(
        default=False,
        description="Only update docker compose projects",
    )

    standalone_only: bool = Field(
        default=False,
        description="Only update standalone (non-compose) containers",
    )

    pull_all_platforms: bool = Field(
        default=False,
        description="Pull every tag of a repository instead of the referenced one",
    )

    stop_timeout: int = Field(
        default=30,
        ge=0,
        description="Seconds to wait for a graceful stop before the container is killed",
    )

    compose_timeout: int = Field(
        default=1800,
        gt=0,
        description="Upper bound in seconds for a single docker compose invocation",
    )

    # Filters
    only_containers: str = Field(
        default="",
        description="Comma, semicolon or space separated container names to update exclusively",
    )

    exclude_containers: str = Field(
        default="",
        description="Comma, semicolon or space separated container names to skip",
    )

    only_projects: str = Field(
        default="",
        description="Comma, semicolon or space separated project names to update exclusively",
    )

    exclude_projects: str = Field(
        default="",
        description="Comma, semicolon or space separated compose project names to skip",
    )

    # Paths
    log_file: str = Field(
        default=f"/var/log/{APP_NAME}.log",
        description="File the run log is appended to (empty disables the file log)",
    )

    backup_dir: Path = Field(
        default=Path("/var/lib") / APP_NAME / "backups",
        description="Directory receiving one recreation script per recreated container",
    )

    lock_dir: Path = Field(
        default=Path("/run/lock"),
        description="Preferred directory of the run lock file",
    )

    lock_fallback_dir: Path = Field(
        default=Path("/tmp"),
        description="Lock directory used when the preferred one is not writable",
    )

    # Docker configuration
    docker_host: Optional[str] = Field(
        default=None,
        description="Docker daemon host URL (defaults to Docker's standard detection)",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log format (json or text)",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The config file overrides the environment, flags override both
        return init_settings, dotenv_settings, env_settings, file_secret_settings

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @model_validator(mode="after")
    def _check_exclusive_modes(self) -> "Settings":
        if self.compose_only and self.standalone_only:
            raise ValueError("Cannot set both --compose-only and --standalone-only")
        return self

    @property
    def container_filter(self) -> NameFilter:
        """Parse container only/exclude lists into a filter."""
        return NameFilter.from_lists(self.only_containers, self.exclude_containers)

    @property
    def project_filter(self) -> NameFilter:
        """Parse project only/exclude lists into a filter."""
        return NameFilter.from_lists(self.only_projects, self.exclude_projects)


def config_file_candidates() -> List[Path]:
    """Config file locations in lookup order."""
    xdg = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return [
        SYSTEM_CONFIG_FILE,
        xdg / f"{APP_NAME}.conf",
        xdg / APP_NAME / f"{APP_NAME}.conf",
    ]


def find_config_file() -> Optional[Path]:
    """Return the first existing config file, if any."""
    for candidate in config_file_candidates():
        if candidate.is_file():
            return candidate
    return None


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> Settings:
    """
    Build the run configuration once.

    Args:
        config_file: Explicit config file; when None the standard locations
            are searched
        **overrides: Values from command-line flags; None means "not given"

    Returns:
        Immutable settings

    Raises:
        ConfigurationError: If the config file is missing or a value is invalid
    """
    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.is_file():
            raise ConfigurationError(f"Config file not found: {config_file}")
    else:
        config_file = find_config_file()

    explicit = {key: value for key, value in overrides.items() if value is not None}

    try:
        return Settings(_env_file=config_file, **explicit)
    except ValidationError as e:
        messages = "; ".join(
            str(error.get("ctx", {}).get("error") or error["msg"]) for error in e.errors()
        )
        raise ConfigurationError(messages) from e
