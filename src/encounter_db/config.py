"""Configuration management for encounter-db."""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_CONNECT_TIMEOUT
from .utils import expand_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_TEMPLATE_PATH = Path(__file__).with_name("config.toml")


def _load_default_template() -> dict[str, Any]:
    """Load the bundled default config template."""
    with open(DEFAULT_CONFIG_TEMPLATE_PATH, "rb") as f:
        return tomllib.load(f)


def _merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge config dictionaries recursively."""
    merged = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _merge_config_data(base_value, value)
        else:
            merged[key] = value
    return merged


class PathsConfig(BaseModel):
    """Path configuration."""

    db_file: Path
    backup_dir: Path | None = None

    @field_validator("db_file", mode="before")
    @classmethod
    def expand_db_file(cls, v: str | Path) -> Path:
        """Expand path strings with ~ and environment variables."""
        if isinstance(v, str):
            return expand_path(v)
        return v

    @field_validator("backup_dir", mode="before")
    @classmethod
    def expand_backup_dir(cls, v: str | Path | None) -> Path | None:
        """Treat an empty string as "next to the database file"."""
        if isinstance(v, str):
            return expand_path(v) if v.strip() else None
        return v


class MigrationsConfig(BaseModel):
    """Migration configuration."""

    backup_before_migrate: bool = True


class ConnectionConfig(BaseModel):
    """SQLite connection configuration."""

    timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, ge=0, description="Lock wait in seconds")
    foreign_keys: bool = True


class Config(BaseModel):
    """Configuration for encounter-db."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    paths: PathsConfig
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)

    @property
    def db_file(self) -> Path:
        """Database file path."""
        return self.paths.db_file

    @property
    def backup_dir(self) -> Path | None:
        """Directory for pre-migration backups, None for next to the database."""
        return self.paths.backup_dir

    @property
    def backup_before_migrate(self) -> bool:
        """Whether the database is backed up before migrating."""
        return self.migrations.backup_before_migrate

    @property
    def timeout(self) -> float:
        """Connection lock timeout in seconds."""
        return self.connection.timeout

    @property
    def foreign_keys(self) -> bool:
        """Whether foreign key constraints are enforced."""
        return self.connection.foreign_keys


def create_default_config() -> Config:
    """Create default configuration from the bundled template."""
    return Config.model_validate(_load_default_template())


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from TOML file using Pydantic validation.

    Values from the file override the bundled defaults section by section.

    Args:
        config_path: Optional config file path; defaults are used when
            omitted or when the file does not exist

    Returns:
        Config instance with validated values

    Raises:
        ValueError: If config validation fails or the file is not valid TOML
    """
    defaults = _load_default_template()

    if config_path is None or not config_path.exists():
        if config_path is not None:
            logger.warning(f"Config file {config_path} not found, using defaults")
        return Config.model_validate(defaults)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return Config.model_validate(_merge_config_data(defaults, data))
