"""Configuration management for dbcatalog."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.dbcatalog/.env
    """
    if os.path.exists(".env"):
        return ".env"

    user_env = Path.home() / ".dbcatalog" / ".env"
    if user_env.exists():
        return str(user_env)

    return None


class EngineKind(str, Enum):
    """Supported database engines."""
    MSSQL = "mssql"
    SQLITE = "sqlite"
    DUCKDB = "duckdb"
    SNOWFLAKE = "snowflake"


class CatalogConfig(BaseModel):
    """What to catalog and how to reach it.

    Loaded from a YAML file. ``dbtype`` is accepted as an alias of
    ``engine``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    server: str = Field(description="Server address, account, or database file path")
    user: Optional[str] = None
    password: Optional[str] = None
    engine: EngineKind = Field(default=EngineKind.MSSQL, alias="dbtype")
    port: Optional[int] = Field(default=None, description="Server port (mssql: 1433)")
    driver: Optional[str] = Field(default=None, description="ODBC driver name (mssql only)")
    databases: List[str] = Field(min_length=1)
    include_tables: List[str] = Field(default_factory=list)
    exclude_tables: List[str] = Field(default_factory=list)
    template: Optional[str] = Field(default=None, description="Info document template file")
    options: Dict[str, Any] = Field(default_factory=dict, description="Extra connection parameters")

    @field_validator("engine", mode="before")
    @classmethod
    def _lower_engine(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("databases")
    @classmethod
    def _unique_databases(cls, value: List[str]) -> List[str]:
        unique = []
        for name in value:
            name = name.strip()
            if not name:
                raise ValueError("database names must not be empty")
            if name not in unique:
                unique.append(name)
        return unique

    @field_validator("include_tables", "exclude_tables", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []


def load_config(path: str) -> CatalogConfig:
    """Load and validate a catalog configuration file.

    Args:
        path: Path to a YAML configuration file

    Returns:
        Validated CatalogConfig

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {path}", details={"path": path})

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", details={"path": path})

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping: {path}", details={"path": path})

    try:
        return CatalogConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {path}",
            details={"path": path, "errors": e.errors(include_url=False)},
        )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DBCATALOG_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    output_dir: str = Field(
        default="vcs",
        description="Root directory of the file-tree export"
    )
    snapshot_path: str = Field(
        default="data.json",
        description="Catalog snapshot written by the JSON export and read with --cached"
    )
    xml_path: str = Field(
        default="data.xml",
        description="Target file of the XML export"
    )
    type_language: str = Field(
        default="go",
        description="Target language of generated type definitions (go, python)"
    )

    # Run logging configuration
    run_logging_enabled: bool = Field(
        default=True,
        description="Record export runs in a local SQLite database"
    )
    run_logging_db_path: Optional[str] = Field(
        default=None,
        description="Path to the runs database (default: ~/.dbcatalog/runs.db)"
    )
    run_logging_retention_days: int = Field(
        default=30,
        description="Number of days to retain run log entries"
    )


# Global settings instance
settings = Settings()
