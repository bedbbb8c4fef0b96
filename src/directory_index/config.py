"""Configuration management for directory-index."""

import sys
from functools import cached_property
from pathlib import Path
from typing import Literal, Optional

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_NAME = "directory.db"
APP_DIR_NAME = ".directory-index"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]


class DirectoryIndexConfig(BaseSettings):
    """Settings loaded from DIRECTORY_INDEX_* environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="DIRECTORY_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: Literal["dev", "test", "prod"] = Field(default="dev", description="Runtime environment")

    home: Path = Field(
        default_factory=lambda: Path.home() / APP_DIR_NAME,
        description="Directory holding the database and log files",
    )
    database_name: str = Field(default=DATABASE_NAME, description="SQLite database file name")
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy async URL; overrides home/database_name when set",
    )

    store_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds allowed for a single entity store operation before it fails",
    )

    max_categories: int = Field(
        default=5, ge=1, description="Maximum categories returned alongside search results"
    )
    max_suggestions: int = Field(default=10, ge=1, description="Maximum suggestion terms")

    log_level: LogLevel = Field(default="INFO")
    log_to_file: bool = Field(default=False, description="Also write logs under home/logs")

    @property
    def database_path(self) -> Path:
        """Path of the SQLite database file."""
        return self.home / self.database_name

    @property
    def is_test_env(self) -> bool:
        return self.env == "test"


class ConfigManager:
    """Caches the loaded configuration for the lifetime of the process."""

    _config: Optional[DirectoryIndexConfig] = None

    @cached_property
    def config(self) -> DirectoryIndexConfig:
        if ConfigManager._config is None:
            ConfigManager._config = DirectoryIndexConfig()
        return ConfigManager._config

    @classmethod
    def set_config(cls, config: DirectoryIndexConfig) -> None:
        """Replace the cached configuration (used by tests and embedding hosts)."""
        cls._config = config

    @classmethod
    def reset(cls) -> None:
        cls._config = None


def init_logging(
    config: DirectoryIndexConfig | None = None,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """Configure loguru sinks.

    Args:
        config: Configuration to read log level and home directory from
        log_file: File name under home/logs, only used when log_to_file is set
        console: Whether to log to stderr
    """
    cfg = config or ConfigManager().config
    logger.remove()

    if console:
        logger.add(sys.stderr, level=cfg.log_level, backtrace=True, diagnose=False)

    if cfg.log_to_file and log_file:
        log_path = cfg.home / "logs" / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=cfg.log_level,
            rotation="10 MB",
            retention="10 days",
            enqueue=True,
        )

    logger.debug(f"Logging initialized: level={cfg.log_level}, env={cfg.env}")


def init_cli_logging(config: DirectoryIndexConfig | None = None) -> None:
    """CLI logs only warnings to the console so command output stays readable."""
    cfg = config or ConfigManager().config
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    if cfg.log_to_file:
        init_logging(cfg, log_file="directory-index-cli.log", console=False)
        logger.add(sys.stderr, level="WARNING")


def init_api_logging(config: DirectoryIndexConfig | None = None) -> None:
    init_logging(config, log_file="directory-index-api.log")
