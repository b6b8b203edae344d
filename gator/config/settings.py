"""
Gator Configuration System
==========================

Two layers of configuration:

- ``GatorSettings``: process settings from environment variables and ``.env``
  (logging, fetch behaviour, database pool), validated with Pydantic.
- ``UserConfig``: the JSON document holding the database URL and the
  currently logged-in user. It is read at start-up and rewritten whenever the
  current user changes.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode
from ..utils.logging import get_logger_for_component


DEFAULT_CONFIG_PATH = "~/.gatorconfig.json"
SQLITE_URL_PREFIX = "sqlite:///"


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.WARNING, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path, unset disables file logging")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging on the console")
    console_logging: bool = Field(default=True, description="Enable console logging")


class DatabaseSettings(BaseModel):
    """Database configuration."""
    default_path: str = Field(default="~/.gator/gator.db", description="SQLite file used when the config has no db_url")
    pool_size: int = Field(default=2, ge=1, le=20, description="Connection pool size")


class FetchSettings(BaseModel):
    """Feed fetching configuration."""
    user_agent: str = Field(default="gator", min_length=1, description="User-Agent header sent with every fetch")
    request_timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")


MAX_BROWSE_LIMIT = 1000


class BrowseSettings(BaseModel):
    """Post browsing configuration."""
    default_limit: int = Field(default=2, ge=1, le=MAX_BROWSE_LIMIT, description="Posts shown by 'browse' without a limit")


class GatorSettings(BaseSettings):
    """Main application settings."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    browse: BrowseSettings = Field(default_factory=BrowseSettings)

    config_path: str = Field(default=DEFAULT_CONFIG_PATH, description="JSON user config location")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "GATOR_",
        "extra": "ignore",
    }

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings(**overrides) -> GatorSettings:
    """Load settings from environment variables, ``.env`` and defaults.

    Args:
        **overrides: Values that take precedence over the environment

    Raises:
        ConfigurationError: If the settings are invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        return GatorSettings(**overrides)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID,
        ) from e


class UserConfig(BaseModel):
    """JSON configuration document shared between invocations."""
    db_url: str = Field(default="", description="SQLite database path or sqlite:/// URL")
    current_user_name: str = Field(default="", description="Name of the logged-in user")

    @field_validator("db_url", "current_user_name")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    def database_path(self, default_path: str) -> str:
        """Resolve ``db_url`` to a SQLite file path.

        Args:
            default_path: Path to use when no ``db_url`` is configured

        Raises:
            ConfigurationError: If the URL uses a scheme other than sqlite
        """
        url = self.db_url or default_path
        if url.startswith(SQLITE_URL_PREFIX):
            url = url[len(SQLITE_URL_PREFIX):]
        elif "://" in url:
            raise ConfigurationError(
                f"Unsupported database URL '{self.db_url}', expected a path or {SQLITE_URL_PREFIX}...",
                error_code=ErrorCode.CONFIG_INVALID,
            )
        return str(Path(url).expanduser())


class UserConfigStore:
    """Reads and writes the JSON user config file."""

    def __init__(self, path: str = DEFAULT_CONFIG_PATH):
        self.path = Path(path).expanduser()
        self.logger = get_logger_for_component("config")

    def read(self) -> UserConfig:
        """Read the config file.

        A missing file yields an empty config; it is created on first save.

        Raises:
            ConfigurationError: If the file cannot be read or is malformed
        """
        if not self.path.exists():
            self.logger.warning(f"Config file {self.path} not found, using defaults")
            return UserConfig()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read config file: {e}",
                config_path=str(self.path),
                error_code=ErrorCode.CONFIG_MISSING,
            ) from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(
                f"Config file {self.path} is not valid UTF-8: {e}",
                config_path=str(self.path),
                error_code=ErrorCode.CONFIG_PARSE_ERROR,
            ) from e

        try:
            return UserConfig.model_validate_json(raw)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Config file {self.path} is not valid: {e}",
                config_path=str(self.path),
                error_code=ErrorCode.CONFIG_PARSE_ERROR,
            ) from e

    def write(self, config: UserConfig) -> None:
        """Atomically replace the config file.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(config.model_dump_json(indent=2))
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ConfigurationError(
                f"Cannot write config file: {e}",
                config_path=str(self.path),
                error_code=ErrorCode.CONFIG_WRITE_ERROR,
            ) from e

        self.logger.debug(f"Saved config to {self.path}")

    def set_user(self, config: UserConfig, user_name: str) -> UserConfig:
        """Record ``user_name`` as the current user and persist the config."""
        updated = config.model_copy(update={"current_user_name": user_name})
        self.write(updated)
        config.current_user_name = user_name
        return config
