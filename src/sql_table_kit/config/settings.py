"""
Configuration management for sql-table-kit.

This module provides environment-based configuration using Pydantic BaseSettings,
so connection credentials and logging behaviour can be supplied per deployment
without touching code.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("SQLTK_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class MySQLSettings:
    """
    MySQL settings compatibility layer for connection parameter retrieval.

    Wraps the individual ``mysql_*`` fields so that connectors can ask for
    either driver keyword arguments or a DSN without knowing the field names.
    """

    def __init__(
        self,
        host: str,
        port: int = 3306,
        user: str = "",
        password: str = "",
        database: str = "",
        charset: str = "utf8mb4",
        connect_timeout: int = 30,
        read_timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.charset = charset
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    def connect_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments accepted by ``pymysql.connect``.

        Returns:
            Dictionary of connection parameters
        """
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
            "charset": self.charset,
            "connect_timeout": self.connect_timeout,
            "read_timeout": self.read_timeout,
        }

    def get_connection_string(self) -> str:
        """
        Get a SQLAlchemy-style MySQL connection string.

        Returns:
            Database connection string (DSN)
        """
        return (
            f"mysql+pymysql://{self.user}:{self.password}@{self.host}:{self.port}/"
            f"{self.database}?charset={self.charset}"
        )


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the SQLTK_ prefix.
    For example, SQLTK_MYSQL_HOST will override the mysql_host setting.

    Fields without prefix:
    - LOG_LEVEL: Logging level (uppercase)
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    # MySQL connection
    mysql_host: str = Field(default="localhost", description="MySQL host")
    mysql_port: int = Field(default=3306, description="MySQL port")
    mysql_user: str = Field(default="root", description="MySQL user")
    mysql_password: str = Field(default="", description="MySQL password")
    mysql_database: str = Field(default="", description="MySQL database name")
    mysql_charset: str = Field(
        default="utf8mb4", description="Character set negotiated on connect"
    )
    connect_timeout: int = Field(
        default=30, description="Connection timeout in seconds"
    )
    read_timeout: int = Field(default=30, description="Read timeout in seconds")

    # Table gateway defaults
    default_select_limit: int = Field(
        default=20, description="Row limit applied by TableSchema.select by default"
    )

    @field_validator("mysql_port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        if not 1 <= value <= 65535:
            raise ValueError(f"mysql_port must be between 1 and 65535, got {value}")
        return value

    @field_validator("mysql_charset")
    @classmethod
    def _validate_charset(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("mysql_charset must not be empty")
        return value.strip()

    @property
    def mysql(self) -> MySQLSettings:
        """
        Get MySQL settings compatibility wrapper.

        Returns:
            MySQLSettings instance assembled from individual configuration fields
        """
        return MySQLSettings(
            host=self.mysql_host,
            port=self.mysql_port,
            user=self.mysql_user,
            password=self.mysql_password,
            database=self.mysql_database,
            charset=self.mysql_charset,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )

    model_config = SettingsConfigDict(
        env_prefix="SQLTK_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and reused; tests call ``get_settings.cache_clear()``
    after changing the environment.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()


def resolve_mysql_settings(overrides: Optional[Dict[str, Any]] = None) -> MySQLSettings:
    """
    Merge explicit connection parameters over the configured ones.

    Args:
        overrides: Parameters supplied by the caller; ``None`` values are ignored

    Returns:
        MySQLSettings with overrides applied
    """
    base = get_settings().mysql.connect_kwargs()
    for key, value in (overrides or {}).items():
        if value is not None:
            base[key] = value
    return MySQLSettings(**base)
