"""Configuration management for sql-table-kit.

Usage:
    >>> from sql_table_kit.config import get_settings
    >>> settings = get_settings()
    >>> settings.mysql.connect_kwargs()["port"]
    3306
"""

from sql_table_kit.config.settings import (
    MySQLSettings,
    Settings,
    get_settings,
    resolve_mysql_settings,
)

__all__ = [
    "MySQLSettings",
    "Settings",
    "get_settings",
    "resolve_mysql_settings",
]
