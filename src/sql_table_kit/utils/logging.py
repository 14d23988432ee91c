"""Structured logging for the data access layer, built on structlog.

Every module logs dotted events (``statement.executed``,
``table_schema.insert_failed``) rendered as one JSON object per line with an
ISO-8601 timestamp, level and logger name. Before rendering:

- values under sensitive keys (passwords, DSNs, tokens) are redacted
- long ``sql`` fields are truncated

Configuration (environment):
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
- LOG_TO_FILE: 1, true or yes to also write a daily rotated file
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from sql_table_kit.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("statement.fetched", table="users", rows=3)
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import structlog
from structlog.types import EventDict, Processor

from sql_table_kit.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r"^passwd$", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^dsn$", re.IGNORECASE),
    re.compile(r".*connection_string.*", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

SQL_FIELDS = ("sql",)
MAX_SQL_LENGTH = 2000

_installed_handlers: List[logging.Handler] = []


def _is_sensitive(key: str) -> bool:
    return any(pattern.match(key) for pattern in SENSITIVE_PATTERNS)


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Nested dictionaries are sanitized recursively; the input is not modified.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if _is_sensitive(key):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that sanitizes sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def truncate_sql(sql: str, limit: int = MAX_SQL_LENGTH) -> str:
    """Shorten SQL text for log output, noting the original length."""
    if len(sql) <= limit:
        return sql
    return f"{sql[:limit]}... ({len(sql)} chars)"


def sql_truncation_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for field in SQL_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str):
            event_dict[field] = truncate_sql(value)
    return event_dict


def _get_log_level() -> int:
    """Resolve the level from settings, falling back to the LOG_LEVEL variable."""
    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except Exception:
        # Invalid SQLTK_ settings must not prevent logging from coming up
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    return os.getenv("LOG_TO_FILE", "").lower() in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    """Daily log file, e.g. logs/sql-table-kit-20240131.log."""
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    date_str = datetime.now().strftime("%Y%m%d")
    return log_dir / f"sql-table-kit-{date_str}.log"


def _build_handlers(level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if _should_log_to_file():
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(_get_log_file_path()),
                when="midnight",
                interval=1,
                backupCount=30,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(level: Optional[int] = None) -> None:
    """
    Route structlog through stdlib logging with JSON rendering.

    Runs on import with the configured level; host applications may call it
    again to change the level.
    """
    level = level if level is not None else _get_log_level()
    logging.basicConfig(format="%(message)s", level=level, handlers=[])
    logging.root.setLevel(level)

    for handler in _installed_handlers:
        logging.root.removeHandler(handler)
    _installed_handlers[:] = _build_handlers(level)
    for handler in _installed_handlers:
        logging.root.addHandler(handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        sql_truncation_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
