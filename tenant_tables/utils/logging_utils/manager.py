"""
Category loggers for the table layer.

Each category (``app``, ``tables``, ``cli``) writes to its own daily-rotated
file below ``LOGGING_BASE_DIR``.  Fields bound with ``log_context`` (table,
action, owner_id, project_id ...) are attached to every record written while
the block is active.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from flask import Flask

LOGGER_PREFIX = "tenant_tables"
DEFAULT_BASE_DIR = "/tmp/tenant_tables_logs"
DEFAULT_TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"
LEVEL_OVERRIDE_PREFIX = "APP_LOG_LEVEL_"

CATEGORY_FILES: Dict[str, str] = {
    "app": "application.log",
    "tables": "tables.log",
    "cli": "cli.log",
}

_context: ContextVar[Dict[str, Any]] = ContextVar("tenant_tables_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Copy of the fields bound by the enclosing ``log_context`` blocks."""
    return dict(_context.get())


@contextmanager
def log_context(**fields: Any):
    """Bind ``fields`` to every record logged inside the block; ``None`` values are skipped."""
    merged = dict(_context.get())
    merged.update({key: value for key, value in fields.items() if value is not None})
    token = _context.set(merged)
    try:
        yield
    finally:
        _context.reset(token)


class ContextAwareFormatter(logging.Formatter):
    """Text or JSON lines carrying the bound ``log_context`` fields."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        *,
        json_format: bool = False,
        static_fields: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(fmt=fmt or DEFAULT_TEXT_FORMAT)
        self.json_format = json_format
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        context = _context.get()
        if not self.json_format:
            line = super().format(record)
            if context:
                line += " | " + " ".join(f"{key}={value}" for key, value in sorted(context.items()))
            return line

        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(self.static_fields)
        if context:
            payload["context"] = dict(context)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def _level(value: Any, default: int = logging.INFO) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        numeric = getattr(logging, value.strip().upper(), None)
        if isinstance(numeric, int):
            return numeric
    return default


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class LoggerSettings:
    base_dir: str = DEFAULT_BASE_DIR
    level: int = logging.INFO
    category_levels: Mapping[str, int] = field(default_factory=dict)
    console: bool = True
    json_format: bool = False
    text_format: Optional[str] = None
    static_fields: Mapping[str, Any] = field(default_factory=dict)
    backup_count: int = 7

    @classmethod
    def from_mapping(cls, source: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> "LoggerSettings":
        """
        Read ``LOGGING_*`` keys from a Flask config (or any mapping).

        ``APP_LOG_LEVEL_<CATEGORY>`` entries in ``environ`` override the
        configured category levels, e.g. ``APP_LOG_LEVEL_TABLES=DEBUG``.
        """
        configured = source.get("LOGGING_CATEGORY_LEVELS")
        if not isinstance(configured, Mapping):
            configured = {}
        category_levels = {str(name).strip().lower(): _level(level) for name, level in configured.items()}
        for key, value in (environ or {}).items():
            if not key.startswith(LEVEL_OVERRIDE_PREFIX):
                continue
            name = key[len(LEVEL_OVERRIDE_PREFIX):].strip().lower()
            level = _level(value, default=-1)
            if name and level >= 0:
                category_levels[name] = level

        try:
            backup_count = int(source.get("LOGGING_BACKUP_COUNT", 7))
        except (TypeError, ValueError):
            backup_count = 7

        return cls(
            base_dir=source.get("LOGGING_BASE_DIR") or DEFAULT_BASE_DIR,
            level=_level(source.get("LOGGING_LEVEL")),
            category_levels=category_levels,
            console=_flag(source.get("LOGGING_CONSOLE_ENABLED"), True),
            json_format=_flag(source.get("LOGGING_JSON_FORMAT"), False),
            text_format=source.get("LOGGING_TEXT_FORMAT"),
            static_fields=source.get("LOGGING_STATIC_FIELDS") or {},
            backup_count=backup_count,
        )


class LoggerManager:
    """Hands out one ``tenant_tables.<category>`` logger per category."""

    def __init__(self, settings: Optional[LoggerSettings] = None) -> None:
        self.settings = settings or LoggerSettings()
        self._loggers: Dict[str, logging.Logger] = {}
        self._console: Optional[logging.Handler] = None

    def log_file(self, category: str) -> Path:
        key = category.strip().lower()
        return Path(self.settings.base_dir) / CATEGORY_FILES.get(key, f"{key}.log")

    def get_logger(self, category: str) -> logging.Logger:
        key = category.strip().lower()
        if key in self._loggers:
            return self._loggers[key]

        level = self.settings.category_levels.get(key, self.settings.level)
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{key}")
        logger.propagate = False
        logger.setLevel(level)

        path = self.log_file(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            path,
            when="midnight",
            backupCount=self.settings.backup_count,
            encoding="utf-8",
            utc=True,
        )
        handler.setLevel(level)
        handler.setFormatter(self._formatter())
        logger.addHandler(handler)

        if self.settings.console:
            if self._console is None:
                self._console = logging.StreamHandler()
                self._console.setFormatter(self._formatter())
            logger.addHandler(self._console)

        self._loggers[key] = logger
        return logger

    def _formatter(self) -> ContextAwareFormatter:
        return ContextAwareFormatter(
            self.settings.text_format,
            json_format=self.settings.json_format,
            static_fields=self.settings.static_fields,
        )

    def shutdown(self) -> None:
        """Close and detach every handler this manager attached."""
        for logger in self._loggers.values():
            for handler in list(logger.handlers):
                if handler is not self._console:
                    handler.close()
                logger.removeHandler(handler)
        self._loggers.clear()
        if self._console is not None:
            self._console.close()
            self._console = None


_manager: Optional[LoggerManager] = None


def init_logger(app: Flask) -> LoggerManager:
    """Replace the shared manager with one configured from ``app.config``."""
    global _manager
    if _manager is not None:
        _manager.shutdown()
    _manager = LoggerManager(LoggerSettings.from_mapping(app.config, os.environ))
    return _manager


def get_logger(category: str) -> logging.Logger:
    global _manager
    if _manager is None:
        _manager = LoggerManager(LoggerSettings.from_mapping(os.environ, os.environ))
    return _manager.get_logger(category)
