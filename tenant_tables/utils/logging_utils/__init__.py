"""
Category loggers with contextual fields.

Usage:
    from tenant_tables.utils.logging_utils import get_logger, log_context
    log = get_logger("tables")
    with log_context(table="clusters", action="insert"):
        log.info("row inserted")
"""

from .manager import (
    ContextAwareFormatter,
    LoggerManager,
    LoggerSettings,
    get_log_context,
    get_logger,
    init_logger,
    log_context,
)

__all__ = [
    "ContextAwareFormatter",
    "LoggerManager",
    "LoggerSettings",
    "get_logger",
    "get_log_context",
    "log_context",
    "init_logger",
]
