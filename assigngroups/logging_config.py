"""
Logging setup for programs that drive the assignment solvers.

The solvers only emit records through module loggers; nothing is printed
unless the calling program configures logging. configure_logging() is that
entry point:

    from assigngroups import configure_logging

    configure_logging(source="immersion")

Line format: 2026-01-06T14:05:52Z [immersion] LEVEL message

Level resolution (first match wins):
    1. explicit ``level`` argument
    2. LOG_LEVEL environment variable
    3. ``debug=True``
    4. Settings.log_level (ASSIGNGROUPS_LOG_LEVEL), default INFO

Levels used by the package:
    INFO   model sizes, solver status
    DEBUG  constraint ledger entries and solver progress
    TRACE  per-student extracted choices and group contents
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

from .settings import Settings, get_settings

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS = {"TRACE": TRACE, "DEBUG": logging.DEBUG, "INFO": logging.INFO}


class ISO8601Formatter(logging.Formatter):
    """'<UTC timestamp> [source] LEVEL message', stamped with the record's creation time."""

    def __init__(self, source: str = "assigngroups"):
        super().__init__()
        self.source = source

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        return datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    def format(self, record: logging.LogRecord) -> str:
        line = f"{self.formatTime(record)} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def resolve_level(debug: bool | None = None, settings: Settings | None = None) -> int:
    env_level = os.getenv("LOG_LEVEL", "").upper()
    if env_level in LEVELS:
        return LEVELS[env_level]
    if debug:
        return logging.DEBUG
    return LEVELS[(settings or get_settings()).log_level]


def configure_logging(
    source: str = "assigngroups",
    level: int | None = None,
    debug: bool | None = None,
    settings: Settings | None = None,
) -> logging.Logger:
    """Send all log records to stdout in the ISO8601 line format.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.

    Returns:
        The configured root logger
    """
    if level is None:
        level = resolve_level(debug, settings)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
