"""Logging for sheetbind: one package logger, context fields rendered inline."""

# Module responsibilities:
# - Configure the ``sheetbind`` logger once (rotating file when the log directory is writable, plus console).
# - Render the ``extra={...}`` context each module attaches as ``key=value`` pairs after the message.

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional, Tuple

ROOT_LOGGER = "sheetbind"
LOG_DIR_ENV = "SHEETBIND_LOG_DIR"
LOG_LEVEL_ENV = "SHEETBIND_LOG_LEVEL"

# Context keys the writer, locator and facade attach to their records.
CONTEXT_FIELDS: Tuple[str, ...] = (
    "sheet",
    "path",
    "output",
    "rows",
    "row_count",
    "removed",
    "cells",
    "columns",
    "titled_row_index",
    "template_rows",
    "fields",
    "error",
)

_configured = False


class ContextFormatter(logging.Formatter):
    """``2020-04-08 10:00:00 [INFO] sheetbind.xlsx - Workbook saved path=out.xlsx``"""

    def __init__(self, fields: Tuple[str, ...] = CONTEXT_FIELDS) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._fields = fields

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = [f"{name}={getattr(record, name)}" for name in self._fields if hasattr(record, name)]
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} {' '.join(context)}{sep}{tail}"


def default_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    return Path(configured) if configured else Path.home() / "SheetBind" / "logs"


def configure_logging(log_dir: Optional[Path] = None) -> logging.Logger:
    """Attach handlers to the package logger on first use and return it.

    The file handler is skipped when the log directory cannot be created;
    console output is always available.
    """

    global _configured
    package_logger = logging.getLogger(ROOT_LOGGER)
    if _configured:
        return package_logger

    package_logger.setLevel(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
    formatter = ContextFormatter()

    directory = log_dir or default_log_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        directory = None
    if directory is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            directory / "sheetbind.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    _configured = True
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return ``sheetbind.<name>``, configuring the package logger if needed."""

    return configure_logging().getChild(name)
