#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Output bus shared by every command.

Three channels are kept apart:
- console: results the user asked for (stdout)
- error: problems and warnings the user should see (stderr)
- log: structured records for later diagnosis (log file)
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

LOGGER_NAME = "mp3repair"
LOG_FILE_NAME = "mp3repair.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

INFO = "INFO"
WARNING = "WARNING"
ERROR = "ERROR"

_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


def quote(value: str) -> str:
    """Double-quote a name for user-facing output, escaping quotes and control characters"""
    return json.dumps(value, ensure_ascii=False)


def format_fields(fields: Optional[Dict[str, Any]]) -> str:
    """Render log fields as sorted key=value pairs"""
    if not fields:
        return ""
    return " ".join(f"{key}={fields[key]!r}" for key in sorted(fields))


class OutputBus:
    """
    Writes console output, error output and log records.

    Streams default to the process stdout/stderr; tests pass their own.
    """

    def __init__(
        self,
        console: Optional[TextIO] = None,
        error: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._console = console
        self._error = error
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    @property
    def console(self) -> TextIO:
        return self._console if self._console is not None else sys.stdout

    @property
    def error(self) -> TextIO:
        return self._error if self._error is not None else sys.stderr

    def write_console(self, message: str = "") -> None:
        """Write a line of user-facing output"""
        self._write(self.console, message)

    def write_error(self, message: str) -> None:
        """Write a line of user-facing error output"""
        self._write(self.error, message)

    def log(self, level: str, message: str, fields: Optional[Dict[str, Any]] = None) -> None:
        """Record a structured log entry"""
        rendered = format_fields(fields)
        text = f"{message} {rendered}" if rendered else message
        self.logger.log(_LEVELS.get(level, logging.INFO), text)

    @staticmethod
    def _write(stream: TextIO, message: str) -> None:
        if not message.endswith("\n"):
            message += "\n"
        stream.write(message)
        stream.flush()


def configure_logging(log_dir: Path) -> Optional[logging.Handler]:
    """
    Send log records to a file under log_dir.

    Returns the installed handler, or None if the directory is unusable;
    in that case records are discarded rather than mixed into stderr.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
    except OSError as e:
        print(f"Warning: log file cannot be opened in {log_dir}: {e}", file=sys.stderr)
        logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(handler)
    return handler
