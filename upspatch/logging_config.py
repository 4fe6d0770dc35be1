#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for the UPS Patch Toolkit.

Features:
- Compact console formatter with per-level formats
- Structured JSON formatter (optional)
- Rotating log file (optional)
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "upspatch"

LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3


class ConsoleFormatter(logging.Formatter):
    """Formatter with one pre-built format per level."""

    def __init__(self, enable_colors: bool = False):
        super().__init__()
        self.enable_colors = enable_colors

        formats = {
            logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
            logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
            logging.INFO: "[{asctime}] INFO    {message}",
            logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}"
        }
        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt='%H:%M:%S')
            for level, fmt in formats.items()
        }

        self.colors = {
            logging.ERROR: '\033[91m',
            logging.WARNING: '\033[93m',
            logging.INFO: '\033[92m',
            logging.DEBUG: '\033[94m',
        } if enable_colors else {}

    def format(self, record):
        level = record.levelno
        if level >= logging.ERROR:
            level = logging.ERROR
        formatter = self._formatters.get(level, self._formatters[logging.INFO])
        text = formatter.format(record)

        color = self.colors.get(level)
        if color:
            return f"{color}{text}\033[0m"
        return text


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (optional)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }
        error = getattr(record, "error", None)
        if isinstance(error, dict):
            payload["error"] = error
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the package logger. Calling it again replaces the handlers."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = ConsoleFormatter(enable_colors=sys.stderr.isatty())

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
