#!/usr/bin/env python3
"""
🔍 Centralized Logging System for SpotiKeep
Console logging with colors (or structured JSON) plus optional rotating
log files when a log directory is configured.
"""

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

LOG_LEVEL = logging.INFO
_env_level = os.getenv('SPOTIKEEP_LOG_LEVEL')
if _env_level:
    LOG_LEVEL = getattr(logging, _env_level.upper(), LOG_LEVEL)

ENABLE_JSON_LOGS = os.getenv('SPOTIKEEP_JSON_LOGS', '0') == '1'

MAX_LOG_SIZE = 5 * 1024 * 1024
BACKUP_COUNT = 3

_env_log_dir = os.getenv('SPOTIKEEP_LOG_DIR')
LOG_DIR: Optional[Path] = Path(_env_log_dir) if _env_log_dir else None
ENABLE_FILE_LOGGING = LOG_DIR is not None

if LOG_DIR is not None:
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Console-only logging if the directory is not writable
        ENABLE_FILE_LOGGING = False

_FILE_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s'

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'no_color',
}


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self) -> None:
        super().__init__('%(asctime)s | %(name)s | %(levelname)s | %(message)s')

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, 'no_color', False):
            return super().format(record)

        original = record.levelname
        color = self.COLORS.get(original, self.COLORS['RESET'])
        record.levelname = f"{color}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for log aggregation (journalctl, Loki, ...).

    Example output:
        {"timestamp": "2025-11-04T10:30:00.123Z", "level": "INFO",
         "logger": "spotikeep.reconciler", "message": "tick.reasserted",
         "device_id": "abc", "context_uri": "spotify:playlist:xyz"}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            'timestamp': created.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_data['source'] = f"{record.filename}:{record.lineno}"
            log_data['function'] = record.funcName

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Extra fields passed via logger.info("msg", extra={...})
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=True, sort_keys=True)


def _file_formatter() -> logging.Formatter:
    return JSONFormatter() if ENABLE_JSON_LOGS else logging.Formatter(_FILE_FORMAT)


def setup_logger(name: str) -> logging.Logger:
    """
    Sets up a logger with console and (optionally) file handlers

    Args:
        name: Logger name (usually module name)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already exists
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(JSONFormatter() if ENABLE_JSON_LOGS else ColoredFormatter())
    logger.addHandler(console_handler)

    if ENABLE_FILE_LOGGING and LOG_DIR is not None:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "spotikeep.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setLevel(LOG_LEVEL)
            file_handler.setFormatter(_file_formatter())
            logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "spotikeep_errors.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(_file_formatter())
            logger.addHandler(error_handler)
        except OSError:
            logger.warning("Could not open log files in %s; console only", LOG_DIR)

    return logger


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Initialize the ``spotikeep`` and ``spotify`` logger trees.

    Args:
        level: Optional level name overriding ``SPOTIKEEP_LOG_LEVEL``

    Returns:
        logging.Logger: The main application logger
    """
    main = setup_logger("spotikeep")
    api = setup_logger("spotify")
    if level:
        numeric = getattr(logging, level.upper(), None)
        if isinstance(numeric, int):
            for logger in (main, api):
                logger.setLevel(numeric)
                for handler in logger.handlers:
                    if handler.level != logging.ERROR:
                        handler.setLevel(numeric)
    return main


def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log a message with structured context fields.

    In JSON mode the context fields appear as separate keys; otherwise they are
    appended to the message as ``key=value`` pairs.

    Example:
        >>> log_structured(logger, logging.INFO, "tick.reasserted",
        ...                device_id="abc", context_uri="spotify:playlist:xyz")
    """
    if ENABLE_JSON_LOGS:
        logger.log(level, message, extra=context)
    elif context:
        context_str = " ".join(f"{k}={v}" for k, v in context.items())
        logger.log(level, f"{message} | {context_str}")
    else:
        logger.log(level, message)


def log_shutdown(logger: logging.Logger, component_name: str) -> None:
    """Log component shutdown and flush handlers."""
    logger.info(f"🛑 Shutting down {component_name}")
    for handler in logger.handlers:
        handler.flush()
