"""
Logging Configuration and Utilities

All client modules log below the ``remote_docker`` logger. Applications
either call ``configure_logging`` with the ``logging`` section of a loaded
``Config`` (``DockerManager.from_config`` does this) or call
``setup_logging`` with explicit values.

Console output is colored unless JSON is requested. The optional rotating
log file never carries color codes and records the call site of each
message.

Author: Remote Docker Project
License: MIT
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger
from typing import List, Optional

from ..config.schema import LoggingSettings


LOGGER_NAMESPACE = "remote_docker"

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'

JSON_CONSOLE_FIELDS = '%(asctime)s %(name)s %(levelname)s %(message)s'
JSON_FILE_FIELDS = '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s'


class ColoredFormatter(logging.Formatter):
    """Colors the level name of console records."""

    RESET = '\033[0m'
    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # The record is shared with the file handler
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _build_formatter(json_format: bool, for_file: bool) -> logging.Formatter:
    if json_format:
        return jsonlogger.JsonFormatter(JSON_FILE_FIELDS if for_file else JSON_CONSOLE_FIELDS)
    if for_file:
        return logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
    return ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)


def _resolve_level(log_level) -> int:
    name = str(getattr(log_level, 'value', log_level)).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")
    return level


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_file_path: Optional[str] = None,
    log_rotation_size: int = 10485760,  # 10MB
    log_retention_count: int = 5,
    json_format: bool = False
) -> logging.Logger:
    """
    Configure logging for the ``remote_docker`` namespace.

    Replaces any handlers installed by an earlier call, so it is safe to
    call again after the configuration changed.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Enable file logging
        log_file_path: Path to log file (required when log_to_file is set)
        log_rotation_size: Max log file size before rotation (bytes)
        log_retention_count: Number of backup log files to keep
        json_format: Use JSON formatting for logs

    Returns:
        Configured namespace logger

    Raises:
        ValueError: Unknown level, or file logging without a path
    """
    level = _resolve_level(log_level)
    if log_to_file and not log_file_path:
        raise ValueError("log_file_path is required when log_to_file is enabled")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_build_formatter(json_format, for_file=False))
    handlers: List[logging.Handler] = [console_handler]

    if log_to_file:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=log_rotation_size,
            backupCount=log_retention_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(_build_formatter(json_format, for_file=True))
        handlers.append(file_handler)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for old_handler in list(logger.handlers):
        logger.removeHandler(old_handler)
        old_handler.close()

    logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    logger.propagate = False

    logger.debug(
        f"Logging to {'console and ' + str(log_file_path) if log_to_file else 'console'} "
        f"at {logging.getLevelName(level)} level"
    )
    return logger


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """
    Apply the ``logging`` section of the configuration.

    Args:
        settings: Logging settings (from ``Config.logging``)

    Returns:
        Configured namespace logger
    """
    return setup_logging(
        log_level=settings.log_level,
        log_to_file=settings.log_to_file,
        log_file_path=settings.log_file_path,
        log_rotation_size=settings.log_rotation_size,
        log_retention_count=settings.log_retention_count,
        json_format=settings.json_format
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the ``remote_docker`` namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
