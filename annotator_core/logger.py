# annotator_core/logger.py
"""
Logging configuration for annotator_core.

Usage:
    from annotator_core.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Image loaded")
"""

import logging
import sys
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_loggers: dict[str, logging.Logger] = {}


def _default_level() -> int:
    from .config import get_config

    level = logging.getLevelName(get_config().log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(
    name: str,
    level: Optional[int] = None,
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
) -> logging.Logger:
    """
    Get or create a logger with a stdout handler.

    Args:
        name: Logger name, typically __name__ of the calling module
        level: Logging level (default: ANNOTATOR_LOG_LEVEL, else INFO)
        log_format: Custom log format string (optional)
        date_format: Custom date format string (optional)

    Returns:
        Configured logging.Logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)

    if not logger.handlers:
        if level is None:
            level = _default_level()
        logger.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            fmt=log_format or DEFAULT_FORMAT,
            datefmt=date_format or DEFAULT_DATE_FORMAT,
        ))
        logger.addHandler(console_handler)

        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(name: str, level: int) -> None:
    """Set the log level for an existing logger and its handlers."""
    if name in _loggers:
        _loggers[name].setLevel(level)
        for handler in _loggers[name].handlers:
            handler.setLevel(level)


def add_file_handler(
    name: str,
    log_file: Path,
    level: int = logging.DEBUG,
    log_format: Optional[str] = None,
) -> None:
    """
    Add a file handler to an existing logger.

    Args:
        name: Logger name
        log_file: Path to log file
        level: File logging level
        log_format: Custom format for file logs
    """
    if name not in _loggers:
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        fmt=log_format or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    ))
    _loggers[name].addHandler(file_handler)
