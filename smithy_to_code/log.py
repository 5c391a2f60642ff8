"""
Logging configuration and utilities.

All modules obtain their logger through get_logger so that every record
lives under the "smithy_to_code" hierarchy and can be configured in one place.
"""

from __future__ import annotations

import logging
import os

ROOT_LOGGER_NAME = "smithy_to_code"
LOG_LEVEL_ENV = "SMITHY_TO_CODE_LOG_LEVEL"


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """
    Configure logging for the smithy_to_code package.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output

    Returns:
        The configured package logger
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance under the package hierarchy
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
