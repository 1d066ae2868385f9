"""
Logging configuration for HiggsFlow client matching.

Everything logs under the ``higgsflow`` logger; modules ask for a child with
``get_logger("client_matching")`` and inherit its handlers.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.settings import settings

ROOT_LOGGER_NAME = "higgsflow"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure a logger with console output and a rotating log file.

    Args:
        name: Logger name (also the log file stem)
        log_dir: Directory for the log file (default: settings.log_dir)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    log_dir = log_dir or settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    console_handler.setFormatter(formatter)

    # 5 MB x 3 files keeps a few weeks of match decisions
    file_handler = RotatingFileHandler(
        log_dir / f"{name}.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, e.g. ``higgsflow.client_matching``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Default logger
logger = setup_logging()
