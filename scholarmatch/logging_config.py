"""Logging setup for the API process and CLI scripts.

Formats, per-module levels and the optional log file are driven by the
``LOG_*`` settings.
"""
from __future__ import annotations

import logging
from pathlib import Path

from .config import settings

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "line": %(lineno)d, "message": "%(message)s"}'
)

FORMATS = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

MODULE_LOG_LEVELS = {
    "scholarmatch": "DEBUG",
    "scholarmatch.eligibility": "INFO",
    "scholarmatch.pipelines": "INFO",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "aiosqlite": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def setup_logging(
    log_level: str | None = None,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure the root logger.

    Args:
        log_level: Override the configured level (DEBUG, INFO, ...)
        log_format: Override the configured format (simple, detailed, json)
        log_file: Also write logs to this file
    """
    level = (log_level or settings.logging.level).upper()
    fmt = log_format or settings.logging.format
    log_file = log_file or settings.logging.file

    formatter = logging.Formatter(
        FORMATS.get(fmt, DETAILED_FORMAT),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file={log_file}")
