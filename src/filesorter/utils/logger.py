"""
Structured Logging Module

Copyright (c) 2025 Alexandru Emanuel Vasile. All rights reserved.
Proprietary Software - 200-Key Limited Release License

This module provides centralized structured logging for the File Sorter.
Log records are written as JSON lines to a rotating file, while warnings and
errors are echoed to the console in plain text.

NOTICE: This software is proprietary and confidential.
See LICENSE.txt for full terms and conditions.

Author: Alexandru Emanuel Vasile
License: Proprietary (200-key limited release)
"""

import logging
import logging.handlers
import json
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

ROOT_LOGGER_NAME = 'filesorter'


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured log records.

    Each log record is formatted as JSON-like structured data for easy parsing.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as structured JSON.

        Args:
            record: Log record to format

        Returns:
            str: Formatted log string
        """
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_dir: Optional[Union[str, Path]] = None, verbose: bool = False) -> logging.Logger:
    """
    Attach file and console handlers to the package logger.

    Library code never calls this; the command line front-end does, so that
    importing the package (or running the tests) has no filesystem side effects.

    Args:
        log_dir: Directory for ``sorter.log``. Console-only when None.
        verbose: Log DEBUG records to the file as well

    Returns:
        logging.Logger: The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_dir is not None:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)

        # Rotating file handler (10MB max, 5 backups)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "sorter.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )
    logger.addHandler(console_handler)

    return logger


class SorterLogger:
    """
    Wrapper around a standard logger with structured extras.

    Provides convenience methods for the events the sorter reports: moves,
    move failures, watcher lifecycle and bulk sweeps.
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        """
        Initialize the logger.

        Args:
            name: Logger name, normally a child of ``filesorter``
        """
        self.logger = logging.getLogger(name)

    def info(self, message: str, **kwargs):
        """Log info message with optional extra data."""
        self.logger.info(message, extra={'extra_data': kwargs})

    def warning(self, message: str, **kwargs):
        """Log warning message with optional extra data."""
        self.logger.warning(message, extra={'extra_data': kwargs})

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional extra data."""
        self.logger.error(message, exc_info=exc_info, extra={'extra_data': kwargs})

    def debug(self, message: str, **kwargs):
        """Log debug message with optional extra data."""
        self.logger.debug(message, extra={'extra_data': kwargs})

    def file_moved(self, file_name: str, source: str, destination: str, label: str):
        """Log a successful move."""
        self.info(
            f"Moved {file_name} to {label}",
            file_name=file_name,
            source=source,
            destination=destination,
            event_type='file_moved'
        )

    def move_failed(self, file_name: str, error_kind: Optional[str], error: str):
        """Log a failed move."""
        self.error(
            f"[File Sorting ({file_name}) Error]: {error}",
            file_name=file_name,
            error_kind=error_kind,
            error=error,
            event_type='move_failed'
        )

    def watcher_started(self, folder: str):
        """Log the watcher starting on a folder."""
        self.info(
            f"Watching for files in: {folder}",
            folder=folder,
            event_type='watcher_started'
        )

    def watcher_stopped(self, folder: str):
        """Log the watcher stopping."""
        self.info(
            f"Stopped watching: {folder}",
            folder=folder,
            event_type='watcher_stopped'
        )

    def sweep_completed(self, folder: str, moved: int, failed: int, skipped: int):
        """Log the end of a bulk sweep."""
        self.info(
            f"Sorted {moved} existing files from {folder}",
            folder=folder,
            moved=moved,
            failed=failed,
            skipped=skipped,
            event_type='sweep_completed'
        )


def get_logger(name: str = ROOT_LOGGER_NAME) -> SorterLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name

    Returns:
        SorterLogger: Logger wrapper
    """
    return SorterLogger(name)
