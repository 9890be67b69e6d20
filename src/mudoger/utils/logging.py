"""Logging setup for MuDoGeR.

All loggers live under the ``mudoger`` namespace so a single call to
:func:`setup_logging` controls every module.
"""

from __future__ import annotations

import logging
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Map a level name (case-insensitive) or number to a logging level."""
    if level is None:
        return default
    if isinstance(level, int):
        return level
    return LEVELS.get(str(level).upper(), default)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> None:
    """Configure logging for the 'mudoger' namespace.

    Args:
        level: Logging level for the application logger
        log_file: Optional path for a detailed, rotating debug log
        max_bytes: Maximum size per log file before rotation
        backup_count: Number of backup files to keep

    The root logger stays at WARNING so third-party libraries remain quiet.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger("mudoger")
    app_logger.setLevel(level)
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    app_logger.addHandler(console)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            app_logger.addHandler(file_handler)
        except OSError as e:
            warnings.warn(f"Failed to create log file {log_file}: {e}")

    app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger under 'mudoger' root."""
    return logging.getLogger("mudoger").getChild(name)


class LogTemplates:
    """Standard log message templates shared by the runner and steps."""

    # Step lifecycle messages
    STEP_START = "Starting step: {step_name} [{step_number}/{total}] ({percent:.0f}%)"
    STEP_SUCCESS = "Completed step: {step_name} in {duration:.1f}s"
    STEP_FAILURE = "Failed at step: {step_name} - {error}"
    STEP_SKIPPED = "{step_name} already completed successfully - skipping"
    STEP_SOFT_FAILURE = "{step_name} failed but is not critical - continuing"
    STEP_INCONSISTENT = "{step_name} execution completed but verification failed: {error}"
    STEP_MISSING_INPUT = "{step_name} cannot start, missing input: {error}"

    # Table joins and copies
    JOIN_SUMMARY = "Joined {tables} tables onto {genomes:,} genomes ({issues} join issues)"
    FILES_COPIED = "Copied {count:,} sequence files to {path}"

    # Processing statistics
    FILTERING_STATS = "Filtered: {kept:,} kept, {removed:,} removed ({percent:.1f}% pass rate)"

    # External tool execution
    TOOL_START = "Running {tool_name}: {description}"
    TOOL_SUCCESS = "{tool_name} completed in {duration:.1f}s"
    TOOL_FAILURE = "{tool_name} failed with exit code {exit_code}"
