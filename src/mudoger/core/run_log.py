"""Append-only audit log for a pipeline run.

Every event is written as ``[YYYY-mm-dd HH:MM:SS] [LEVEL] [step] message``,
flushed and fsynced before :meth:`RunLog.log` returns, and mirrored to the
console through the ``mudoger.run`` logger. Existing content is never
rewritten; re-running a module appends a new section to the same file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional, Union

from mudoger.core.pipeline_types import StepStatus
from mudoger.utils.logging import get_logger

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

INFO = "INFO"
SUCCESS = "SUCCESS"
WARNING = "WARNING"
ERROR = "ERROR"

_CONSOLE_LEVELS = {
    INFO: logging.INFO,
    SUCCESS: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEvent:
    timestamp: datetime
    level: str
    step_name: Optional[str]
    message: str
    outcome: Optional[StepStatus] = None

    def format(self) -> str:
        stamp = self.timestamp.strftime(TIMESTAMP_FORMAT)
        step = f" [{self.step_name}]" if self.step_name else ""
        return f"[{stamp}] [{self.level}]{step} {self.message}"


class RunLog:
    """Durable, ordered record of what happened during a run."""

    def __init__(self, path: Union[str, Path], echo: bool = True):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.echo = echo
        self.logger = get_logger("run")
        self._events: List[LogEvent] = []
        self._handle: Optional[IO[str]] = open(self.path, "a", encoding="utf-8")

    @property
    def events(self) -> tuple[LogEvent, ...]:
        return tuple(self._events)

    def log(
        self,
        level: str,
        step_name: Optional[str],
        message: str,
        outcome: Optional[StepStatus] = None,
    ) -> LogEvent:
        level = level.upper()
        if level not in _CONSOLE_LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        event = LogEvent(datetime.now(), level, step_name, message, outcome)
        self._write(event.format())
        self._events.append(event)
        if self.echo:
            prefix = f"[{step_name}] " if step_name else ""
            self.logger.log(_CONSOLE_LEVELS[level], f"{prefix}{message}")
        return event

    def info(self, message: str, step_name: Optional[str] = None) -> LogEvent:
        return self.log(INFO, step_name, message)

    def success(self, message: str, step_name: Optional[str] = None) -> LogEvent:
        return self.log(SUCCESS, step_name, message)

    def warning(self, message: str, step_name: Optional[str] = None) -> LogEvent:
        return self.log(WARNING, step_name, message)

    def error(self, message: str, step_name: Optional[str] = None) -> LogEvent:
        return self.log(ERROR, step_name, message)

    def section(self, title: str) -> None:
        """Write a visual separator followed by ``title``."""
        self.info("=" * 50)
        self.info(title)
        self.info("=" * 50)

    def write_block(self, text: str) -> None:
        """Log a multi-line block (such as the run summary) one line per event."""
        for line in text.splitlines():
            self.info(line)

    def counts(self) -> dict[str, int]:
        counts = {level: 0 for level in _CONSOLE_LEVELS}
        for event in self._events:
            counts[event.level] += 1
        return counts

    def _write(self, line: str) -> None:
        if self._handle is None:
            self._handle = open(self.path, "a", encoding="utf-8")
        self._handle.write(line + "\n")
        self._handle.flush()
        os.fsync(self._handle.fileno())

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
