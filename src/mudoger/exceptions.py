"""Custom exceptions for MuDoGeR."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union


class MudogerError(Exception):
    """Base exception for all MuDoGeR errors."""

    pass


class ConfigurationError(MudogerError):
    """Raised when configuration is invalid or missing."""

    pass


class ExternalToolError(MudogerError):
    """Raised when an external tool execution fails."""

    def __init__(
        self,
        message: str = "",
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        log_file: Optional[Path] = None,
    ):
        """Initialize ExternalToolError with optional command details.

        Args:
            message: Error message
            command: Command that was executed (list of strings)
            returncode: Exit code from the command
            stderr: Standard error output from the command
            log_file: File holding the full stdout/stderr of the command
        """
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        self.log_file = log_file


class PipelineError(MudogerError):
    """Raised when the pipeline cannot continue."""

    pass


class MissingInputError(MudogerError):
    """Raised when a step's upstream artifacts are absent."""

    def __init__(self, message: str = "", paths: Sequence[Union[str, Path]] = ()):
        super().__init__(message)
        self.paths = [str(p) for p in paths]


class VerificationError(MudogerError):
    """Raised when an artifact fails verification."""

    def __init__(self, message: str = "", kind: Optional[str] = None, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.kind = kind
        self.path = str(path) if path is not None else None


class FileFormatError(MudogerError):
    """Raised when a table or sequence file does not match its schema."""

    pass


class DependencyError(ExternalToolError):
    """Raised when an external tool is missing or older than required."""

    pass
