"""
Exception types and error handling helpers.

Every failure a build session can end in is a subclass of TelebuildError,
so callers can catch the whole family or a single kind. The handle_error
helper keeps logging of those failures consistent across components.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class TelebuildError(Exception):
    """Base class for all build session failures."""

    kind = "error"


class ConfigurationError(TelebuildError):
    """
    Raised when a required setting is missing or invalid.

    Always raised before a build process is spawned.
    """

    kind = "configuration"

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class SpawnError(TelebuildError):
    """Raised when the operating system refuses to start the build tool."""

    kind = "spawn"

    def __init__(self, message: str, binary: Optional[Path] = None):
        super().__init__(message)
        self.binary = binary


class SessionIOError(TelebuildError):
    """Raised when the session directory, settings or log file cannot be created."""

    kind = "io"

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class BuildCancelledError(TelebuildError):
    """Raised when a session was interrupted and its build process terminated."""

    kind = "cancelled"

    def __init__(self, message: str, log_path: Optional[Path] = None):
        super().__init__(message)
        self.log_path = log_path


class OutputLoadError(TelebuildError):
    """Raised when the completion report is missing or malformed."""

    kind = "output_load"

    def __init__(self, message: str, output_path: Optional[Path] = None,
                 exit_code: Optional[int] = None):
        super().__init__(message)
        self.output_path = output_path
        self.exit_code = exit_code


class ProcessExitError(TelebuildError):
    """Raised when the build tool exits with a non-zero code."""

    kind = "process_exit"

    def __init__(self, message: str, exit_code: int,
                 log_path: Optional[Path] = None,
                 artifact_path: Optional[Path] = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.log_path = log_path
        self.artifact_path = artifact_path


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors by logging them and exiting."""
    exit_code = kwargs.pop('exit_code', 1)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    import sys
    sys.exit(exit_code)
