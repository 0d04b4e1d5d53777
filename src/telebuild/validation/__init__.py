"""
Validation and error handling for the telebuild package.

This module provides the typed failures a build session can end in,
input validation, and consistent error reporting across the application.
"""

from .exceptions import (
    BuildCancelledError,
    ConfigurationError,
    ErrorSeverity,
    OutputLoadError,
    ProcessExitError,
    SessionIOError,
    SpawnError,
    TelebuildError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

from .validators import (
    validate_env_mapping,
    validate_non_empty_string,
    validate_optional_string,
    validate_path_exists,
    validate_project_name,
    validate_relative_path,
)

__all__ = [
    # Errors
    "TelebuildError",
    "ConfigurationError",
    "SpawnError",
    "SessionIOError",
    "BuildCancelledError",
    "OutputLoadError",
    "ProcessExitError",
    "ErrorSeverity",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_env_mapping",
    "validate_non_empty_string",
    "validate_optional_string",
    "validate_path_exists",
    "validate_project_name",
    "validate_relative_path",
]
