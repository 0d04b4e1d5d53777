"""
Input validation functions.

Each validator returns the normalized value or raises ConfigurationError
naming the offending field.
"""

import os
import re
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import ConfigurationError


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """
    Validate that a value is a non-empty string.

    Args:
        value: Value to validate
        field_name: Name of the field being validated

    Returns:
        The string with surrounding whitespace removed

    Raises:
        ConfigurationError: If the value is missing, not a string or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value.strip()


def validate_path_exists(
    path: Union[str, Path],
    must_be_dir: bool = False,
    field_name: str = "path"
) -> Path:
    """
    Validate that a path exists.

    Args:
        path: Path to validate
        must_be_dir: Whether the path must be a directory
        field_name: Name of the field being validated

    Returns:
        Validated path

    Raises:
        ConfigurationError: If path doesn't exist or has the wrong type
    """
    if path is None or str(path) == "":
        raise ConfigurationError(
            f"{field_name} is required",
            field_name=field_name,
            value=path
        )
    path_obj = Path(path)
    if not os.path.exists(path_obj):
        raise ConfigurationError(
            f"{field_name} does not exist: {path_obj}",
            field_name=field_name,
            value=str(path_obj)
        )
    if must_be_dir and not path_obj.is_dir():
        raise ConfigurationError(
            f"{field_name} is not a directory: {path_obj}",
            field_name=field_name,
            value=str(path_obj)
        )
    return path_obj


def validate_relative_path(path: Any, field_name: str = "path") -> Path:
    """
    Validate that a value is a non-empty relative path without parent references.

    Raises:
        ConfigurationError: If the path is empty, absolute or escapes upwards
    """
    text = validate_non_empty_string(path, field_name=field_name)
    path_obj = Path(text)
    if path_obj.is_absolute() or ".." in path_obj.parts:
        raise ConfigurationError(
            f"{field_name} must be a relative path inside the project, got {text}",
            field_name=field_name,
            value=text
        )
    return path_obj


def validate_project_name(name: Any, field_name: str = "project_name") -> str:
    """
    Validate project name format.

    Project names are directory names, so path separators and leading dots
    are rejected.

    Raises:
        ConfigurationError: If name is invalid
    """
    if not name or not isinstance(name, str):
        raise ConfigurationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=name
        )

    if not re.match(r'^[a-zA-Z0-9_][a-zA-Z0-9_. -]*$', name):
        raise ConfigurationError(
            f"{field_name} must be a plain directory name: {name}",
            field_name=field_name,
            value=name
        )

    return name


def validate_env_mapping(value: Any, field_name: str = "env") -> dict:
    """
    Validate a mapping of environment variable names to string values.

    Numbers and booleans are converted to strings; nested values are rejected.
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"{field_name} must be a table of NAME = value pairs",
            field_name=field_name,
            value=value
        )

    env = {}
    for key, item in value.items():
        if not isinstance(key, str) or not re.match(r'^[A-Za-z_][A-Za-z0-9_]*$', key):
            raise ConfigurationError(
                f"{field_name} has an invalid variable name: {key!r}",
                field_name=field_name,
                value=key
            )
        if isinstance(item, bool):
            env[key] = "true" if item else "false"
        elif isinstance(item, (str, int, float)):
            env[key] = str(item)
        else:
            raise ConfigurationError(
                f"{field_name}.{key} must be a string, number or boolean",
                field_name=f"{field_name}.{key}",
                value=item
            )
    return env


def validate_optional_string(value: Any, field_name: str = "value") -> Optional[str]:
    """Return None for missing or blank values, otherwise a validated string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return validate_non_empty_string(value, field_name=field_name)
