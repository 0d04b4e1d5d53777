"""
Configuration management for the telebuild package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_path,
    is_config_loaded,
    set_config_path,
)

from .loader import load_main_config, load_toml_file, resolve_config_path
from .validators import (
    validate_app_config,
    validate_build_config,
    validate_paths_config,
    validate_session_config,
    validate_unity_config,
)

__all__ = [
    # Main interface
    "get_config",
    "get_config_path",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "resolve_config_path",
    "validate_app_config",
    "validate_build_config",
    "validate_paths_config",
    "validate_session_config",
    "validate_unity_config",
]
