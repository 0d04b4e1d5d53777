"""
Configuration validation utilities.

This module turns the raw TOML data into a validated AppConfig, one
section at a time, raising ConfigurationError that names the offending key.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..models.build import BuildPlatform, LogBehaviour
from ..models.config import AppConfig, BuildConfig, PathsConfig, SessionConfig, UnityConfig
from ..validation import (
    ConfigurationError,
    validate_env_mapping,
    validate_non_empty_string,
    validate_optional_string,
    validate_relative_path,
)
from .loader import resolve_config_path

logger = logging.getLogger(__name__)

DEFAULT_KEYSTORE_PASSWORD_ENV = "KEYSTORE_PASSWORD"


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_paths_config(paths_data: Dict[str, Any], config_dir: Path) -> PathsConfig:
    """
    Validate the [paths] section.

    The projects root is required but not checked for existence here;
    listing projects reports a missing directory when it is actually used.
    """
    projects_root = validate_non_empty_string(
        paths_data.get("projects_root"), field_name="paths.projects_root"
    )
    projects_root_unity = validate_optional_string(
        paths_data.get("projects_root_unity"), field_name="paths.projects_root_unity"
    )

    return PathsConfig(
        projects_root=resolve_config_path(projects_root, config_dir),
        # The engine-side root may use another machine's layout, so it is not resolved.
        projects_root_unity=Path(projects_root_unity) if projects_root_unity else None,
    )


def validate_unity_config(unity_data: Dict[str, Any], config_dir: Path) -> UnityConfig:
    """Validate the [unity] section."""
    bin_path = validate_non_empty_string(unity_data.get("bin"), field_name="unity.bin")
    build_entry = validate_non_empty_string(
        unity_data.get("build_entry"), field_name="unity.build_entry"
    )
    return UnityConfig(
        bin=resolve_config_path(bin_path, config_dir),
        build_entry=build_entry,
    )


def validate_session_config(session_data: Dict[str, Any]) -> SessionConfig:
    """Validate the [session] section; every key has a default."""
    defaults = SessionConfig()
    root_base = validate_relative_path(
        session_data.get("root_base", str(defaults.root_base)), field_name="session.root_base"
    )
    log_subdir = validate_relative_path(
        session_data.get("log_subdir", str(defaults.log_subdir)), field_name="session.log_subdir"
    )
    try:
        log_behaviour = LogBehaviour.parse(
            session_data.get("log_behaviour", defaults.log_behaviour.value)
        )
    except ConfigurationError as e:
        raise ConfigurationError(
            f"session.{e}", field_name="session.log_behaviour", value=e.value
        )

    return SessionConfig(root_base=root_base, log_subdir=log_subdir, log_behaviour=log_behaviour)


def validate_build_config(
    build_data: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> BuildConfig:
    """
    Validate the [build] section.

    The keystore password is taken from `keystore_password` when present,
    otherwise from the environment variable named by `keystore_password_env`
    (default KEYSTORE_PASSWORD). A password that cannot be found is left as
    None; building then fails with ConfigurationError before anything runs.
    """
    environ = os.environ if environ is None else environ

    try:
        default_platform = BuildPlatform.parse(
            build_data.get("default_platform", BuildPlatform.ANDROID_DEVELOPMENT.value)
        )
    except ConfigurationError as e:
        raise ConfigurationError(
            f"build.default_{e}", field_name="build.default_platform", value=e.value
        )

    keystore_password = build_data.get("keystore_password")
    if keystore_password is not None and not isinstance(keystore_password, str):
        raise ConfigurationError(
            "build.keystore_password must be a string",
            field_name="build.keystore_password",
        )
    if keystore_password is None:
        env_name = build_data.get("keystore_password_env", DEFAULT_KEYSTORE_PASSWORD_ENV)
        env_name = validate_non_empty_string(env_name, field_name="build.keystore_password_env")
        keystore_password = environ.get(env_name)
        if keystore_password is None:
            logger.warning(f"Keystore password variable {env_name} is not set")

    destinations_data = build_data.get("destinations", {})
    if not isinstance(destinations_data, dict):
        raise ConfigurationError(
            "[build.destinations] must be a table",
            field_name="build.destinations",
            value=destinations_data
        )
    destinations = {}
    for key, value in destinations_data.items():
        try:
            platform = BuildPlatform.parse(key)
        except ConfigurationError:
            raise ConfigurationError(
                f"build.destinations has an unknown platform: {key}",
                field_name="build.destinations",
                value=key
            )
        destinations[platform] = validate_non_empty_string(
            value, field_name=f"build.destinations.{key}"
        )

    env = validate_env_mapping(build_data.get("env"), field_name="build.env")

    return BuildConfig(
        default_platform=default_platform,
        keystore_password=keystore_password,
        destinations=destinations,
        env=env,
    )


def validate_app_config(
    config_data: Dict[str, Any],
    config_dir: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Validate the whole configuration file.

    Args:
        config_data: Parsed TOML data
        config_dir: Directory of the configuration file, used for relative paths
        environ: Environment used to look up secrets (defaults to os.environ)

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    paths = validate_paths_config(_section(config_data, "paths"), config_dir)
    unity = validate_unity_config(_section(config_data, "unity"), config_dir)
    session = validate_session_config(_section(config_data, "session"))
    build = validate_build_config(_section(config_data, "build"), environ=environ)

    missing = [p.value for p in BuildPlatform if p not in build.destinations]
    if missing:
        logger.warning(f"No destination configured for platforms: {', '.join(missing)}")

    return AppConfig(paths=paths, unity=unity, session=session, build=build)
