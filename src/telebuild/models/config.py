"""
Configuration data models.

This module contains the configuration data structures loaded from
`config.toml`: where projects live, how to invoke the build tool, how
sessions are laid out on disk, and per-platform build settings.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .build import BuildPlatform, LogBehaviour


@dataclass
class PathsConfig:
    """[paths] section."""

    # Directory whose immediate subdirectories are the buildable projects.
    projects_root: Path
    # Optional root of the same projects as seen by the build tool (e.g. a mounted checkout).
    projects_root_unity: Optional[Path] = None


@dataclass
class UnityConfig:
    """[unity] section."""

    # Path to the build tool executable.
    bin: Path
    # Fully qualified static method the build tool executes.
    build_entry: str


@dataclass
class SessionConfig:
    """[session] section."""

    # Directory under each project that holds the session roots.
    root_base: Path = Path(".telebuild")
    # Subdirectory of a session root that holds the build log.
    log_subdir: Path = Path("Logs")
    # Routing policy for the build tool's output.
    log_behaviour: LogBehaviour = LogBehaviour.STDOUT_FILE


@dataclass
class BuildConfig:
    """[build] section."""

    default_platform: BuildPlatform
    # Signing password handed to the build tool through the settings file.
    keystore_password: Optional[str]
    # Destination template per platform, relative to the session root.
    destinations: Dict[BuildPlatform, str]
    # Extra environment variables for the build tool process.
    env: Dict[str, str] = field(default_factory=dict)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    paths: PathsConfig
    unity: UnityConfig
    session: SessionConfig
    build: BuildConfig
