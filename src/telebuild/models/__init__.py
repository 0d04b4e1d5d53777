"""
Data models for the build orchestration engine.

Configuration Models:
- Application configuration loaded from TOML

Build Models:
- Platform and log routing choices
- The immutable build request
- Settings and completion report records exchanged with the build tool
- The result returned to the caller

Session Models:
- Session identity, on-disk layout and state machine
"""

from .build import (
    BuildOutput,
    BuildPlatform,
    BuildRequest,
    BuildResult,
    BuildSettings,
    LogBehaviour,
)
from .config import AppConfig, BuildConfig, PathsConfig, SessionConfig, UnityConfig
from .session import (
    LOG_FILE_NAME,
    OUTPUT_FILE_NAME,
    SETTINGS_FILE_NAME,
    BuildSession,
    InvalidStateTransition,
    SessionState,
    new_session_id,
)

__all__ = [
    # Configuration
    "AppConfig",
    "BuildConfig",
    "PathsConfig",
    "SessionConfig",
    "UnityConfig",
    # Build
    "BuildOutput",
    "BuildPlatform",
    "BuildRequest",
    "BuildResult",
    "BuildSettings",
    "LogBehaviour",
    # Session
    "BuildSession",
    "InvalidStateTransition",
    "SessionState",
    "new_session_id",
    "LOG_FILE_NAME",
    "OUTPUT_FILE_NAME",
    "SETTINGS_FILE_NAME",
]
