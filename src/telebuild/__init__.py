"""
telebuild: remote build orchestration for Unity projects.

This package turns a build request into a supervised Unity batch-mode
session: a unique session directory with a settings file, a child process
whose output is streamed to the console and/or a log file, cooperative
cancellation, and parsing of the tool's completion report.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Requests, sessions, settings and results
- validation: Typed failures and input validation
- orchestration: The session engine
- system: Project discovery
- cli: Command-line interface

Usage:
    From command line:
        telebuild build <project> [--platform release]

    Programmatically:
        from telebuild import BuildRunner, BuildRunnerConfig, BuildRequest, get_config
        config = get_config()
        request = BuildRequest.from_config(config, "my-game")
        result = await BuildRunner(BuildRunnerConfig.from_app_config(config)).run(request)
"""

from .config import clear_config_cache, get_config, set_config_path
from .models import (
    AppConfig,
    BuildOutput,
    BuildPlatform,
    BuildRequest,
    BuildResult,
    BuildSession,
    BuildSettings,
    LogBehaviour,
    SessionState,
)
from .orchestration import (
    BuildRunner,
    BuildRunnerConfig,
    CancellationToken,
    SignalHandler,
    run_build,
)
from .system import list_projects
from .validation import (
    BuildCancelledError,
    ConfigurationError,
    OutputLoadError,
    ProcessExitError,
    SessionIOError,
    SpawnError,
    TelebuildError,
)

__version__ = "0.3.0"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "AppConfig",
    # Models
    "BuildOutput",
    "BuildPlatform",
    "BuildRequest",
    "BuildResult",
    "BuildSession",
    "BuildSettings",
    "LogBehaviour",
    "SessionState",
    # Engine
    "BuildRunner",
    "BuildRunnerConfig",
    "CancellationToken",
    "SignalHandler",
    "run_build",
    "list_projects",
    # Errors
    "TelebuildError",
    "ConfigurationError",
    "SpawnError",
    "SessionIOError",
    "BuildCancelledError",
    "OutputLoadError",
    "ProcessExitError",
]
