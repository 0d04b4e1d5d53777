"""
Orchestration module for build sessions.

Components:
- BuildRunner: Drives one session through its state machine
- SettingsWriter: Writes the settings file the build tool reads on startup
- ProcessLauncher: Assembles the invocation and spawns the build tool
- LogRouter: Routes captured output to console and/or log file
- CancellationSupervisor: Races output draining against cancellation
- ProcessManager: Terminates and reaps the build tool's process tree
- OutputLoader: Reads the build tool's completion report
- SignalHandler: Cancels registered sessions on SIGINT/SIGTERM
"""

from .build_runner import BuildRunner, run_build
from .cancellation import CancellationSupervisor, CancellationToken
from .log_router import LogRouter
from .output_loader import OutputLoader
from .process_launcher import SESSION_ID_ENV, SESSION_ROOT_ENV, ProcessLauncher
from .process_manager import ProcessManager
from .settings_writer import SettingsWriter, read_settings
from .shared_state import BuildRunnerConfig, TimeoutConstants
from .signal_handler import SignalHandler

__all__ = [
    "BuildRunner",
    "BuildRunnerConfig",
    "CancellationSupervisor",
    "CancellationToken",
    "LogRouter",
    "OutputLoader",
    "ProcessLauncher",
    "ProcessManager",
    "SESSION_ID_ENV",
    "SESSION_ROOT_ENV",
    "SettingsWriter",
    "SignalHandler",
    "TimeoutConstants",
    "read_settings",
    "run_build",
]
