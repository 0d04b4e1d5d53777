"""
Shared data structures for the orchestration module.

This module defines the engine-wide configuration object and the timeout
constants used across orchestration components.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ..models.build import BuildPlatform, LogBehaviour
from ..models.config import AppConfig
from ..validation import ConfigurationError


@dataclass(frozen=True)
class BuildRunnerConfig:
    """
    Engine-wide parameters shared by every session a BuildRunner starts.

    Per-request values (project, platform, secret) live on BuildRequest.
    """
    bin_path: Path
    session_root_base: Path = Path(".telebuild")
    log_subdir: Path = Path("Logs")
    log_behaviour: LogBehaviour = LogBehaviour.STDOUT_FILE
    destinations: Dict[BuildPlatform, str] = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=dict)

    def destination_for(self, platform: BuildPlatform) -> str:
        """
        Return the destination template configured for a platform.

        Raises:
            ConfigurationError: If no destination is configured for it
        """
        try:
            return self.destinations[platform]
        except KeyError:
            raise ConfigurationError(
                f"No destination configured for platform {platform.value}",
                field_name=f"build.destinations.{platform.value}",
            )

    @classmethod
    def from_app_config(
        cls,
        app_config: AppConfig,
        log_behaviour: Optional[LogBehaviour] = None,
    ) -> "BuildRunnerConfig":
        return cls(
            bin_path=app_config.unity.bin,
            session_root_base=app_config.session.root_base,
            log_subdir=app_config.session.log_subdir,
            log_behaviour=log_behaviour or app_config.session.log_behaviour,
            destinations=dict(app_config.build.destinations),
            env=dict(app_config.build.env),
        )


class TimeoutConstants:
    """
    Centralized timeout configuration.
    """
    # Process termination timeouts
    TERMINATION_GRACEFUL_TIMEOUT = 3
    TERMINATION_INTERRUPT_TIMEOUT = 2
    TERMINATION_FORCE_TIMEOUT = 2

    # Descendants left behind after the build tool itself exited
    DESCENDANT_WAIT_TIMEOUT = 1.0
