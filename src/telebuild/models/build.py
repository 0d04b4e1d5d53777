"""
Build data models.

This module contains the closed platform and log routing choices, the
immutable build request, and the records exchanged with the build tool
through the settings and completion report files.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..validation import ConfigurationError, validate_non_empty_string

if TYPE_CHECKING:
    from .config import AppConfig


class BuildPlatform(Enum):
    """Target platform; selects the artifact output convention of the build tool."""

    ANDROID_DEVELOPMENT = "AndroidDevelopment"
    ANDROID_RELEASE = "AndroidRelease"

    @property
    def build_target(self) -> str:
        """Value passed to the build tool's -buildTarget flag."""
        return "android"

    @classmethod
    def parse(cls, value: Any) -> "BuildPlatform":
        """
        Parse a platform from its serialized name or a short alias.

        Raises:
            ConfigurationError: If the value names no known platform
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.lower() == member.value.lower():
                return member
        aliases = {
            "dev": cls.ANDROID_DEVELOPMENT,
            "development": cls.ANDROID_DEVELOPMENT,
            "rel": cls.ANDROID_RELEASE,
            "release": cls.ANDROID_RELEASE,
        }
        try:
            return aliases[text.lower()]
        except KeyError:
            raise ConfigurationError(
                f"platform must be one of {[m.value for m in cls]}, got {value}",
                field_name="platform",
                value=value
            )


class LogBehaviour(Enum):
    """Routing policy for the build tool's captured output."""

    STDOUT = "stdout"
    STDOUT_FILE = "stdout_file"
    FILE = "file"

    @property
    def echoes_to_console(self) -> bool:
        return self in (LogBehaviour.STDOUT, LogBehaviour.STDOUT_FILE)

    @property
    def writes_file(self) -> bool:
        return self in (LogBehaviour.STDOUT_FILE, LogBehaviour.FILE)

    @classmethod
    def parse(cls, value: Any) -> "LogBehaviour":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if text == member.value or text == member.name.lower():
                return member
        raise ConfigurationError(
            f"log_behaviour must be one of {[m.value for m in cls]}, got {value}",
            field_name="log_behaviour",
            value=value
        )


@dataclass(frozen=True)
class BuildRequest:
    """
    One accepted build request.

    Construction checks every required field, so a request that exists is
    always complete. The engine workspace is the path the build tool opens;
    it defaults to the project path when no separate checkout is configured.
    Both paths are made absolute against the current working directory.
    """

    project_name: str
    project_path: Path
    platform: BuildPlatform
    build_entry: str
    secret: str
    engine_workspace: Optional[Path] = None

    def __post_init__(self):
        object.__setattr__(
            self, "project_name",
            validate_non_empty_string(self.project_name, field_name="project_name")
        )

        if self.project_path is None or str(self.project_path) == "":
            raise ConfigurationError("project_path is required", field_name="project_path")
        object.__setattr__(self, "project_path", Path(self.project_path).absolute())

        if self.platform is None:
            raise ConfigurationError("platform is required", field_name="platform")
        object.__setattr__(self, "platform", BuildPlatform.parse(self.platform))

        object.__setattr__(
            self, "build_entry",
            validate_non_empty_string(self.build_entry, field_name="build_entry")
        )

        # An empty secret is allowed for unsigned development builds; a missing one is not.
        if not isinstance(self.secret, str):
            raise ConfigurationError(
                "secret is required (set keystore_password or keystore_password_env)",
                field_name="secret"
            )

        if self.engine_workspace is not None and str(self.engine_workspace) != "":
            object.__setattr__(self, "engine_workspace", Path(self.engine_workspace).absolute())
        else:
            object.__setattr__(self, "engine_workspace", None)

    @property
    def workspace(self) -> Path:
        """Path the build tool is told to open."""
        return self.engine_workspace or self.project_path

    def __repr__(self) -> str:
        return (
            f"BuildRequest(project_name={self.project_name!r}, "
            f"project_path={str(self.project_path)!r}, platform={self.platform.value}, "
            f"build_entry={self.build_entry!r}, secret='***', "
            f"engine_workspace={str(self.engine_workspace) if self.engine_workspace else None!r})"
        )

    @classmethod
    def from_config(
        cls,
        app_config: "AppConfig",
        project_name: str,
        platform: Optional[Any] = None,
    ) -> "BuildRequest":
        """
        Create a request for a project located under the configured projects root.

        Args:
            app_config: Loaded application configuration
            project_name: Directory name of the project
            platform: Platform override; defaults to the configured platform

        Raises:
            ConfigurationError: If any required value is missing
        """
        paths = app_config.paths
        engine_workspace = None
        if paths.projects_root_unity is not None:
            engine_workspace = paths.projects_root_unity / project_name

        return cls(
            project_name=project_name,
            project_path=paths.projects_root / project_name,
            platform=platform if platform is not None else app_config.build.default_platform,
            build_entry=app_config.unity.build_entry,
            secret=app_config.build.keystore_password,
            engine_workspace=engine_workspace,
        )


@dataclass(frozen=True)
class BuildSettings:
    """Settings written for the build tool before it starts."""

    platform: BuildPlatform
    secret: str
    destination: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "platform": self.platform.value,
            "secret": self.secret,
            "destination": self.destination,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildSettings":
        return cls(
            platform=BuildPlatform(data["platform"]),
            secret=data["secret"],
            destination=data["destination"],
        )


@dataclass(frozen=True)
class BuildOutput:
    """Completion report written by the build tool; the artifact path is relative to the session root."""

    artifact_path: str
    platform: BuildPlatform

    @classmethod
    def from_dict(cls, data: Any) -> "BuildOutput":
        """
        Parse a decoded completion report.

        Raises:
            ValueError: If a field is missing, has the wrong type or an unknown value
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        artifact_path = data.get("artifact_path")
        if not isinstance(artifact_path, str) or not artifact_path.strip():
            raise ValueError("'artifact_path' must be a non-empty string")
        if Path(artifact_path).is_absolute() or ".." in Path(artifact_path).parts:
            raise ValueError(f"'artifact_path' must stay inside the session root, got {artifact_path}")

        platform = data.get("platform")
        if platform is None:
            raise ValueError("'platform' is missing")
        try:
            platform = BuildPlatform(platform)
        except ValueError:
            raise ValueError(f"'platform' has unknown value {platform!r}")

        return cls(artifact_path=artifact_path, platform=platform)


@dataclass(frozen=True)
class BuildResult:
    """
    Outcome of a successful session, returned to the caller.

    Both paths are absolute.
    """

    log_path: Path
    artifact_path: Path
    platform: BuildPlatform
    exit_code: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_path": str(self.log_path),
            "artifact_path": str(self.artifact_path),
            "platform": self.platform.value,
            "exit_code": self.exit_code,
        }
