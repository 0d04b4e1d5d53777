"""
Unit tests for the settings writer and the process launcher.

Tests the session directory layout written before spawning, and the
exact invocation and environment handed to the build tool.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from telebuild.models import BuildPlatform, BuildSession, BuildSettings
from telebuild.orchestration import (
    SESSION_ID_ENV,
    SESSION_ROOT_ENV,
    ProcessLauncher,
    SettingsWriter,
    read_settings,
)
from telebuild.validation import SessionIOError, SpawnError


@pytest.fixture
def session(temp_dir):
    return BuildSession.create(temp_dir / "game", Path(".telebuild"), Path("Logs"))


@pytest.mark.unit
class TestSettingsWriter:
    """Test cases for SettingsWriter."""

    def test_write_creates_session_tree(self, session):
        """Test that the session root and log directory exist after writing."""
        settings = BuildSettings(BuildPlatform.ANDROID_RELEASE, "pw", "Android/release.aab")

        path = SettingsWriter().write(session, settings)

        assert path == session.settings_path
        assert session.log_dir.is_dir()
        with open(path, encoding="utf-8") as f:
            assert json.load(f) == {
                "platform": "AndroidRelease",
                "secret": "pw",
                "destination": "Android/release.aab",
            }

    def test_read_settings_back(self, session):
        settings = BuildSettings(BuildPlatform.ANDROID_DEVELOPMENT, "", "Android/dev.apk")
        SettingsWriter().write(session, settings)

        assert read_settings(session.settings_path) == settings

    def test_unwritable_location(self, temp_dir):
        """Test that a session root that cannot be created is an I/O failure."""
        blocker = temp_dir / "game"
        blocker.write_text("a file where the project directory should be")
        session = BuildSession.create(blocker, Path(".telebuild"), Path("Logs"))
        settings = BuildSettings(BuildPlatform.ANDROID_DEVELOPMENT, "pw", "Android/dev.apk")

        with pytest.raises(SessionIOError) as exc_info:
            SettingsWriter().write(session, settings)

        assert exc_info.value.kind == "io"

    @pytest.mark.asyncio
    async def test_write_async(self, session):
        settings = BuildSettings(BuildPlatform.ANDROID_DEVELOPMENT, "pw", "Android/dev.apk")

        await SettingsWriter().write_async(session, settings)

        assert session.settings_path.exists()


@pytest.mark.unit
class TestProcessLauncher:
    """Test cases for ProcessLauncher."""

    def test_build_command(self, session, temp_dir, test_utils):
        """Test the exact argument vector passed to the build tool."""
        request = test_utils.make_request(temp_dir / "game", platform=BuildPlatform.ANDROID_RELEASE)
        launcher = ProcessLauncher(temp_dir / "Unity")

        command = launcher.build_command(request, session)

        assert command == [
            str(temp_dir / "Unity"),
            "-batchmode",
            "-quit",
            "-projectPath", str(temp_dir / "game"),
            "-executeMethod", "Telebuild.Builder.Build",
            "-buildTarget", "android",
            "-logFile", "-",
            "-sessionroot", f".telebuild/{session.session_id}",
        ]

    def test_build_command_uses_engine_workspace(self, session, temp_dir, test_utils):
        request = test_utils.make_request(temp_dir / "game", engine_workspace="/mnt/unity/game")

        command = ProcessLauncher(temp_dir / "Unity").build_command(request, session)

        assert command[command.index("-projectPath") + 1] == str(Path("/mnt/unity/game"))

    def test_build_command_with_relative_project_path(self, session, temp_dir, test_utils, monkeypatch):
        """Test that a relative project path reaches the tool as an absolute path."""
        monkeypatch.chdir(temp_dir)
        request = test_utils.make_request(Path("game"))

        command = ProcessLauncher(temp_dir / "Unity").build_command(request, session)

        assert command[command.index("-projectPath") + 1] == str(Path.cwd() / "game")

    def test_build_environment(self, session, temp_dir):
        """Test that the child learns its session and receives configured variables."""
        launcher = ProcessLauncher(temp_dir / "Unity", env={"UNITY_NOPROXY": "localhost"})

        with patch.dict(os.environ, {"INHERITED": "yes"}):
            env = launcher.build_environment(session)

        assert env[SESSION_ROOT_ENV] == str(session.root)
        assert env[SESSION_ID_ENV] == session.session_id
        assert env["UNITY_NOPROXY"] == "localhost"
        assert env["INHERITED"] == "yes"

    def test_check_binary_missing(self, temp_dir):
        with pytest.raises(SpawnError) as exc_info:
            ProcessLauncher(temp_dir / "missing").check_binary()

        assert exc_info.value.binary == temp_dir / "missing"

    def test_check_binary_not_executable(self, temp_dir):
        binary = temp_dir / "Unity"
        binary.write_text("#!/bin/sh\n")
        binary.chmod(0o644)

        with patch("telebuild.orchestration.process_launcher.os.access", return_value=False):
            with pytest.raises(SpawnError):
                ProcessLauncher(binary).check_binary()

    @pytest.mark.asyncio
    async def test_spawn_missing_binary_starts_nothing(self, session, temp_dir, test_utils):
        """Test that no process is created when the binary is missing."""
        request = test_utils.make_request(temp_dir / "game")

        with patch("asyncio.create_subprocess_exec") as mock_exec:
            with pytest.raises(SpawnError):
                await ProcessLauncher(temp_dir / "missing").spawn(request, session)

        mock_exec.assert_not_called()
