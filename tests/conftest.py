"""
Pytest configuration and shared fixtures for the telebuild test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the telebuild project.
"""

import os
import shutil
import stat
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def projects_root(temp_dir):
    """A projects root holding two projects and a hidden directory."""
    root = temp_dir / "projects"
    for name in ("alpha", "beta", ".cache"):
        (root / name).mkdir(parents=True)
    (root / "README.txt").write_text("not a project")
    return root


@pytest.fixture
def sample_config_data(projects_root, temp_dir):
    """Sample configuration data for testing."""
    return {
        "paths": {
            "projects_root": str(projects_root),
        },
        "unity": {
            "bin": str(temp_dir / "bin" / "Unity"),
            "build_entry": "Telebuild.Builder.Build",
        },
        "session": {
            "root_base": ".telebuild",
            "log_subdir": "Logs",
            "log_behaviour": "stdout_file",
        },
        "build": {
            "default_platform": "AndroidDevelopment",
            "keystore_password": "hunter2",
            "destinations": {
                "AndroidDevelopment": "Android/dev.apk",
                "AndroidRelease": "Android/release.aab",
            },
            "env": {
                "UNITY_NOPROXY": "localhost",
            },
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Write the sample configuration to a temporary config.toml."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


# ============================================================================
# Fake Build Tool
# ============================================================================


def write_fake_tool(path: Path, body: str) -> Path:
    """
    Write an executable shell script standing in for the build tool.

    The script receives the real invocation and the session environment,
    so `$TELEBUILD_SESSION_ROOT` points at the session root.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


SUCCESSFUL_TOOL = """\
echo "Unity Editor starting"
echo "args: $*"
echo "warning: shader variant stripped" >&2
test -f "$TELEBUILD_SESSION_ROOT/settings.json" || exit 3
mkdir -p "$TELEBUILD_SESSION_ROOT/Android"
echo apk > "$TELEBUILD_SESSION_ROOT/Android/app.apk"
printf '{"artifact_path": "Android/app.apk", "platform": "%s"}' "${REPORT_PLATFORM:-AndroidDevelopment}" \\
    > "$TELEBUILD_SESSION_ROOT/output.json"
echo "Build succeeded"
exit 0
"""


@pytest.fixture
def fake_tool_factory(temp_dir):
    """Create fake build tools with a given script body."""
    counter = {"n": 0}

    def factory(body: str) -> Path:
        counter["n"] += 1
        return write_fake_tool(temp_dir / "bin" / f"tool{counter['n']}.sh", body)

    return factory


@pytest.fixture
def successful_tool_body():
    """Script body of a build tool run that succeeds."""
    return SUCCESSFUL_TOOL


@pytest.fixture
def fake_tool(fake_tool_factory):
    """A build tool that routes a few lines and writes a valid completion report."""
    return fake_tool_factory(SUCCESSFUL_TOOL)


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def make_request(project_path: Path, /, **kwargs):
        """Create a BuildRequest with sensible defaults."""
        from telebuild.models import BuildPlatform, BuildRequest

        values = {
            "project_name": project_path.name,
            "project_path": project_path,
            "platform": BuildPlatform.ANDROID_DEVELOPMENT,
            "build_entry": "Telebuild.Builder.Build",
            "secret": "hunter2",
        }
        values.update(kwargs)
        return BuildRequest(**values)

    @staticmethod
    def make_runner_config(bin_path: Path, **kwargs):
        """Create a BuildRunnerConfig with both destinations configured."""
        from telebuild.models import BuildPlatform, LogBehaviour
        from telebuild.orchestration import BuildRunnerConfig

        values = {
            "bin_path": bin_path,
            "log_behaviour": LogBehaviour.STDOUT_FILE,
            "destinations": {
                BuildPlatform.ANDROID_DEVELOPMENT: "Android/dev.apk",
                BuildPlatform.ANDROID_RELEASE: "Android/release.aab",
            },
        }
        values.update(kwargs)
        return BuildRunnerConfig(**values)


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    from telebuild.config import clear_config_cache, get_config_path, set_config_path

    original_config_path = get_config_path()

    yield  # Run the test

    clear_config_cache()
    set_config_path(original_config_path)


@pytest.fixture
def clean_environ(monkeypatch):
    """Remove variables that would leak into keystore password lookup."""
    monkeypatch.delenv("KEYSTORE_PASSWORD", raising=False)
    return os.environ
