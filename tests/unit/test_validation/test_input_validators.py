"""
Unit tests for input validators and error handling helpers.
"""

import logging
from pathlib import Path

import pytest

from telebuild.validation import (
    BuildCancelledError,
    ConfigurationError,
    ErrorSeverity,
    OutputLoadError,
    ProcessExitError,
    SessionIOError,
    SpawnError,
    TelebuildError,
    handle_cli_error,
    handle_error,
    validate_path_exists,
    validate_project_name,
    validate_relative_path,
)


@pytest.mark.unit
class TestValidators:
    """Test cases for input validators."""

    def test_validate_path_exists(self, temp_dir):
        assert validate_path_exists(temp_dir, must_be_dir=True) == temp_dir

    def test_validate_path_missing(self, temp_dir):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_path_exists(temp_dir / "nope", field_name="project_path")

        assert exc_info.value.field_name == "project_path"

    def test_validate_path_not_a_directory(self, temp_dir):
        file_path = temp_dir / "file.txt"
        file_path.write_text("x")

        with pytest.raises(ConfigurationError):
            validate_path_exists(file_path, must_be_dir=True)

    def test_validate_relative_path(self):
        assert validate_relative_path("a/b") == Path("a/b")
        with pytest.raises(ConfigurationError):
            validate_relative_path("a/../../b")

    @pytest.mark.parametrize("name", ["game", "My Game 2", "proj_1.0"])
    def test_valid_project_names(self, name):
        assert validate_project_name(name) == name

    @pytest.mark.parametrize("name", ["", ".hidden", "a/b", "../up", None])
    def test_invalid_project_names(self, name):
        with pytest.raises(ConfigurationError):
            validate_project_name(name)


@pytest.mark.unit
class TestErrorTypes:
    """Test cases for the failure taxonomy."""

    @pytest.mark.parametrize("error,kind", [
        (ConfigurationError("x"), "configuration"),
        (SpawnError("x"), "spawn"),
        (SessionIOError("x"), "io"),
        (BuildCancelledError("x"), "cancelled"),
        (OutputLoadError("x"), "output_load"),
        (ProcessExitError("x", exit_code=2), "process_exit"),
    ])
    def test_every_failure_is_distinguishable(self, error, kind):
        """Test that each failure has its own kind and a common base."""
        assert isinstance(error, TelebuildError)
        assert error.kind == kind

    def test_handle_error_reraises(self):
        with pytest.raises(SpawnError):
            handle_error(SpawnError("no binary"), "spawning", reraise=True)

    def test_handle_error_logs_at_severity(self, caplog):
        test_logger = logging.getLogger("telebuild.test")
        with caplog.at_level(logging.WARNING):
            handle_error(
                OutputLoadError("missing report"), "loading output",
                severity=ErrorSeverity.WARNING, reraise=False, logger=test_logger
            )

        assert "Error in loading output: missing report" in caplog.text

    def test_handle_cli_error_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ConfigurationError("bad"), "parsing", exit_code=2)

        assert exc_info.value.code == 2
