"""
Unit tests for configuration validation functionality.

Tests the validation of each config.toml section, keystore password
lookup, and path resolution relative to the configuration file.
"""

from pathlib import Path

import pytest

from telebuild.config.validators import (
    validate_app_config,
    validate_build_config,
    validate_paths_config,
    validate_session_config,
    validate_unity_config,
)
from telebuild.models import BuildPlatform, LogBehaviour
from telebuild.validation import ConfigurationError


@pytest.mark.unit
class TestAppConfigValidation:
    """Test cases for whole-file validation."""

    def test_validate_app_config_success(self, sample_config_data, temp_dir):
        """Test successful validation of the sample configuration."""
        config = validate_app_config(sample_config_data, temp_dir, environ={})

        assert config.paths.projects_root == temp_dir / "projects"
        assert config.unity.bin == temp_dir / "bin" / "Unity"
        assert config.unity.build_entry == "Telebuild.Builder.Build"
        assert config.session.log_behaviour is LogBehaviour.STDOUT_FILE
        assert config.build.destinations[BuildPlatform.ANDROID_RELEASE] == "Android/release.aab"
        assert config.build.env == {"UNITY_NOPROXY": "localhost"}

    def test_section_must_be_a_table(self, sample_config_data, temp_dir):
        sample_config_data["session"] = "stdout"

        with pytest.raises(ConfigurationError) as exc_info:
            validate_app_config(sample_config_data, temp_dir, environ={})

        assert exc_info.value.field_name == "session"

    def test_missing_destination_only_warns(self, sample_config_data, temp_dir, caplog):
        """Test that a platform without destination is reported but not fatal."""
        del sample_config_data["build"]["destinations"]["AndroidRelease"]

        config = validate_app_config(sample_config_data, temp_dir, environ={})

        assert BuildPlatform.ANDROID_RELEASE not in config.build.destinations
        assert "AndroidRelease" in caplog.text


@pytest.mark.unit
class TestSectionValidation:
    """Test cases for the individual sections."""

    def test_relative_paths_resolve_against_config_dir(self, temp_dir):
        """Test that relative paths are taken relative to the config file."""
        paths = validate_paths_config({"projects_root": "projects"}, temp_dir)
        unity = validate_unity_config({"bin": "tools/Unity", "build_entry": "B.Build"}, temp_dir)

        assert paths.projects_root == temp_dir / "projects"
        assert unity.bin == temp_dir / "tools" / "Unity"

    def test_engine_projects_root_is_kept_verbatim(self, temp_dir):
        paths = validate_paths_config(
            {"projects_root": "projects", "projects_root_unity": "D:/Projects"}, temp_dir
        )
        assert paths.projects_root_unity == Path("D:/Projects")

    @pytest.mark.parametrize("data,field_name", [
        ({}, "paths.projects_root"),
        ({"projects_root": ""}, "paths.projects_root"),
        ({"projects_root": 5}, "paths.projects_root"),
    ])
    def test_projects_root_required(self, temp_dir, data, field_name):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_paths_config(data, temp_dir)

        assert exc_info.value.field_name == field_name

    @pytest.mark.parametrize("data,field_name", [
        ({"build_entry": "B.Build"}, "unity.bin"),
        ({"bin": "Unity"}, "unity.build_entry"),
    ])
    def test_unity_required_keys(self, temp_dir, data, field_name):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_unity_config(data, temp_dir)

        assert exc_info.value.field_name == field_name

    def test_session_defaults(self):
        """Test that an empty [session] section uses the defaults."""
        session = validate_session_config({})

        assert session.root_base == Path(".telebuild")
        assert session.log_subdir == Path("Logs")
        assert session.log_behaviour is LogBehaviour.STDOUT_FILE

    @pytest.mark.parametrize("key,value", [
        ("root_base", "/abs/root"),
        ("root_base", "../outside"),
        ("log_subdir", ""),
        ("log_behaviour", "syslog"),
    ])
    def test_session_invalid_values(self, key, value):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_session_config({key: value})

        assert exc_info.value.field_name == f"session.{key}"


@pytest.mark.unit
class TestBuildConfigValidation:
    """Test cases for the [build] section."""

    def test_password_from_default_environment_variable(self):
        """Test that KEYSTORE_PASSWORD is used when no password is configured."""
        config = validate_build_config({}, environ={"KEYSTORE_PASSWORD": "from-env"})

        assert config.keystore_password == "from-env"
        assert config.default_platform is BuildPlatform.ANDROID_DEVELOPMENT

    def test_password_from_named_environment_variable(self):
        config = validate_build_config(
            {"keystore_password_env": "SIGNING_PW"},
            environ={"SIGNING_PW": "named", "KEYSTORE_PASSWORD": "ignored"},
        )
        assert config.keystore_password == "named"

    def test_explicit_password_wins(self):
        config = validate_build_config(
            {"keystore_password": "inline"}, environ={"KEYSTORE_PASSWORD": "from-env"}
        )
        assert config.keystore_password == "inline"

    def test_missing_password_is_none(self):
        """Test that a password found nowhere is left unset."""
        config = validate_build_config({}, environ={})
        assert config.keystore_password is None

    def test_invalid_default_platform(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_build_config({"default_platform": "Switch"}, environ={})

        assert exc_info.value.field_name == "build.default_platform"

    def test_unknown_destination_platform(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_build_config({"destinations": {"Switch": "out.nsp"}}, environ={})

        assert exc_info.value.field_name == "build.destinations"

    def test_env_values_are_stringified(self):
        """Test that numbers and booleans in [build.env] become strings."""
        config = validate_build_config(
            {"env": {"JOBS": 4, "VERBOSE": True, "NAME": "x"}}, environ={}
        )
        assert config.env == {"JOBS": "4", "VERBOSE": "true", "NAME": "x"}

    @pytest.mark.parametrize("env", [
        {"1BAD": "x"},
        {"NESTED": {"a": 1}},
        ["A=1"],
    ])
    def test_invalid_env(self, env):
        with pytest.raises(ConfigurationError):
            validate_build_config({"env": env}, environ={})
