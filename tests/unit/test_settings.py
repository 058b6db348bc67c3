"""Tests for configuration loading and layering."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docker_updater.config import Settings, load_settings
from docker_updater.config import settings as settings_module
from docker_updater.utils.exceptions import ConfigurationError

ENV_NAMES = [
    "DRY_RUN",
    "PRUNE_UNUSED_IMAGES",
    "ONLY_CONTAINERS",
    "EXCLUDE_CONTAINERS",
    "ONLY_PROJECTS",
    "EXCLUDE_PROJECTS",
    "COMPOSE_ONLY",
    "STANDALONE_ONLY",
    "LOG_FILE",
    "STOP_TIMEOUT",
    "PULL_ALL_PLATFORMS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the host environment out of the layering tests."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "find_config_file", lambda: None)


@pytest.fixture
def config_file(tmp_path):
    """Write a config file in the KEY=VALUE format."""

    def write(content: str) -> Path:
        path = tmp_path / "docker-updater.conf"
        path.write_text(content)
        return path

    return write


class TestSettings:
    """Test configuration settings."""

    def test_default_settings(self):
        """Test default settings values."""
        settings = load_settings()

        assert settings.dry_run is False
        assert settings.prune_unused_images is True
        assert settings.compose_only is False
        assert settings.standalone_only is False
        assert settings.pull_all_platforms is False
        assert settings.stop_timeout == 30
        assert settings.log_file == "/var/log/docker-updater.log"
        assert settings.backup_dir == Path("/var/lib/docker-updater/backups")
        assert settings.container_filter.active is False
        assert settings.project_filter.active is False

    def test_environment_variables_use_original_names(self, monkeypatch):
        """Test upper-case variable names from the environment are honoured."""
        monkeypatch.setenv("DRY_RUN", "true")
        monkeypatch.setenv("STOP_TIMEOUT", "5")
        monkeypatch.setenv("ONLY_CONTAINERS", "web db")

        settings = load_settings()

        assert settings.dry_run is True
        assert settings.stop_timeout == 5
        assert settings.container_filter.only == ("web", "db")

    def test_config_file_overrides_environment(self, monkeypatch, config_file):
        """Test the config file wins over the environment."""
        monkeypatch.setenv("STOP_TIMEOUT", "5")
        path = config_file('STOP_TIMEOUT=12\nEXCLUDE_PROJECTS="legacy,old"\n')

        settings = load_settings(path)

        assert settings.stop_timeout == 12
        assert settings.project_filter.exclude == ("legacy", "old")

    def test_flags_override_config_file(self, config_file):
        """Test explicit values win over the config file."""
        path = config_file("DRY_RUN=false\nSTOP_TIMEOUT=12\nPRUNE_UNUSED_IMAGES=true\n")

        settings = load_settings(path, dry_run=True, stop_timeout=3, prune_unused_images=False)

        assert settings.dry_run is True
        assert settings.stop_timeout == 3
        assert settings.prune_unused_images is False

    def test_unset_flags_do_not_override(self, config_file):
        """Test None overrides leave lower layers in place."""
        path = config_file("DRY_RUN=true\n")

        settings = load_settings(path, dry_run=None, only_containers=None)

        assert settings.dry_run is True
        assert settings.only_containers == ""

    def test_unknown_config_keys_are_ignored(self, config_file):
        """Test that unrelated keys in the config file do not fail loading."""
        path = config_file("SOMETHING_ELSE=1\nSTOP_TIMEOUT=9\n")

        assert load_settings(path).stop_timeout == 9

    def test_compose_only_and_standalone_only_conflict(self):
        """Test the mutually exclusive modes are rejected before any work."""
        with pytest.raises(ConfigurationError, match="compose-only"):
            load_settings(compose_only=True, standalone_only=True)

    def test_conflict_detected_across_layers(self, config_file):
        """Test the conflict is detected when the two modes come from different layers."""
        path = config_file("COMPOSE_ONLY=true\n")

        with pytest.raises(ConfigurationError):
            load_settings(path, standalone_only=True)

    def test_negative_stop_timeout_rejected(self):
        """Test stop timeout must not be negative."""
        with pytest.raises(ConfigurationError):
            load_settings(stop_timeout=-1)

    def test_missing_explicit_config_file(self, tmp_path):
        """Test an explicit config file must exist."""
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_settings(tmp_path / "missing.conf")

    def test_settings_are_immutable(self):
        """Test settings cannot be changed after construction."""
        settings = Settings()

        with pytest.raises(ValidationError):
            settings.dry_run = True


def test_config_file_candidates_respect_xdg(monkeypatch, tmp_path):
    """Test user config locations follow XDG_CONFIG_HOME."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    candidates = settings_module.config_file_candidates()

    assert candidates[0] == Path("/etc/docker-updater.conf")
    assert candidates[1] == tmp_path / "docker-updater.conf"
    assert candidates[2] == tmp_path / "docker-updater" / "docker-updater.conf"


def test_log_level_is_normalised():
    """Test log levels are case-insensitive and validated."""
    assert load_settings(log_level="debug").log_level == "DEBUG"

    with pytest.raises(ConfigurationError, match="Invalid log level"):
        load_settings(log_level="chatty")
