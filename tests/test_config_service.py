"""Tests for ConfigService."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from termtab.models.config import TermtabConfig
from termtab.models.detection import DetectionStrategy
from termtab.services.config_service import (
    ConfigService,
    get_config_service,
    reset_config_service,
    resolve_config_path,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestConfigServiceLoad:
    """Tests for loading configuration."""

    def test_load_defaults_when_no_file(self, temp_dir):
        """Returns default config when file doesn't exist."""
        service = ConfigService(temp_dir / "nonexistent.yaml")
        config = service.load()

        assert config.preferred_terminal is None
        assert config.timeouts.probe == 3.0
        assert config.timeouts.command == 10.0
        assert config.detection.process_tree_max_depth == 5
        assert config.session_store.directory == ".termtab"

    def test_load_from_yaml(self, temp_dir):
        """Loads config from YAML file."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(
            """
preferred_terminal: WezTerm
timeouts:
  probe: 1.5
  command: 20
detection:
  process_tree_max_depth: 8
  enabled_strategies: [env, process_tree, user_config]
"""
        )

        config = ConfigService(config_file).load()

        assert config.preferred_terminal == "wezterm"
        assert config.timeouts.probe == 1.5
        assert config.timeouts.command == 20
        assert config.detection.process_tree_max_depth == 8
        assert config.detection.enabled_strategies == [
            DetectionStrategy.ENV,
            DetectionStrategy.PROCESS_TREE,
            DetectionStrategy.USER_CONFIG,
        ]
        assert config.detection.is_enabled(DetectionStrategy.FALLBACK) is True
        assert config.detection.is_enabled(DetectionStrategy.FRONTMOST_APP) is False

    @pytest.mark.parametrize("value", ["auto", "AUTO", "", "none"])
    def test_auto_preferred_terminal(self, temp_dir, value):
        """'auto' and friends mean no preference."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.dump({"preferred_terminal": value}))

        assert ConfigService(config_file).load().preferred_terminal is None

    def test_load_handles_invalid_yaml(self, temp_dir):
        """Returns defaults for invalid YAML."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        config = ConfigService(config_file).load()

        assert config == TermtabConfig()

    def test_load_handles_validation_error(self, temp_dir):
        """Returns defaults for invalid config values."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("timeouts:\n  probe: -1\n")

        config = ConfigService(config_file).load()

        assert config.timeouts.probe == 3.0

    def test_load_rejects_path_traversal(self, temp_dir):
        """Session store names must be single path components."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("session_store:\n  directory: ../../etc\n")

        config = ConfigService(config_file).load()

        assert config.session_store.directory == ".termtab"

    def test_load_handles_non_mapping(self, temp_dir):
        """A YAML list is not a config."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("- kitty\n- tmux\n")

        assert ConfigService(config_file).load() == TermtabConfig()

    def test_unknown_fields_ignored(self, temp_dir):
        """Unknown top-level keys are dropped."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("preferred_terminal: kitty\nport: 5050\n")

        assert ConfigService(config_file).load().preferred_terminal == "kitty"


class TestConfigServiceCaching:
    """Tests for get_config and reload."""

    def test_get_config_caches(self, temp_dir):
        """get_config loads once."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("preferred_terminal: kitty\n")
        service = ConfigService(config_file)

        first = service.get_config()
        config_file.write_text("preferred_terminal: tmux\n")

        assert service.get_config() is first
        assert service.reload().preferred_terminal == "tmux"


class TestConfigServiceSave:
    """Tests for saving configuration."""

    def test_save_round_trip(self, temp_dir):
        """Saved config loads back equal."""
        config_file = temp_dir / "nested" / "config.yaml"
        service = ConfigService(config_file)
        config = TermtabConfig(preferred_terminal="konsole")

        assert service.save(config) is True
        assert ConfigService(config_file).load() == config

    def test_save_without_config(self, temp_dir):
        """Nothing to save returns False."""
        assert ConfigService(temp_dir / "config.yaml").save() is False


class TestConfigPathResolution:
    """Tests for locating config.yaml."""

    def test_worktree_config_wins(self, temp_dir):
        """A config inside the worktree is preferred."""
        local = temp_dir / ".termtab" / "config.yaml"
        local.parent.mkdir()
        local.write_text("preferred_terminal: rio\n")

        assert resolve_config_path(temp_dir) == local
        assert ConfigService(directory=temp_dir).load().preferred_terminal == "rio"

    def test_user_config_fallback(self, temp_dir):
        """Without a worktree config the per-user file is used."""
        with patch.dict("os.environ", {"HOME": str(temp_dir)}):
            path = resolve_config_path(temp_dir / "worktree")

        assert path == temp_dir / ".config" / "termtab" / "config.yaml"


class TestConfigServiceSingleton:
    """Tests for the module-level config service."""

    def test_singleton(self, temp_dir):
        """get_config_service returns one shared instance."""
        service = get_config_service(temp_dir / "config.yaml")
        assert get_config_service() is service
        assert service.config_path == temp_dir / "config.yaml"

    def test_reset(self, temp_dir):
        """reset_config_service drops the shared instance."""
        first = get_config_service(temp_dir / "config.yaml")
        reset_config_service()
        assert get_config_service(temp_dir / "config.yaml") is not first
