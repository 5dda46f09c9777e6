"""Configuration loading service.

Handles finding and loading config.yaml, normalizing user-entered values,
and saving updated config.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from termtab.models.config import TermtabConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
USER_CONFIG_PATH = Path("~/.config/termtab") / CONFIG_FILE_NAME

# Values of preferred_terminal that mean "detect it"
_AUTO_VALUES = ("", "auto", "none")


def resolve_config_path(directory: str | Path | None = None) -> Path:
    """Pick the config file for a worktree.

    ``<directory>/.termtab/config.yaml`` wins when it exists; otherwise the
    per-user file is used (whether or not it exists).
    """
    if directory is not None:
        local = Path(directory) / ".termtab" / CONFIG_FILE_NAME
        if local.exists():
            return local
    return USER_CONFIG_PATH.expanduser()


class ConfigService:
    """Service for loading and managing termtab configuration.

    Handles:
    - Loading config from config.yaml
    - Validating against the Pydantic schema
    - Normalizing hand-written values
    - Saving updated config
    """

    def __init__(self, config_path: str | Path | None = None, directory: str | Path | None = None):
        """Initialize the config service.

        Args:
            config_path: Explicit path to the config file.
            directory: Worktree used to look for a local config when no
                explicit path is given.
        """
        if config_path is None:
            self.config_path = resolve_config_path(directory)
        else:
            self.config_path = Path(config_path)
        self._config: TermtabConfig | None = None

    def load(self) -> TermtabConfig:
        """Load and validate configuration.

        A missing, unreadable or invalid file yields the defaults.

        Returns:
            Validated TermtabConfig instance.
        """
        if not self.config_path.exists():
            logger.debug(f"Config file not found at {self.config_path}, using defaults")
            self._config = TermtabConfig()
            return self._config

        try:
            with open(self.config_path) as f:
                raw_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error reading config file: {e}, using defaults")
            self._config = TermtabConfig()
            return self._config

        if not isinstance(raw_config, dict):
            logger.warning(f"Config file {self.config_path} is not a mapping, using defaults")
            self._config = TermtabConfig()
            return self._config

        try:
            self._config = TermtabConfig(**self._normalize_config(raw_config))
        except Exception as e:
            logger.warning(f"Config validation error: {e}, using defaults")
            self._config = TermtabConfig()

        return self._config

    def get_config(self) -> TermtabConfig:
        """Get the current configuration.

        Loads from disk if not already loaded.
        """
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> TermtabConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()

    def save(self, config: TermtabConfig | None = None) -> bool:
        """Save configuration to disk.

        Args:
            config: Config to save. Uses current config if not provided.

        Returns:
            True if save succeeded.
        """
        config = config or self._config
        if config is None:
            return False

        try:
            config_dict = config.model_dump(mode="json")
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
            self._config = config
            return True
        except Exception as e:
            logger.error(f"Error saving config: {e}")
            return False

    def _normalize_config(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Clean up hand-written config values before validation.

        Handles:
        - ``preferred_terminal`` case and the ``auto`` spelling
        - Strategy names written with underscores
        - Dropping unknown top-level keys

        Args:
            raw: Raw config dictionary from YAML.

        Returns:
            Normalized config dictionary.
        """
        known = set(TermtabConfig.model_fields)
        normalized = {key: value for key, value in raw.items() if key in known}
        for key in raw.keys() - known:
            logger.info(f"Ignoring unknown config field: {key}")

        preferred = normalized.get("preferred_terminal")
        if preferred is not None:
            preferred = str(preferred).strip().lower()
            normalized["preferred_terminal"] = None if preferred in _AUTO_VALUES else preferred

        detection = normalized.get("detection")
        if isinstance(detection, dict) and isinstance(detection.get("enabled_strategies"), list):
            detection = dict(detection)
            detection["enabled_strategies"] = [
                str(s).strip().lower().replace("_", "-") for s in detection["enabled_strategies"]
            ]
            normalized["detection"] = detection

        return normalized


# Module-level singleton
_config_service: ConfigService | None = None


def get_config_service(
    config_path: str | Path | None = None, directory: str | Path | None = None
) -> ConfigService:
    """Get the global config service instance.

    Args:
        config_path: Path to config file (only used on first call).
        directory: Worktree to look for a local config in (only used on
            first call).

    Returns:
        ConfigService singleton.
    """
    global _config_service
    if _config_service is None:
        _config_service = ConfigService(config_path, directory)
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (for testing)."""
    global _config_service
    _config_service = None
