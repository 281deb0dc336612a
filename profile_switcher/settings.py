"""Settings manager for profile-switcher settings.yaml files.

Manages a three-scope settings system:
- User global (~/.profile-switcher/settings.yaml)
- Project (.profile-switcher/settings.yaml)
- Local (.profile-switcher/settings.local.yaml)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .registry import DEFAULT_CONTEXT

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = ".profile-switcher"
DEFAULT_CONTEXT_ENV = "PROFILE_SWITCHER_DEFAULT_CONTEXT"
SCOPES = ("user", "project", "local")


class SettingsManager:
    """Manages settings across user/project/local scopes."""

    def __init__(self, settings_dir: Path | None = None, user_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            settings_dir: Base directory for project/local settings (for testing).
                          If None, uses .profile-switcher in current directory.
            user_dir: Base directory for user settings (for testing).
                      If None, uses ~/.profile-switcher.
        """
        if settings_dir is None:
            settings_dir = Path(SETTINGS_DIR_NAME)
        if user_dir is None:
            user_dir = Path.home() / SETTINGS_DIR_NAME

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = settings_dir / "settings.yaml"
        self.local_settings_file = settings_dir / "settings.local.yaml"

    def get_default_context(self) -> str:
        """Get the default context name.

        Resolution order:
        1. PROFILE_SWITCHER_DEFAULT_CONTEXT environment variable
        2. default_context from merged settings (local > project > user)
        3. "default"
        """
        env_value = os.environ.get(DEFAULT_CONTEXT_ENV)
        if env_value:
            return env_value

        value = self.get_merged_settings().get("default_context")
        if value is None:
            return DEFAULT_CONTEXT
        if not isinstance(value, str) or not value:
            raise ConfigError(f"default_context must be a non-empty string, got {value!r}")
        return value

    def set_default_context(self, name: str, scope: str = "project") -> None:
        """Set the default context name in a scope.

        Args:
            name: Context name
            scope: "user", "project", or "local"
        """
        self._update_settings(self._scope_file(scope), {"default_context": name})
        logger.info(f"Set {scope} default context to: {name}")

    def clear_default_context(self, scope: str = "project") -> bool:
        """Remove the default context from a scope.

        Returns:
            True if removed, False if not set
        """
        path = self._scope_file(scope)
        settings = self._read_settings(path)
        if not settings or "default_context" not in settings:
            return False

        del settings["default_context"]
        self._write_settings(path, settings)
        logger.info(f"Cleared {scope} default context")
        return True

    def get_contexts_settings(self) -> dict[str, Any]:
        """Get the merged ``contexts`` section."""
        contexts = self.get_merged_settings().get("contexts") or {}
        if not isinstance(contexts, dict):
            raise ConfigError("'contexts' must be a mapping of context names")
        return contexts

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings

        Returns:
            Merged settings dictionary
        """
        merged: dict[str, Any] = {}

        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)

        return merged

    def _scope_file(self, scope: str) -> Path:
        file_map = {
            "user": self.user_settings_file,
            "project": self.project_settings_file,
            "local": self.local_settings_file,
        }
        if scope not in file_map:
            raise ValueError(f"Unknown scope '{scope}'. Expected one of: {', '.join(SCOPES)}")
        return file_map[scope]

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Args:
            path: Path to settings file

        Returns:
            Settings dict or None if file doesn't exist

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping
        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")
        return data

    def _write_settings(self, path: Path, settings: dict[str, Any]) -> None:
        """Write settings to YAML file.

        Args:
            path: Path to settings file
            settings: Settings dictionary
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error(f"Failed to write settings to {path}: {e}")
            raise

    def _update_settings(self, path: Path, updates: dict[str, Any]) -> None:
        """Update settings file with new values (deep merge)."""
        existing = self._read_settings(path) or {}
        merged = self._deep_merge(existing, updates)
        self._write_settings(path, merged)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            overlay: Overlay dictionary (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
