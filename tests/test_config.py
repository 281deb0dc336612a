"""Tests for ContextsConfig and ProfileSwitcher.from_settings."""

import pytest
import yaml

from profile_switcher import ProfileSwitcher
from profile_switcher.commands import ShellCommandCallback
from profile_switcher.config import ContextsConfig
from profile_switcher.errors import ConfigError
from profile_switcher.models import noop
from profile_switcher.registry import ContextRegistry
from profile_switcher.settings import DEFAULT_CONTEXT_ENV, SettingsManager


class TestContextsConfig:
    """Tests for validating and applying the contexts section."""

    def test_from_settings(self):
        """Contexts and profiles are parsed."""
        config = ContextsConfig.from_settings(
            {
                "email": {
                    "profiles": {
                        "work": {"activate": "mail-work", "deactivate": "mail-off", "timeout": 5},
                        "private": None,
                    },
                    "active": "work",
                }
            }
        )

        email = config.contexts["email"]
        assert set(email.profiles) == {"work", "private"}
        assert email.profiles["work"].timeout == 5
        assert email.profiles["private"].activate is None
        assert email.active == "work"

    def test_empty_context(self):
        """A context with no body is allowed."""
        config = ContextsConfig.from_settings({"email": None})
        assert config.contexts["email"].profiles == {}

    def test_active_must_exist(self):
        """The active profile must be one of the context's profiles."""
        with pytest.raises(ConfigError, match="active profile 'holiday'"):
            ContextsConfig.from_settings({"email": {"profiles": {"work": {}}, "active": "holiday"}})

    def test_invalid_timeout(self):
        """Timeouts must be positive."""
        with pytest.raises(ConfigError):
            ContextsConfig.from_settings({"email": {"profiles": {"work": {"timeout": 0}}}})

    def test_invalid_profiles_type(self):
        """profiles must be a mapping."""
        with pytest.raises(ConfigError):
            ContextsConfig.from_settings({"email": {"profiles": ["work"]}})

    def test_apply(self, tmp_path):
        """Applying defines contexts with shell-command callbacks."""
        registry = ContextRegistry()
        config = ContextsConfig.from_settings(
            {"email": {"profiles": {"work": {"activate": "mail-work"}, "private": {}}, "active": "private"}}
        )

        config.apply(registry, working_dir=tmp_path)

        work = registry.get_profile("email", "work")
        assert isinstance(work.on_activate, ShellCommandCallback)
        assert work.on_activate.command == "mail-work"
        assert work.on_activate.phase == "activate"
        assert work.on_activate.working_dir == tmp_path
        assert work.on_deactivate is noop
        assert registry.get_active_profile("email") == "private"


class TestFromSettings:
    """Tests for building a switcher from settings files."""

    def test_from_settings(self, tmp_path, monkeypatch):
        """Default context and contexts come from settings."""
        monkeypatch.delenv(DEFAULT_CONTEXT_ENV, raising=False)
        settings = SettingsManager(settings_dir=tmp_path / "project", user_dir=tmp_path / "user")
        settings.project_settings_file.parent.mkdir(parents=True)
        settings.project_settings_file.write_text(
            yaml.safe_dump(
                {
                    "default_context": "email",
                    "contexts": {"email": {"profiles": {"work": {}, "private": {}}}},
                }
            )
        )

        switcher = ProfileSwitcher.from_settings(settings)
        switcher.switch_profile(None, "work")

        assert switcher.default_context == "email"
        assert switcher.context_names() == ["email"]
        assert switcher.get_active_profile("email") == "work"

    def test_invalid_settings(self, tmp_path, monkeypatch):
        """Invalid contexts raise ConfigError."""
        monkeypatch.delenv(DEFAULT_CONTEXT_ENV, raising=False)
        settings = SettingsManager(settings_dir=tmp_path / "project", user_dir=tmp_path / "user")
        settings.project_settings_file.parent.mkdir(parents=True)
        settings.project_settings_file.write_text(yaml.safe_dump({"contexts": {"email": "work"}}))

        with pytest.raises(ConfigError):
            ProfileSwitcher.from_settings(settings)
