"""ProfileSwitcher facade.

Wires a ContextRegistry, a HookBus and a SwitchEngine together and exposes
the public operations in one place.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .bus import HookBus, Listener, Subscription
from .config import ContextsConfig
from .engine import SwitchEngine
from .models import Profile, ProfileCallback
from .registry import DEFAULT_CONTEXT, ContextRegistry, using_context
from .settings import SettingsManager
from .stages import TransitionEvent

logger = logging.getLogger(__name__)


class ProfileSwitcher:
    """Manages contexts, profiles and switches between them.

    Attributes:
        registry: Context and profile storage
        bus: Hook bus for stage listeners
        engine: Switch engine
    """

    def __init__(self, default_context: str = DEFAULT_CONTEXT):
        self.registry = ContextRegistry(default_context=default_context)
        self.bus = HookBus()
        self.engine = SwitchEngine(self.registry, self.bus)

    @classmethod
    def from_settings(
        cls,
        settings: SettingsManager | None = None,
        working_dir: Path | None = None,
    ) -> ProfileSwitcher:
        """Build a switcher from settings.yaml files.

        The default context and the ``contexts`` section come from the merged settings.

        Raises:
            ConfigError: If the settings are invalid
        """
        settings = settings or SettingsManager()
        switcher = cls(default_context=settings.get_default_context())
        ContextsConfig.from_settings(settings.get_contexts_settings()).apply(switcher.registry, working_dir)
        return switcher

    @property
    def default_context(self) -> str:
        return self.registry.default_context

    # Registry

    def define_context(self, name: str | None = None) -> None:
        self.registry.define_context(name)

    def clear_context(self, name: str | None = None) -> None:
        self.registry.clear_context(name)

    def clear_all_contexts(self) -> None:
        self.registry.clear_all_contexts()

    def add_profile(
        self,
        context: str | None,
        profile: str,
        on_activate: ProfileCallback | None = None,
        on_deactivate: ProfileCallback | None = None,
    ) -> None:
        self.registry.add_profile(context, profile, on_activate, on_deactivate)

    def list_profiles(self, context: str | None = None) -> list[Profile]:
        return self.registry.list_profiles(context)

    def get_active_profile(self, context: str | None = None) -> str | None:
        return self.registry.get_active_profile(context)

    def context_names(self) -> list[str]:
        return self.registry.context_names()

    # Switching

    def switch_profile(self, context: str | None, profile: str) -> None:
        """Switch a context to ``profile``. See SwitchEngine.switch_profile."""
        self.engine.switch_profile(context, profile)

    activate_profile = switch_profile

    def current_transition(self, context: str | None = None) -> TransitionEvent | None:
        return self.engine.current_transition(context)

    # Hooks

    def subscribe(self, stage: str, listener: Listener) -> Subscription:
        return self.bus.subscribe(stage, listener)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.bus.unsubscribe(subscription)

    using_context = staticmethod(using_context)
