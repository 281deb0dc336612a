"""Context-scoped profile switching.

Manages named contexts, each holding mutually exclusive profiles with
activate/deactivate callbacks. Switching a context runs the deactivate
callback of the active profile, then the activate callback of the new one,
firing lifecycle stages on a hook bus along the way.

Stages (in firing order):
- before-switch
- before-deactivate
- after-deactivate
- before-activate
- after-activate
- after-switch
"""

from .bus import HookBus, Listener, Subscription
from .commands import ShellCommandCallback
from .config import ContextDefinition, ContextsConfig, ProfileDefinition
from .engine import SwitchEngine
from .errors import (
    CallbackFailure,
    CommandError,
    ConfigError,
    ListenerFailure,
    ProfileSwitchError,
    SwitchInProgressError,
    UnknownProfileError,
)
from .manager import ProfileSwitcher
from .models import Context, Profile, ProfileCallback
from .registry import DEFAULT_CONTEXT, ContextRegistry, using_context
from .settings import SettingsManager
from .stages import (
    AFTER_ACTIVATE,
    AFTER_DEACTIVATE,
    AFTER_SWITCH,
    BEFORE_ACTIVATE,
    BEFORE_DEACTIVATE,
    BEFORE_SWITCH,
    STAGES,
    TransitionEvent,
)

__all__ = [
    # Stages
    "BEFORE_SWITCH",
    "BEFORE_DEACTIVATE",
    "AFTER_DEACTIVATE",
    "BEFORE_ACTIVATE",
    "AFTER_ACTIVATE",
    "AFTER_SWITCH",
    "STAGES",
    "TransitionEvent",
    # Registry
    "DEFAULT_CONTEXT",
    "Context",
    "ContextRegistry",
    "Profile",
    "ProfileCallback",
    "using_context",
    # Hooks
    "HookBus",
    "Listener",
    "Subscription",
    # Switching
    "SwitchEngine",
    "ProfileSwitcher",
    # Configuration
    "SettingsManager",
    "ContextsConfig",
    "ContextDefinition",
    "ProfileDefinition",
    "ShellCommandCallback",
    # Errors
    "ProfileSwitchError",
    "UnknownProfileError",
    "CallbackFailure",
    "ListenerFailure",
    "SwitchInProgressError",
    "ConfigError",
    "CommandError",
]
