"""Exception hierarchy for profile switching.

All errors raised by the registry, hook bus and switch engine derive from
ProfileSwitchError so hosts can catch them in one place.
"""

from __future__ import annotations

from typing import Any


class ProfileSwitchError(Exception):
    """Base class for profile switching errors."""


class UnknownProfileError(ProfileSwitchError):
    """Raised when a profile is not registered in the resolved context."""

    def __init__(self, context: str, profile: str):
        self.context = context
        self.profile = profile
        super().__init__(f"Profile '{profile}' is not defined in context '{context}'")


class CallbackFailure(ProfileSwitchError):
    """Raised when an activate or deactivate callback fails.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, context: str, profile: str, phase: str):
        self.context = context
        self.profile = profile
        self.phase = phase
        super().__init__(f"Failed to {phase} profile '{profile}' in context '{context}'")


class ListenerFailure(ProfileSwitchError):
    """Raised when a hook listener fails during a switch."""

    def __init__(self, stage: str, listener: Any):
        self.stage = stage
        self.listener = listener
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(f"Listener {name} failed during '{stage}'")


class SwitchInProgressError(ProfileSwitchError):
    """Raised when a switch is started from inside a switch of the same context."""

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"A profile switch is already in progress for context '{context}'")


class ConfigError(ProfileSwitchError):
    """Raised when the contexts configuration is invalid."""


class CommandError(ProfileSwitchError):
    """Raised when a shell-command callback fails."""

    def __init__(self, command: str, message: str, returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command '{command}' failed: {message}")
