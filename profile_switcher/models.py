"""Registry data models.

- Profile: a named unit with activate/deactivate callbacks
- Context: a namespace of mutually exclusive profiles
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

# Callbacks take no arguments; their return value is ignored
ProfileCallback = Callable[[], Any]


def noop() -> None:
    """Default callback used when none is given."""


@dataclass
class Profile:
    """A profile registered in a context.

    Attributes:
        name: Profile name, unique within its context
        on_activate: Called when the profile becomes active
        on_deactivate: Called when the profile stops being active
    """

    name: str
    on_activate: ProfileCallback = noop
    on_deactivate: ProfileCallback = noop

    def update(
        self,
        on_activate: ProfileCallback | None = None,
        on_deactivate: ProfileCallback | None = None,
    ) -> None:
        """Replace both callbacks in place, falling back to no-ops."""
        self.on_activate = on_activate or noop
        self.on_deactivate = on_deactivate or noop

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "on_activate": _callable_name(self.on_activate),
            "on_deactivate": _callable_name(self.on_deactivate),
        }


@dataclass
class Context:
    """A named set of profiles with at most one active.

    Attributes:
        name: Context name
        profiles: Profile name to Profile
        active: Name of the active profile, or None
    """

    name: str
    profiles: dict[str, Profile] = field(default_factory=dict)
    active: str | None = None

    def clear(self) -> None:
        """Drop every profile and the active marker."""
        self.profiles.clear()
        self.active = None

    @property
    def is_empty(self) -> bool:
        return not self.profiles and self.active is None


def _callable_name(fn: ProfileCallback) -> str:
    if fn is noop:
        return "noop"
    return getattr(fn, "__qualname__", None) or repr(fn)
