"""Context and profile registry.

Stores contexts, the profiles of each context and which profile is active.
Context records are kept in storage even after they are cleared; the index
of known context names is tracked separately.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import replace

from .errors import UnknownProfileError
from .models import Context, Profile, ProfileCallback

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "default"

# Innermost using_context() override, if any
_scoped_context: ContextVar[str | None] = ContextVar("profile_switcher_scoped_context", default=None)


@contextmanager
def using_context(name: str) -> Iterator[str]:
    """Make ``name`` the default context for calls made inside the block.

    Explicit context arguments still take precedence.

    Example:
        with using_context("email"):
            switcher.switch_profile(None, "work")
    """
    token = _scoped_context.set(name)
    try:
        yield name
    finally:
        _scoped_context.reset(token)


class ContextRegistry:
    """In-memory registry of contexts and their profiles.

    Attributes:
        default_context: Context name used when no explicit or scoped name is given
    """

    def __init__(self, default_context: str = DEFAULT_CONTEXT):
        self.default_context = default_context
        self._contexts: dict[str, Context] = {}
        self._known: list[str] = []

    def resolve_context_name(self, name: str | None = None) -> str:
        """Resolve the context to operate on.

        Resolution order:
        1. Explicit ``name``
        2. Innermost ``using_context`` scope
        3. ``default_context``
        """
        if name:
            resolved = name
        else:
            resolved = _scoped_context.get() or self.default_context
        logger.debug(f"Resolved context: {resolved} (requested: {name})")
        return resolved

    def define_context(self, name: str | None = None) -> Context:
        """Create an empty context if absent and list it as known.

        Returns:
            The context record (existing or new)
        """
        name = self.resolve_context_name(name)
        context = self._contexts.get(name)
        if context is None:
            context = Context(name=name)
            self._contexts[name] = context
            logger.debug(f"Defined context: {name}")
        if name not in self._known:
            self._known.append(name)
        return context

    def clear_context(self, name: str | None = None) -> None:
        """Empty a context and drop it from the known contexts.

        Clearing an unknown context is a no-op.
        """
        name = self.resolve_context_name(name)
        context = self._contexts.get(name)
        if context is not None:
            context.clear()
        if name in self._known:
            self._known.remove(name)
        logger.debug(f"Cleared context: {name}")

    def clear_all_contexts(self) -> None:
        """Clear every known context."""
        for name in list(self._known):
            self.clear_context(name)

    def add_profile(
        self,
        context: str | None,
        profile: str,
        on_activate: ProfileCallback | None = None,
        on_deactivate: ProfileCallback | None = None,
    ) -> Profile:
        """Insert a profile or replace the callbacks of an existing one.

        The context is defined on first use. Missing callbacks become no-ops.

        Returns:
            The stored profile
        """
        ctx = self.define_context(context)
        existing = ctx.profiles.get(profile)
        if existing is not None:
            existing.update(on_activate, on_deactivate)
            logger.debug(f"Replaced callbacks of profile '{profile}' in context '{ctx.name}'")
            return existing

        record = Profile(name=profile)
        record.update(on_activate, on_deactivate)
        ctx.profiles[profile] = record
        logger.debug(f"Added profile '{profile}' to context '{ctx.name}'")
        return record

    def list_profiles(self, context: str | None = None) -> list[Profile]:
        """Profiles of a context, in insertion order.

        The list holds copies of the stored records, so changing them does not
        affect the registry; use add_profile to replace callbacks. An unknown
        context yields an empty list.
        """
        ctx = self._contexts.get(self.resolve_context_name(context))
        if ctx is None:
            return []
        return [replace(profile) for profile in ctx.profiles.values()]

    def get_profile(self, context: str | None, profile: str) -> Profile:
        """Look up a profile.

        Raises:
            UnknownProfileError: If the profile is not in the context
        """
        name = self.resolve_context_name(context)
        ctx = self._contexts.get(name)
        if ctx is None or profile not in ctx.profiles:
            raise UnknownProfileError(name, profile)
        return ctx.profiles[profile]

    def get_active_profile(self, context: str | None = None) -> str | None:
        """Name of the active profile, or None. Never creates the context."""
        ctx = self._contexts.get(self.resolve_context_name(context))
        return ctx.active if ctx else None

    def restore_active(self, context: str | None, profile: str) -> None:
        """Record ``profile`` as active without running any callbacks.

        For hosts that know a profile is already in effect outside the process.

        Raises:
            UnknownProfileError: If the profile is not in the context
        """
        name = self.resolve_context_name(context)
        self.get_profile(name, profile)
        self._set_active(name, profile)
        logger.info(f"Restored active profile '{profile}' in context '{name}'")

    def context_names(self) -> list[str]:
        """Known context names, in definition order."""
        return list(self._known)

    def has_context(self, name: str) -> bool:
        return name in self._known

    def get_context(self, name: str | None = None) -> Context | None:
        """Context record from storage, including cleared ones."""
        return self._contexts.get(self.resolve_context_name(name))

    def _set_active(self, context: str, profile: str | None) -> None:
        # Never re-lists a context cleared while a switch was running
        ctx = self._contexts.get(context)
        if ctx is not None:
            ctx.active = profile
