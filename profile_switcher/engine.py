"""Switch engine.

Performs one profile transition within a context:

1. before-switch, before-deactivate
2. deactivate callback of the active profile
3. after-deactivate, before-activate
4. activate callback of the requested profile
5. after-activate, after-switch

Deactivation is fully committed, including its stages, before activation
starts. A failing callback or listener stops the sequence where it is and
leaves the last committed active profile in place (possibly None).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from .bus import HookBus
from .errors import CallbackFailure, SwitchInProgressError, UnknownProfileError
from .models import noop
from .registry import ContextRegistry
from .stages import (
    ACTIVATE,
    AFTER_ACTIVATE,
    AFTER_DEACTIVATE,
    AFTER_SWITCH,
    BEFORE_ACTIVATE,
    BEFORE_DEACTIVATE,
    BEFORE_SWITCH,
    DEACTIVATE,
    TransitionEvent,
    TransitionState,
)

logger = logging.getLogger(__name__)


class _ContextGuard:
    """Per-context lock that rejects re-entry from the owning thread."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.owner: int | None = None

    def acquire(self, context: str) -> None:
        if self.owner == threading.get_ident():
            raise SwitchInProgressError(context)
        self.lock.acquire()
        self.owner = threading.get_ident()

    def release(self) -> None:
        self.owner = None
        self.lock.release()


class SwitchEngine:
    """Runs profile switches against a registry and a hook bus.

    Attributes:
        registry: Registry holding contexts and profiles
        bus: Hook bus fired at each stage
    """

    def __init__(self, registry: ContextRegistry, bus: HookBus | None = None):
        self.registry = registry
        self.bus = bus or HookBus()
        self._guards: dict[str, _ContextGuard] = {}
        self._guards_lock = threading.Lock()
        self._transitions: dict[str, TransitionState] = {}

    def switch_profile(self, context: str | None, profile: str) -> None:
        """Deactivate the active profile of a context and activate ``profile``.

        Switching to the already-active profile runs its deactivate and
        activate callbacks again.

        Args:
            context: Context name, or None to resolve the default
            profile: Profile to activate

        Raises:
            UnknownProfileError: Profile not in the context (nothing has run), or
                removed from it by a callback or listener before activation was committed
            CallbackFailure: A callback raised; the switch stopped there
            ListenerFailure: A listener raised; the switch stopped there
            SwitchInProgressError: Called from inside a switch of the same context
        """
        name = self.registry.resolve_context_name(context)
        guard = self._guard(name)
        guard.acquire(name)
        try:
            self._run(name, profile)
        finally:
            guard.release()

    activate_profile = switch_profile

    def current_transition(self, context: str | None = None) -> TransitionEvent | None:
        """Latest stage event of the switch running in a context, if any."""
        state = self._transitions.get(self.registry.resolve_context_name(context))
        return state.live() if state else None

    def _run(self, context: str, profile: str) -> None:
        state = TransitionState(
            context=context,
            previous=None,
            current=self.registry.get_active_profile(context),
            next=profile,
        )

        deactivate = self._deactivate_callback(context, state.current)
        # Raises UnknownProfileError before anything runs
        activate = self.registry.get_profile(context, profile).on_activate

        logger.debug(f"Switching context '{context}': {state.current} -> {profile}")
        self._transitions[context] = state
        try:
            self._fire(BEFORE_SWITCH, state)
            self._fire(BEFORE_DEACTIVATE, state)

            if state.current is not None:
                self._invoke(deactivate, context, state.current, DEACTIVATE)
                logger.info(f"Deactivated profile '{state.current}' in context '{context}'")
            state.previous = state.current
            self.registry._set_active(context, None)
            state.current = None

            self._fire(AFTER_DEACTIVATE, state)
            self._fire(BEFORE_ACTIVATE, state)

            self._invoke(activate, context, profile, ACTIVATE)
            # The context may have been cleared by a callback or listener
            if not self.registry.has_context(context) or profile not in self.registry.get_context(context).profiles:
                logger.warning(f"Profile '{profile}' was removed from context '{context}' during the switch")
                raise UnknownProfileError(context, profile)
            self.registry._set_active(context, profile)
            state.current = profile
            state.next = None
            logger.info(f"Activated profile '{profile}' in context '{context}'")

            self._fire(AFTER_ACTIVATE, state)
            self._fire(AFTER_SWITCH, state)
        finally:
            del self._transitions[context]

    def _deactivate_callback(self, context: str, active: str | None) -> Callable[[], Any]:
        if active is None:
            return noop
        try:
            return self.registry.get_profile(context, active).on_deactivate
        except UnknownProfileError:
            logger.warning(f"Active profile '{active}' is no longer defined in context '{context}'")
            return noop

    def _fire(self, stage: str, state: TransitionState) -> None:
        logger.debug(f"Firing {stage} in context '{state.context}'")
        self.bus.fire(stage, state.snapshot(stage))

    @staticmethod
    def _invoke(callback: Callable[[], Any], context: str, profile: str, phase: str) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Failed to {phase} profile '{profile}' in context '{context}': {e}")
            raise CallbackFailure(context, profile, phase) from e

    def _guard(self, context: str) -> _ContextGuard:
        with self._guards_lock:
            guard = self._guards.get(context)
            if guard is None:
                guard = self._guards[context] = _ContextGuard()
            return guard
