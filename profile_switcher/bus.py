"""Hook bus for switch lifecycle stages."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .errors import ListenerFailure
from .stages import STAGES, TransitionEvent, validate_stage

logger = logging.getLogger(__name__)

Listener = Callable[[TransitionEvent], Any]

_subscription_ids = itertools.count(1)


@dataclass(frozen=True)
class Subscription:
    """Handle returned by HookBus.subscribe, used to unsubscribe."""

    stage: str
    listener: Listener = field(compare=False)
    id: int = field(default_factory=lambda: next(_subscription_ids))


class HookBus:
    """Ordered listener lists, one per stage.

    Listeners are called synchronously in registration order. Unlike a
    notification bus, errors are not isolated: a failing listener stops the
    stage and the switch that fired it.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {stage: [] for stage in STAGES}

    def subscribe(self, stage: str, listener: Listener) -> Subscription:
        """Register a listener for a stage.

        Args:
            stage: One of the names in STAGES
            listener: Callable taking a TransitionEvent

        Returns:
            Subscription handle

        Raises:
            ValueError: If the stage is unknown
        """
        validate_stage(stage)
        subscription = Subscription(stage=stage, listener=listener)
        self._subscriptions[stage].append(subscription)
        logger.debug(f"Subscribed {_listener_name(listener)} to {stage}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Removing it twice is a no-op."""
        subscriptions = self._subscriptions.get(subscription.stage, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
            logger.debug(f"Unsubscribed {_listener_name(subscription.listener)} from {subscription.stage}")

    def fire(self, stage: str, event: TransitionEvent) -> None:
        """Call every listener of a stage with the event.

        Raises:
            ListenerFailure: If a listener raises; later listeners are skipped
        """
        validate_stage(stage)
        # Copy so listeners can unsubscribe while the stage fires
        for subscription in list(self._subscriptions[stage]):
            try:
                subscription.listener(event)
            except Exception as e:
                logger.error(f"Listener {_listener_name(subscription.listener)} failed during {stage}: {e}")
                raise ListenerFailure(stage, subscription.listener) from e

    def listeners(self, stage: str) -> list[Listener]:
        """Listeners of a stage, in firing order."""
        validate_stage(stage)
        return [s.listener for s in self._subscriptions[stage]]

    def clear(self, stage: str | None = None) -> None:
        """Drop the listeners of one stage, or of all stages."""
        for name in [validate_stage(stage)] if stage else STAGES:
            self._subscriptions[name].clear()


def _listener_name(listener: Any) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)
