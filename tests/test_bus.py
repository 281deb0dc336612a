"""Tests for HookBus."""

from unittest.mock import Mock

import pytest

from profile_switcher.bus import HookBus
from profile_switcher.errors import ListenerFailure
from profile_switcher.stages import AFTER_SWITCH, BEFORE_SWITCH, STAGES, TransitionEvent


def make_event(stage=BEFORE_SWITCH):
    return TransitionEvent(context="email", stage=stage, current="work", next="private")


class TestSubscribe:
    """Tests for subscribe and unsubscribe."""

    def test_listener_receives_event(self):
        """A subscribed listener gets the fired event."""
        bus = HookBus()
        listener = Mock()
        bus.subscribe(BEFORE_SWITCH, listener)

        event = make_event()
        bus.fire(BEFORE_SWITCH, event)

        listener.assert_called_once_with(event)

    def test_registration_order(self):
        """Listeners run in the order they subscribed."""
        bus = HookBus()
        calls = []
        bus.subscribe(BEFORE_SWITCH, lambda e: calls.append("first"))
        bus.subscribe(BEFORE_SWITCH, lambda e: calls.append("second"))
        bus.subscribe(BEFORE_SWITCH, lambda e: calls.append("third"))

        bus.fire(BEFORE_SWITCH, make_event())

        assert calls == ["first", "second", "third"]

    def test_stages_are_independent(self):
        """Firing one stage does not call listeners of another."""
        bus = HookBus()
        before, after = Mock(), Mock()
        bus.subscribe(BEFORE_SWITCH, before)
        bus.subscribe(AFTER_SWITCH, after)

        bus.fire(AFTER_SWITCH, make_event(AFTER_SWITCH))

        before.assert_not_called()
        after.assert_called_once()

    def test_unknown_stage(self):
        """Subscribing to an unknown stage raises ValueError."""
        bus = HookBus()
        with pytest.raises(ValueError, match="Unknown stage"):
            bus.subscribe("during-switch", Mock())

    def test_same_listener_twice(self):
        """The same callable can be subscribed twice."""
        bus = HookBus()
        listener = Mock()
        bus.subscribe(BEFORE_SWITCH, listener)
        bus.subscribe(BEFORE_SWITCH, listener)

        bus.fire(BEFORE_SWITCH, make_event())

        assert listener.call_count == 2

    def test_unsubscribe_removes_one_registration(self):
        """Unsubscribing removes exactly the given handle."""
        bus = HookBus()
        listener = Mock()
        first = bus.subscribe(BEFORE_SWITCH, listener)
        bus.subscribe(BEFORE_SWITCH, listener)

        bus.unsubscribe(first)
        bus.fire(BEFORE_SWITCH, make_event())

        assert listener.call_count == 1

    def test_unsubscribe_twice_is_noop(self):
        """A second unsubscribe does nothing."""
        bus = HookBus()
        subscription = bus.subscribe(BEFORE_SWITCH, Mock())

        bus.unsubscribe(subscription)
        bus.unsubscribe(subscription)

        assert bus.listeners(BEFORE_SWITCH) == []

    def test_listener_can_unsubscribe_itself(self):
        """Unsubscribing during a fire does not skip other listeners."""
        bus = HookBus()
        other = Mock()
        handle = None

        def once(event):
            bus.unsubscribe(handle)

        handle = bus.subscribe(BEFORE_SWITCH, once)
        bus.subscribe(BEFORE_SWITCH, other)

        bus.fire(BEFORE_SWITCH, make_event())
        bus.fire(BEFORE_SWITCH, make_event())

        assert other.call_count == 2
        assert bus.listeners(BEFORE_SWITCH) == [other]


class TestFire:
    """Tests for fire error handling."""

    def test_no_listeners(self):
        """Firing with no listeners does nothing."""
        HookBus().fire(BEFORE_SWITCH, make_event())

    def test_failure_propagates_and_stops(self):
        """A failing listener raises ListenerFailure and later listeners are skipped."""
        bus = HookBus()
        first, last = Mock(), Mock()

        def failing(event):
            raise ValueError("listener broke")

        bus.subscribe(BEFORE_SWITCH, first)
        bus.subscribe(BEFORE_SWITCH, failing)
        bus.subscribe(BEFORE_SWITCH, last)

        with pytest.raises(ListenerFailure) as exc_info:
            bus.fire(BEFORE_SWITCH, make_event())

        first.assert_called_once()
        last.assert_not_called()
        assert exc_info.value.stage == BEFORE_SWITCH
        assert exc_info.value.listener is failing
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_clear(self):
        """clear drops listeners of one stage or all of them."""
        bus = HookBus()
        for stage in STAGES:
            bus.subscribe(stage, Mock())

        bus.clear(BEFORE_SWITCH)
        assert bus.listeners(BEFORE_SWITCH) == []
        assert len(bus.listeners(AFTER_SWITCH)) == 1

        bus.clear()
        assert all(bus.listeners(stage) == [] for stage in STAGES)
