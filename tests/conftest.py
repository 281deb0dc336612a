"""Pytest configuration for profile-switcher tests."""

import logging

import pytest

from profile_switcher import STAGES, ProfileSwitcher


@pytest.fixture
def switcher():
    """Switcher with an 'email' context holding 'work' and 'private' no-op profiles."""
    switcher = ProfileSwitcher()
    switcher.add_profile("email", "work")
    switcher.add_profile("email", "private")
    return switcher


@pytest.fixture
def recorder(switcher):
    """Record every TransitionEvent fired on the switcher's bus."""
    events = []
    for stage in STAGES:
        switcher.subscribe(stage, events.append)
    return events


@pytest.fixture
def restore_root_logger():
    """Undo handlers and level set on the root logger during a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)
