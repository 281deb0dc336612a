"""Stage definitions for the profile switch lifecycle.

A switch fires six stages in a fixed order. Listeners registered on the
hook bus receive a TransitionEvent describing the transition at that stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# Stage names, in firing order
BEFORE_SWITCH = "before-switch"
BEFORE_DEACTIVATE = "before-deactivate"
AFTER_DEACTIVATE = "after-deactivate"
BEFORE_ACTIVATE = "before-activate"
AFTER_ACTIVATE = "after-activate"
AFTER_SWITCH = "after-switch"

STAGES: tuple[str, ...] = (
    BEFORE_SWITCH,
    BEFORE_DEACTIVATE,
    AFTER_DEACTIVATE,
    BEFORE_ACTIVATE,
    AFTER_ACTIVATE,
    AFTER_SWITCH,
)

# Callback phases
ACTIVATE = "activate"
DEACTIVATE = "deactivate"


def validate_stage(stage: str) -> str:
    """Return the stage name or raise ValueError if it is not a known stage."""
    if stage not in STAGES:
        raise ValueError(f"Unknown stage '{stage}'. Expected one of: {', '.join(STAGES)}")
    return stage


@dataclass(frozen=True)
class TransitionEvent:
    """Snapshot of a transition as seen by listeners of one stage.

    Attributes:
        context: Context the switch runs in
        stage: Stage being fired
        previous: Profile that was active before the switch (set once deactivated)
        current: Profile currently active in the context
        next: Profile being activated (cleared once activated)
        timestamp: When the stage fired
    """

    context: str
    stage: str
    previous: str | None = None
    current: str | None = None
    next: str | None = None
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "context": self.context,
            "stage": self.stage,
            "previous": self.previous,
            "current": self.current,
            "next": self.next,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class TransitionState:
    """Mutable state of one switch, owned by the switch engine."""

    context: str
    previous: str | None = None
    current: str | None = None
    next: str | None = None
    stage: str | None = None

    def snapshot(self, stage: str) -> TransitionEvent:
        self.stage = stage
        return TransitionEvent(
            context=self.context,
            stage=stage,
            previous=self.previous,
            current=self.current,
            next=self.next,
        )

    def live(self) -> TransitionEvent | None:
        """Event for the most recently fired stage, with the latest values."""
        if self.stage is None:
            return None
        return self.snapshot(self.stage)
