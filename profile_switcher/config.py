"""Declarative contexts configuration.

Loads context and profile definitions from the ``contexts`` section of
settings.yaml:

```yaml
default_context: email
contexts:
  email:
    profiles:
      work:
        activate: "./scripts/mail-work.sh"
        deactivate: "echo leaving work"
        timeout: 10
      private:
        activate: "./scripts/mail-private.sh"
    active: work
```

Profiles defined this way get ShellCommandCallback callbacks.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from .commands import ShellCommandCallback
from .errors import ConfigError
from .registry import ContextRegistry
from .stages import ACTIVATE, DEACTIVATE

logger = logging.getLogger(__name__)


class ProfileDefinition(BaseModel):
    """A profile with optional shell commands."""

    activate: str | None = Field(None, description="Command run when the profile is activated")
    deactivate: str | None = Field(None, description="Command run when the profile is deactivated")
    timeout: float = Field(default=30.0, gt=0, description="Command timeout in seconds")
    description: str | None = Field(None, description="Human-readable description")


class ContextDefinition(BaseModel):
    """A context and its profiles."""

    profiles: dict[str, ProfileDefinition] = Field(default_factory=dict)
    active: str | None = Field(None, description="Profile already in effect; recorded without running callbacks")
    description: str | None = Field(None, description="Human-readable description")

    @model_validator(mode="after")
    def _active_must_exist(self) -> ContextDefinition:
        if self.active is not None and self.active not in self.profiles:
            raise ValueError(f"active profile '{self.active}' is not defined")
        return self


class ContextsConfig(BaseModel):
    """All configured contexts."""

    contexts: dict[str, ContextDefinition] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, contexts: dict[str, Any]) -> ContextsConfig:
        """Validate the ``contexts`` settings section.

        Profiles given as null (``work:`` with no body) are allowed and get no-op callbacks.

        Raises:
            ConfigError: If the section is invalid
        """
        normalized: dict[str, Any] = {}
        for name, body in contexts.items():
            body = body or {}
            if isinstance(body, dict) and isinstance(body.get("profiles"), dict):
                body = {**body, "profiles": {k: v or {} for k, v in body["profiles"].items()}}
            normalized[str(name)] = body

        try:
            return cls(contexts=normalized)
        except ValidationError as e:
            raise ConfigError(f"Invalid contexts configuration: {e}") from e

    def apply(self, registry: ContextRegistry, working_dir: Path | None = None) -> None:
        """Define the configured contexts and profiles in a registry.

        Args:
            registry: Registry to populate
            working_dir: Working directory for shell commands
        """
        for context_name, context in self.contexts.items():
            registry.define_context(context_name)
            for profile_name, profile in context.profiles.items():
                registry.add_profile(
                    context_name,
                    profile_name,
                    on_activate=_command(profile.activate, context_name, profile_name, ACTIVATE, profile, working_dir),
                    on_deactivate=_command(
                        profile.deactivate, context_name, profile_name, DEACTIVATE, profile, working_dir
                    ),
                )
            if context.active:
                registry.restore_active(context_name, context.active)

        logger.info(f"Loaded {len(self.contexts)} contexts from settings")


def _command(
    command: str | None,
    context: str,
    profile: str,
    phase: str,
    definition: ProfileDefinition,
    working_dir: Path | None,
) -> ShellCommandCallback | None:
    if not command:
        return None
    return ShellCommandCallback(
        command,
        context=context,
        profile=profile,
        phase=phase,
        timeout=definition.timeout,
        working_dir=working_dir,
    )
