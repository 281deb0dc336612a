"""Shell-command profile callbacks.

Lets profiles defined in settings.yaml run external commands when they are
activated or deactivated.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path

from .errors import CommandError

logger = logging.getLogger(__name__)


class ShellCommandCallback:
    """Profile callback that executes an external command.

    Environment variables set for the command:
    - PROFILE_SWITCHER_CONTEXT: Context name
    - PROFILE_SWITCHER_PROFILE: Profile name
    - PROFILE_SWITCHER_PHASE: "activate" or "deactivate"

    Exit codes:
    - 0: Success
    - anything else: CommandError
    """

    def __init__(
        self,
        command: str,
        context: str,
        profile: str,
        phase: str,
        timeout: float = 30.0,
        working_dir: Path | None = None,
    ):
        """Initialize shell command callback.

        Args:
            command: Command line to run
            context: Context the profile belongs to
            profile: Profile name
            phase: "activate" or "deactivate"
            timeout: Timeout in seconds
            working_dir: Working directory for command execution
        """
        self.command = command
        self.context = context
        self.profile = profile
        self.phase = phase
        self.timeout = timeout
        self.working_dir = working_dir or Path.cwd()

    def __call__(self) -> str:
        """Run the command.

        Returns:
            Captured standard output

        Raises:
            CommandError: If the command is missing, times out or exits non-zero
        """
        cmd = self._build_command()
        if not cmd:
            raise CommandError(self.command, "empty command")

        logger.debug(f"Running {self.phase} command for {self.context}/{self.profile}: {self.command}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(self.working_dir),
                env=self._build_env(),
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise CommandError(self.command, f"command not found: {cmd[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(self.command, f"timed out after {self.timeout}s") from e

        if proc.stderr:
            logger.debug(f"Command {self.command} stderr: {proc.stderr.strip()}")

        if proc.returncode != 0:
            message = proc.stderr.strip() or proc.stdout.strip() or f"exit code {proc.returncode}"
            raise CommandError(self.command, message, returncode=proc.returncode)

        return proc.stdout

    def _build_command(self) -> list[str]:
        """Split the command line into arguments."""
        if sys.platform == "win32":
            return self.command.split()
        return shlex.split(self.command)

    def _build_env(self) -> dict[str, str]:
        """Build environment variables for the command."""
        env = os.environ.copy()
        env["PROFILE_SWITCHER_CONTEXT"] = self.context
        env["PROFILE_SWITCHER_PROFILE"] = self.profile
        env["PROFILE_SWITCHER_PHASE"] = self.phase
        return env

    def __repr__(self) -> str:
        return f"ShellCommandCallback(command={self.command!r}, phase={self.phase!r})"
