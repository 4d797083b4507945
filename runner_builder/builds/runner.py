"""Command runner for the external docker CLI.

This module handles:
- Executing docker commands with subprocess, output streamed to the terminal
- Dry-run mode: echoing the exact command line and executing nothing

Commands are argv lists; they are never passed through a shell.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Exit status reported when the executable cannot be started.
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Result of one command.

    Attributes:
        command: Argv that was (or would have been) executed.
        display: Shell-quoted command line.
        exit_code: Process exit status (0 for dry runs).
        dry_run: Whether execution was skipped.
        error_message: Error text if the command failed.
    """

    command: list[str]
    display: str
    exit_code: int
    dry_run: bool = False
    error_message: str | None = None

    @property
    def success(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0


def format_command(command: Sequence[str]) -> str:
    """Render a command line for display."""
    return shlex.join(command)


@dataclass
class DockerRunner:
    """Executes docker commands, or only prints them in dry-run mode.

    Attributes:
        dry_run: When True nothing is executed.
        echo: Callable receiving dry-run command descriptions.
        history: Every CommandResult produced, in order.
    """

    dry_run: bool = False
    echo: Callable[[str], None] = print
    history: list[CommandResult] = field(default_factory=list)

    def run(
        self,
        command: Sequence[str],
        *,
        label: str = "Command",
        stdin_text: str | None = None,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Argv to execute.
            label: Prefix for the dry-run description ("Build", "Push", ...).
            stdin_text: Text fed to the process on stdin.

        Returns:
            CommandResult; a non-zero exit is reported, never raised.
        """
        argv = list(command)
        display = format_command(argv)

        if self.dry_run:
            self.echo(f"{label} command: {display}")
            result = CommandResult(command=argv, display=display, exit_code=0, dry_run=True)
            self.history.append(result)
            return result

        logger.info("Executing: %s", display)
        try:
            completed = subprocess.run(
                argv,
                input=stdin_text,
                text=True,
                check=False,
            )
            exit_code = completed.returncode
            error_message = None
            if exit_code != 0:
                error_message = f"{argv[0]} exited with status {exit_code}"
                logger.error("%s: %s", error_message, display)
        except OSError as e:
            exit_code = COMMAND_NOT_FOUND
            error_message = f"Failed to execute {argv[0]}: {e}"
            logger.error(error_message)

        result = CommandResult(
            command=argv,
            display=display,
            exit_code=exit_code,
            error_message=error_message,
        )
        self.history.append(result)
        return result

    def probe_status(self, command: Sequence[str]) -> int | None:
        """Run a query command silently and return its exit status.

        Probes are read-only checks (``docker buildx version``). They are
        never run in dry-run mode, where the status is None.
        """
        if self.dry_run:
            return None
        try:
            completed = subprocess.run(
                list(command),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            logger.debug("Probe %s failed to start: %s", shlex.join(command), e)
            return COMMAND_NOT_FOUND
        return completed.returncode

    def probe(self, command: Sequence[str]) -> bool:
        """Whether a query command succeeds; always False in dry-run mode."""
        return self.probe_status(command) == 0


__all__ = ["COMMAND_NOT_FOUND", "CommandResult", "DockerRunner", "format_command"]
