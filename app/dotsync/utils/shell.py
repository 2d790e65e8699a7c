"""Shell execution utilities.

Provides safe subprocess execution with proper error handling. Commands
are always passed as argument lists, never as strings for a shell to
interpret.
"""

import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """Execute a shell command and return the result.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def run_selector(args: list[str], candidates: list[str]) -> CommandResult:
    """Run an interactive selector fed with candidate lines on stdin.

    Unlike run_command(), stderr is not captured so that a terminal UI
    drawn on it (as fzf does) stays visible to the user. Only the chosen
    lines on stdout are captured.

    Args:
        args: Selector command and arguments.
        candidates: Lines to offer for selection.

    Returns:
        CommandResult with the selected lines on stdout; stderr is empty.

    Raises:
        FileNotFoundError: If the selector executable is not found.
    """
    result = subprocess.run(
        args,
        input="\n".join(candidates),
        stdout=subprocess.PIPE,
        text=True,
        check=False,
    )
    return CommandResult(stdout=result.stdout, stderr="", returncode=result.returncode)
