"""Shell-less process execution for terminal drivers.

Every external tool termtab talks to (tmux, osascript, kitty, wezterm, qdbus,
ps, ...) goes through this module. Commands are always passed as an argument
vector, never through a shell, and always carry a timeout.
"""

import logging
import os
import shutil
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

from termtab.errors import CommandError

logger = logging.getLogger(__name__)

# Defaults used when a caller does not pass its own timeout (seconds)
PROBE_TIMEOUT = 3.0
COMMAND_TIMEOUT = 10.0


@dataclass
class CommandResult:
    """Outcome of a finished external command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    cmd: list[str],
    timeout: float = COMMAND_TIMEOUT,
    cwd: str | Path | None = None,
    check: bool = True,
) -> CommandResult:
    """Run a command and wait for it to finish.

    Args:
        cmd: Argument vector. ``cmd[0]`` is the binary.
        timeout: Seconds before the command is abandoned.
        cwd: Optional working directory.
        check: If True, raise CommandError on a non-zero exit. If False,
            a non-zero exit is returned as a normal result.

    Returns:
        CommandResult with the exit code and decoded output.

    Raises:
        CommandError: If the binary is missing or the command timed out
            (regardless of ``check``), or exited non-zero with ``check=True``.
    """
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{cmd[0]} timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {cmd[0]}") from e
    except OSError as e:
        raise CommandError(f"Failed to run {cmd[0]}: {e}") from e

    result = CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")
    if check and not result.ok:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise CommandError(f"{cmd[0]} failed: {detail}", result)
    return result


def try_command(
    cmd: list[str],
    timeout: float = COMMAND_TIMEOUT,
    cwd: str | Path | None = None,
) -> CommandResult:
    """Run a command without ever raising.

    Missing binaries and timeouts are folded into a result with
    ``returncode == 1`` and the reason in ``stderr``.
    """
    try:
        return run_command(cmd, timeout=timeout, cwd=cwd, check=False)
    except CommandError as e:
        return CommandResult(1, "", str(e))


def spawn_detached(cmd: list[str], cwd: str | Path | None = None) -> int:
    """Start a process without waiting for it and return its PID.

    The child gets its own session and no inherited stdio, so it keeps
    running after the caller exits.

    Raises:
        CommandError: If the process could not be started.
    """
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {cmd[0]}") from e
    except OSError as e:
        raise CommandError(f"Failed to spawn {cmd[0]}: {e}") from e

    logger.debug(f"Spawned {cmd[0]} with PID {proc.pid}")
    return proc.pid


def which(binary: str) -> str | None:
    """Return the full path of a binary on PATH, or None."""
    return shutil.which(binary)


def kill_pid(pid: int) -> bool:
    """Send SIGTERM to a process.

    Returns:
        True if the signal was delivered, False if the process is already
        gone, not ours, or the PID is invalid.
    """
    if not isinstance(pid, int) or pid <= 1:
        return False
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        logger.debug(f"PID {pid} already exited")
        return False
    except (PermissionError, OSError) as e:
        logger.debug(f"Could not signal PID {pid}: {e}")
        return False
    return True
