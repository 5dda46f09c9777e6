"""WezTerm terminal driver for termtab.

Implements the TerminalDriver interface using the wezterm CLI.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import CommandError, TabOpenError
from termtab.models.session import TerminalSession
from termtab.process import COMMAND_TIMEOUT, CommandResult, spawn_detached, try_command

logger = logging.getLogger(__name__)


def _run_wezterm(*args: str, timeout: float = COMMAND_TIMEOUT) -> CommandResult:
    """Run a wezterm CLI command.

    Args:
        *args: Command arguments to pass to wezterm cli.
        timeout: Command timeout in seconds.

    Returns:
        CommandResult; a missing binary or timeout is a non-zero result.
    """
    return try_command(["wezterm", "cli", *args], timeout=timeout)


class WezTermDriver(TerminalDriver):
    """WezTerm-based driver.

    Uses ``wezterm cli spawn`` to open a tab in the running GUI and records
    the pane id. Falls back to ``wezterm start``, which opens a new window as
    a child process.
    """

    @property
    def name(self) -> str:
        return "wezterm"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        env = self._env(env)
        return env_has(env, "WEZTERM_PANE") or env.get("TERM_PROGRAM") == "WezTerm"

    def has_remote_control(self) -> bool:
        """Check whether the wezterm mux server answers CLI requests."""
        result = _run_wezterm("list", timeout=self.timeouts.probe)
        if not result.ok:
            logger.debug(f"wezterm cli unavailable: {result.stderr.strip()}")
        return result.ok

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        if self.has_remote_control():
            result = _run_wezterm(
                "spawn", "--cwd", options.directory, "--", *options.command,
                timeout=self.timeouts.command,
            )
            if result.ok:
                pane_id = result.stdout.strip()
                if pane_id:
                    # Tab titles persist even when the program overwrites the pane title
                    _run_wezterm(
                        "set-tab-title", "--pane-id", pane_id, options.title,
                        timeout=self.timeouts.probe,
                    )
                logger.info(f"Opened WezTerm pane {pane_id or '(unknown)'} in {options.directory}")
                return TabAddress(pane_id=pane_id or None)
            logger.warning(f"wezterm cli spawn failed: {result.stderr.strip()}")

        # Degraded: a new WezTerm window, tracked by PID
        cmd = ["wezterm", "start", "--cwd", options.directory, "--", *options.command]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open WezTerm window: {e}", self.name) from e

        logger.info(f"Spawned WezTerm window PID {pid} in {options.directory}")
        return TabAddress(pid=pid)

    def _close(self, session: TerminalSession) -> bool:
        if not session.pane_id:
            return False
        result = _run_wezterm("kill-pane", "--pane-id", session.pane_id, timeout=self.timeouts.command)
        return result.ok
