"""tmux terminal driver.

tmux is a multiplexer: when the caller runs inside tmux, new work should be
opened as a tmux window regardless of which emulator hosts the tmux client.
The registry therefore checks this driver before any emulator driver.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import TabOpenError
from termtab.models.session import TerminalSession
from termtab.process import COMMAND_TIMEOUT, CommandResult, try_command

logger = logging.getLogger(__name__)


def _run_tmux(*args: str, timeout: float = COMMAND_TIMEOUT) -> CommandResult:
    """Run a tmux command.

    Args:
        *args: Command arguments to pass to tmux.
        timeout: Command timeout in seconds.

    Returns:
        CommandResult; a missing binary or timeout is a non-zero result.
    """
    return try_command(["tmux", *args], timeout=timeout)


class TmuxDriver(TerminalDriver):
    """tmux-based driver.

    Opens a new window in the current tmux session and records its pane id.
    """

    @property
    def name(self) -> str:
        return "tmux"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return env_has(self._env(env), "TMUX")

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        placement = ["-c", options.directory, "-n", options.title]
        command = options.shell_command()

        # -P prints information about the new window, -F formats it
        result = _run_tmux(
            "new-window", "-P", "-F", "#{pane_id}", *placement, command,
            timeout=self.timeouts.command,
        )
        if result.ok:
            pane_id = result.stdout.strip()
            logger.info(f"Opened tmux window {pane_id or '(unknown pane)'} in {options.directory}")
            return TabAddress(pane_id=pane_id or None)

        logger.warning(f"tmux new-window -P failed ({result.stderr.strip()}), retrying without capture")
        result = _run_tmux("new-window", *placement, command, timeout=self.timeouts.command)
        if result.ok:
            return TabAddress()

        raise TabOpenError(f"Failed to open tmux window: {result.stderr.strip()}", self.name)

    def _close(self, session: TerminalSession) -> bool:
        if not session.pane_id:
            return False
        result = _run_tmux("kill-pane", "-t", session.pane_id, timeout=self.timeouts.command)
        return result.ok
