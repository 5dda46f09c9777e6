"""kitty terminal driver for termtab.

Uses kitty's remote control protocol (``kitty @``) when the user has enabled
it with ``allow_remote_control`` in kitty.conf, and otherwise spawns a new
kitty OS window whose PID is recorded.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import CommandError, TabOpenError
from termtab.models.session import Platform, TerminalSession
from termtab.process import COMMAND_TIMEOUT, CommandResult, spawn_detached, try_command, which

logger = logging.getLogger(__name__)

MACOS_KITTY_BINARY = "/Applications/kitty.app/Contents/MacOS/kitty"


def _run_kitty_rc(*args: str, timeout: float = COMMAND_TIMEOUT) -> CommandResult:
    """Run a ``kitty @`` remote control command.

    Args:
        *args: Arguments after ``kitty @``.
        timeout: Command timeout in seconds.

    Returns:
        CommandResult; a missing binary or timeout is a non-zero result.
    """
    return try_command(["kitty", "@", *args], timeout=timeout)


def _kitty_binary() -> str:
    if which("kitty") is None and Platform.current() == Platform.DARWIN:
        return MACOS_KITTY_BINARY
    return "kitty"


class KittyDriver(TerminalDriver):
    """kitty driver.

    Tabs opened over remote control are addressed by the kitty window id
    printed by ``kitty @ launch``; spawned windows by PID.
    """

    @property
    def name(self) -> str:
        return "kitty"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        env = self._env(env)
        return env_has(env, "KITTY_WINDOW_ID") or env.get("TERM_PROGRAM") == "kitty"

    def has_remote_control(self) -> bool:
        """Check whether ``kitty @`` is enabled and reachable."""
        result = _run_kitty_rc("ls", timeout=self.timeouts.probe)
        if not result.ok:
            logger.debug(f"kitty remote control unavailable: {result.stderr.strip()}")
        return result.ok

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        if self.has_remote_control():
            result = _run_kitty_rc(
                "launch",
                "--type=tab",
                f"--cwd={options.directory}",
                f"--tab-title={options.title}",
                "--",
                *options.command,
                timeout=self.timeouts.command,
            )
            if result.ok:
                window_id = result.stdout.strip()
                logger.info(f"Opened kitty tab (window {window_id}) in {options.directory}")
                return TabAddress(window_id=window_id or None)
            logger.warning(f"kitty @ launch failed: {result.stderr.strip()}")

        # Degraded: a new kitty OS window, tracked by PID
        cmd = [
            _kitty_binary(),
            "--directory",
            options.directory,
            "--title",
            options.title,
            "--",
            *options.command,
        ]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open kitty window: {e}", self.name) from e

        logger.info(f"Spawned kitty window PID {pid} in {options.directory}")
        return TabAddress(pid=pid)

    def _close(self, session: TerminalSession) -> bool:
        if session.window_id:
            result = _run_kitty_rc(
                "close-tab", "--match", f"window_id:{session.window_id}",
                timeout=self.timeouts.command,
            )
            if result.ok:
                return True

        if session.pid is not None:
            result = _run_kitty_rc(
                "close-window", "--match", f"pid:{session.pid}",
                timeout=self.timeouts.command,
            )
            return result.ok

        return False
