"""Alacritty terminal driver for termtab.

Alacritty exposes an IPC socket (``ALACRITTY_SOCKET``) that ``alacritty msg
create-window`` uses to open a window inside the running instance. Windows
created that way have no id the CLI can report, so they cannot be closed
later; spawning a separate alacritty process keeps a PID to close with and
is used when the socket is unavailable.
"""

import logging
import os
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import CommandError, TabOpenError
from termtab.process import spawn_detached, try_command, which

logger = logging.getLogger(__name__)


class AlacrittyDriver(TerminalDriver):
    """Alacritty driver. PID-addressed unless opened over IPC."""

    @property
    def name(self) -> str:
        return "alacritty"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        env = self._env(env)
        if env_has(env, "ALACRITTY_WINDOW_ID", "ALACRITTY_LOG"):
            return True
        return env.get("TERM_PROGRAM") == "alacritty"

    def ipc_socket(self, env: Mapping[str, str] | None = None) -> str | None:
        """Return the IPC socket path if IPC is usable, else None."""
        socket_path = self._env(env).get("ALACRITTY_SOCKET")
        if not socket_path or not os.path.exists(socket_path):
            return None
        if which("alacritty") is None:
            return None
        return socket_path

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        socket_path = self.ipc_socket()
        if socket_path:
            result = try_command(
                [
                    "alacritty", "msg", "--socket", socket_path,
                    "create-window",
                    "--working-directory", options.directory,
                    "--title", options.title,
                    "-e", *options.command,
                ],
                timeout=self.timeouts.command,
            )
            if result.ok:
                logger.warning(
                    f"Opened Alacritty window over IPC in {options.directory}; "
                    "it will not be closed automatically"
                )
                return TabAddress()
            logger.warning(f"alacritty msg create-window failed: {result.stderr.strip()}")

        cmd = [
            "alacritty",
            "--working-directory", options.directory,
            "--title", options.title,
            "-e", *options.command,
        ]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open Alacritty window: {e}", self.name) from e

        logger.info(f"Spawned Alacritty window PID {pid} in {options.directory}")
        return TabAddress(pid=pid)
