"""GNOME Terminal driver for termtab.

GNOME Terminal has no tab-close API. ``gnome-terminal --wait`` keeps the
client process alive for as long as the tab's command runs, so its PID is
what gets recorded and signalled on close.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.backends.fallback import open_best_effort
from termtab.errors import CommandError, TabOpenError
from termtab.process import spawn_detached, which

logger = logging.getLogger(__name__)


class GnomeTerminalDriver(TerminalDriver):
    """GNOME Terminal driver. PID-addressed."""

    @property
    def name(self) -> str:
        return "gnome-terminal"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return env_has(self._env(env), "GNOME_TERMINAL_SERVICE")

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        if which("gnome-terminal"):
            cmd = [
                "gnome-terminal",
                "--wait",
                "--tab",
                f"--working-directory={options.directory}",
                f"--title={options.title}",
                "--",
                *options.command,
            ]
            try:
                pid = spawn_detached(cmd, cwd=options.directory)
            except CommandError as e:
                logger.warning(f"gnome-terminal failed to start: {e}")
            else:
                logger.info(f"Spawned gnome-terminal PID {pid} in {options.directory}")
                return TabAddress(pid=pid)
        else:
            logger.warning("gnome-terminal not found on PATH, trying other terminals")

        try:
            return open_best_effort(options)
        except TabOpenError as e:
            e.driver_name = self.name
            raise
