"""Drivers for terminals without a tab-control API (Ghostty, Rio, Hyper).

Ghostty and Rio are driven by starting a new window running the command.
The spawned process is the terminal itself, so its PID is recorded and
signalled on close. On macOS Ghostty has to be started through LaunchServices, which
leaves nothing to track.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.backends.fallback import open_best_effort
from termtab.errors import CommandError, TabOpenError
from termtab.models.session import Platform
from termtab.process import spawn_detached

logger = logging.getLogger(__name__)


class GhosttyDriver(TerminalDriver):
    """Ghostty driver. PID-addressed on Linux, untracked on macOS."""

    @property
    def name(self) -> str:
        return "ghostty"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        env = self._env(env)
        return env_has(env, "GHOSTTY_RESOURCES_DIR") or env.get("TERM_PROGRAM") == "ghostty"

    def launch_command(self, options: TabOpenOptions, platform: Platform | None = None) -> list[str]:
        args = [
            f"--working-directory={options.directory}",
            f"--title={options.title}",
            "-e",
            *options.command,
        ]
        if (platform or Platform.current()) == Platform.DARWIN:
            return ["open", "-na", "Ghostty.app", "--args", *args]
        return ["ghostty", *args]

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        platform = Platform.current()
        cmd = self.launch_command(options, platform)
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open Ghostty window: {e}", self.name) from e

        if platform == Platform.DARWIN:
            logger.warning(
                f"Opened Ghostty window in {options.directory}; it will not be closed automatically"
            )
            return TabAddress()

        logger.info(f"Spawned Ghostty window PID {pid} in {options.directory}")
        return TabAddress(pid=pid)


class RioDriver(TerminalDriver):
    """Rio driver. PID-addressed."""

    @property
    def name(self) -> str:
        return "rio"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return self._env(env).get("TERM_PROGRAM") == "rio"

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        cmd = ["rio", "--working-dir", options.directory, "-e", *options.command]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open Rio window: {e}", self.name) from e

        logger.info(f"Spawned Rio window PID {pid} in {options.directory}")
        return TabAddress(pid=pid)


class HyperDriver(TerminalDriver):
    """Hyper driver. PID-addressed through a best-effort window.

    Hyper's command line only opens a window on a directory and cannot run
    a command in it, so the tab is opened with the platform launch list
    instead and recorded under Hyper's name.
    """

    @property
    def name(self) -> str:
        return "hyper"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return self._env(env).get("TERM_PROGRAM") == "Hyper"

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        logger.info(f"Hyper cannot run commands in new windows, opening {options.title} elsewhere")
        try:
            return open_best_effort(options)
        except TabOpenError as e:
            e.driver_name = self.name
            raise
