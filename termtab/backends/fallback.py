"""Best-effort and catch-all drivers for termtab.

Used when the terminal could not be identified. They try a short list of
plausible terminal launch commands for the current platform and record the
PID of the first one that starts.
"""

import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver
from termtab.errors import CommandError, TabOpenError
from termtab.models.session import Platform
from termtab.process import spawn_detached, which

logger = logging.getLogger(__name__)


@dataclass
class LaunchCandidate:
    """One way of opening a terminal window.

    ``track_pid`` is False for launchers that hand off to another process
    and exit immediately (``open``, ``cmd /c start``); their PID must not be
    recorded because it could be reused by an unrelated process.
    """

    argv: list[str]
    track_pid: bool = True


def launch_candidates(options: TabOpenOptions, platform: Platform | None = None) -> list[LaunchCandidate]:
    """Return the launch commands to try, in order, for a platform."""
    platform = platform or Platform.current()
    shell_line = options.shell_command()

    if platform == Platform.DARWIN:
        return [LaunchCandidate(["open", "-a", "Terminal", options.directory], track_pid=False)]

    if platform == Platform.WINDOWS:
        cmdline = subprocess.list2cmdline(options.command)
        return [
            LaunchCandidate(
                ["wt.exe", "new-tab", "--startingDirectory", options.directory, "cmd", "/k", cmdline]
            ),
            LaunchCandidate(["cmd", "/c", "start", "", "cmd", "/k", cmdline], track_pid=False),
        ]

    return [
        LaunchCandidate(["x-terminal-emulator", "-e", "bash", "-c", shell_line]),
        LaunchCandidate(["xterm", "-T", options.title, "-e", "bash", "-c", shell_line]),
        LaunchCandidate(
            ["xfce4-terminal", "--working-directory", options.directory, "-x", "bash", "-c", shell_line]
        ),
    ]


def open_best_effort(options: TabOpenOptions, platform: Platform | None = None) -> TabAddress:
    """Open a window with the first launch candidate that starts.

    Raises:
        TabOpenError: If no candidate could be started.
    """
    platform = platform or Platform.current()
    tried = []
    for candidate in launch_candidates(options, platform):
        binary = candidate.argv[0]
        if which(binary) is None:
            tried.append(f"{binary} (not installed)")
            continue
        try:
            pid = spawn_detached(candidate.argv, cwd=options.directory)
        except CommandError as e:
            tried.append(f"{binary} ({e})")
            continue

        logger.info(f"Opened {binary} window for {options.directory}")
        if candidate.track_pid:
            return TabAddress(pid=pid)
        return TabAddress()

    raise TabOpenError(
        f"Could not open a terminal on {platform.value}; tried: {', '.join(tried) or 'nothing'}"
    )


class BestEffortDriver(TerminalDriver):
    """Driver for an arbitrary or unknown GUI terminal.

    Never selected by live detection. Registered under ``generic`` so that
    sessions whose driver is unknown can still be closed by PID.
    """

    @property
    def name(self) -> str:
        return "generic"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return False

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        try:
            return open_best_effort(options)
        except TabOpenError as e:
            e.driver_name = self.name
            raise


class FallbackDriver(BestEffortDriver):
    """Catch-all driver. Matches every environment and must be registered last."""

    @property
    def name(self) -> str:
        return "fallback"

    @property
    def catch_all(self) -> bool:
        return True

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return True
