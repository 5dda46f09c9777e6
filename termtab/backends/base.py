"""Abstract base class for terminal driver implementations.

This module defines the interface that all terminal drivers must implement.
A driver knows how to recognise one terminal family from the environment,
open a new tab running a command in it, and close that tab again later,
possibly from a different process.
"""

import logging
import os
import shlex
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from pathlib import Path

from termtab.models.config import TimeoutConfig
from termtab.models.session import Platform, TerminalSession
from termtab.process import kill_pid

logger = logging.getLogger(__name__)


@dataclass
class TabOpenOptions:
    """What to open: a directory, a command to run there, and a tab label."""

    directory: str | Path
    command: list[str]
    label: str = ""
    branch: str = ""

    def __post_init__(self):
        self.directory = str(self.directory)
        if not self.command:
            raise ValueError("command must not be empty")

    @property
    def title(self) -> str:
        """Human-readable tab title."""
        return self.label or Path(self.directory).name

    def shell_command(self) -> str:
        """POSIX shell line that enters the directory and runs the command."""
        return f"cd {shlex.quote(self.directory)} && {shlex.join(self.command)}"


@dataclass
class TabAddress:
    """Addressing information captured by a driver when it opened a tab.

    Only the fields the driver could capture are set. An empty address
    means the tab was opened but cannot be closed automatically.
    """

    session_id: str | None = None
    window_id: str | None = None
    tab_id: str | None = None
    pane_id: str | None = None
    dbus_path: str | None = None
    pid: int | None = None
    pty_id: str | None = None

    def as_session_fields(self) -> dict:
        """Return the addressing fields that are set, for TerminalSession."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def is_empty(self) -> bool:
        return not self.as_session_fields()


def env_has(env: Mapping[str, str], *names: str) -> bool:
    """True if any of the named variables is set to a non-empty value."""
    return any(env.get(name) for name in names)


class TerminalDriver(ABC):
    """Abstract interface for terminal drivers.

    Drivers are stateless: one instance can serve any number of open and
    close calls, from any thread.

    - ``detect()`` inspects environment variables only
    - ``open_tab()`` creates a tab and returns its address
    - ``close_tab()`` closes a tab from a stored session and never raises
    """

    def __init__(self, timeouts: TimeoutConfig | None = None):
        self.timeouts = timeouts or TimeoutConfig()

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the driver identifier (e.g., 'tmux', 'kitty')."""

    @property
    def is_ide(self) -> bool:
        """True for drivers of IDE-embedded terminals."""
        return False

    @property
    def catch_all(self) -> bool:
        """True only for the driver that matches every environment."""
        return False

    @property
    def platforms(self) -> frozenset[Platform] | None:
        """Platforms this driver can work on. None means all of them."""
        return None

    def supports(self, platform: Platform) -> bool:
        return self.platforms is None or platform in self.platforms

    @abstractmethod
    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        """Check whether this terminal is the active environment.

        Args:
            env: Environment to inspect. Defaults to ``os.environ``.

        Returns:
            True if this driver's signals are present.
        """

    @abstractmethod
    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        """Open a new tab running ``options.command`` in ``options.directory``.

        Implementations try their primary mechanism first and a degraded
        one (usually a spawned window whose PID is recorded) second.

        Returns:
            The addressing information that could be captured.

        Raises:
            TabOpenError: If no path succeeded.
        """

    def close_tab(self, session: TerminalSession) -> bool:
        """Close the tab addressed by ``session``.

        Calls the driver-specific close and falls back to killing
        ``session.pid``. A tab that is already gone is reported as False.

        Returns:
            True if something was closed or signalled, False otherwise.
        """
        try:
            if self._close(session):
                logger.info(f"Closed {self.name} tab for {session.working_directory or 'session'}")
                return True
        except Exception as e:
            logger.debug(f"{self.name} close failed: {e}")

        if session.pid is not None:
            return kill_pid(session.pid)
        return False

    def _close(self, session: TerminalSession) -> bool:
        """Driver-specific close. Returns True only if the target was closed.

        The default implementation has no IPC channel and returns False so
        that ``close_tab`` falls through to the PID.
        """
        return False

    @staticmethod
    def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
        return os.environ if env is None else env

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
