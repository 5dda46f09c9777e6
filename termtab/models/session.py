"""TerminalSession model - the persisted record of one opened tab."""

import sys
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

SESSION_SCHEMA_VERSION = 1

# Fields a driver may fill in when it opens a tab
ADDRESS_FIELDS = (
    "session_id",
    "window_id",
    "tab_id",
    "pane_id",
    "dbus_path",
    "pid",
    "pty_id",
)


class Platform(str, Enum):
    """Operating system family the session was opened on."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    OTHER = "other"

    @classmethod
    def current(cls) -> "Platform":
        """Map ``sys.platform`` to a Platform, read at call time."""
        if sys.platform == "darwin":
            return cls.DARWIN
        if sys.platform.startswith("linux"):
            return cls.LINUX
        if sys.platform in ("win32", "cygwin"):
            return cls.WINDOWS
        return cls.OTHER


class SessionMode(str, Enum):
    """How the background task was launched.

    Only TERMINAL sessions are closed through a driver; PTY and BACKGROUND
    sessions are closed by PID.
    """

    TERMINAL = "terminal"
    PTY = "pty"
    BACKGROUND = "background"


class TerminalSession(BaseModel):
    """One opened terminal tab/window/pane.

    Scoped to the directory it is stored under: there is at most one
    session per worktree at a time.

    The addressing fields are all optional. Each driver fills in the one or
    two it understands; ``pid`` is the universal fallback.
    """

    model_config = ConfigDict(extra="ignore")

    schema_version: int = Field(
        default=SESSION_SCHEMA_VERSION,
        description="Record format version",
    )
    driver_name: str = Field(..., description="Driver that opened (and must close) this tab")
    platform: Platform = Field(default_factory=Platform.current)
    mode: SessionMode = Field(default=SessionMode.TERMINAL)

    session_id: str | None = Field(default=None, description="iTerm2 session GUID")
    window_id: str | None = Field(default=None, description="Terminal.app / kitty window id")
    tab_id: str | None = Field(default=None, description="Tab identifier")
    pane_id: str | None = Field(default=None, description="tmux or WezTerm pane id")
    dbus_path: str | None = Field(default=None, description="Konsole D-Bus session object path")
    pid: int | None = Field(default=None, description="PID of a directly owned process")
    pty_id: str | None = Field(default=None, description="Embedded PTY session id")

    branch: str = Field(default="", description="Git branch of the worktree")
    label: str = Field(default="", description="Agent or task label shown on the tab")
    working_directory: str = Field(default="", description="Directory the tab was opened in")
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def is_addressable(self) -> bool:
        """True if any addressing field (or a PID) is present."""
        return any(getattr(self, name) is not None for name in ADDRESS_FIELDS)
