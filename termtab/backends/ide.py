"""Drivers for terminals embedded in editors and IDEs.

An IDE terminal cannot be asked to open a sibling tab from outside the
editor, so these drivers are never picked by terminal detection. They exist
so callers can tell that the user is inside an IDE (``DriverRegistry.
detect_ide``) and, where the editor has a CLI, open the worktree in a new
editor window instead.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import CommandError, TabOpenError
from termtab.models.config import TimeoutConfig
from termtab.process import spawn_detached, which

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IDEProfile:
    """How to recognise one editor and open a directory in it."""

    name: str
    env_vars: tuple[str, ...] = ()
    term_program: str | None = None
    matcher: Callable[[Mapping[str, str]], bool] | None = None
    cli: list[str] = field(default_factory=list)

    def matches(self, env: Mapping[str, str]) -> bool:
        if env_has(env, *self.env_vars):
            return True
        if self.term_program and env.get("TERM_PROGRAM") == self.term_program:
            return True
        return bool(self.matcher and self.matcher(env))


def _is_jetbrains(env: Mapping[str, str]) -> bool:
    return "JetBrains" in env.get("TERMINAL_EMULATOR", "")


IDE_PROFILES = (
    IDEProfile("vscode", ("VSCODE_PID", "VSCODE_CWD"), "vscode", cli=["code", "--new-window"]),
    IDEProfile("cursor", ("CURSOR_TRACE_ID", "CURSOR_SHELL_VERSION"), cli=["cursor", "--new-window"]),
    IDEProfile("windsurf", ("WINDSURF_PARENT_PROCESS", "WINDSURF_EDITOR"), cli=["windsurf"]),
    IDEProfile("zed", ("ZED_TERM",), "zed", cli=["zed"]),
    IDEProfile("jetbrains", ("JETBRAINS_IDE",), matcher=_is_jetbrains),
)


class IDEDriver(TerminalDriver):
    """Driver for one IDE-embedded terminal, configured by an IDEProfile."""

    def __init__(self, profile: IDEProfile, timeouts: TimeoutConfig | None = None):
        super().__init__(timeouts)
        self.profile = profile

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def is_ide(self) -> bool:
        return True

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return self.profile.matches(self._env(env))

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        if not self.profile.cli:
            raise TabOpenError(f"{self.name} has no command line launcher", self.name)

        binary = self.profile.cli[0]
        if which(binary) is None:
            raise TabOpenError(f"{binary} not found on PATH", self.name)

        # The editor CLI only opens a folder; the command is left for the user
        cmd = [*self.profile.cli, options.directory]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open {self.name} window: {e}", self.name) from e

        logger.info(f"Opened {self.name} window on {options.directory} (PID {pid})")
        return TabAddress()


def build_ide_drivers(timeouts: TimeoutConfig | None = None) -> list[IDEDriver]:
    """Return one driver per known IDE, in detection order."""
    return [IDEDriver(profile, timeouts) for profile in IDE_PROFILES]
