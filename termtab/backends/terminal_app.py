"""Terminal.app driver for termtab (macOS)."""

import logging
from collections.abc import Mapping

from termtab.backends.applescript import AppleScript, ScriptLiteral
from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver
from termtab.errors import TabOpenError
from termtab.models.session import Platform, TerminalSession
from termtab.process import try_command

logger = logging.getLogger(__name__)

# do script without a target opens a new window, which becomes the front one
OPEN_SCRIPT = """
tell application "Terminal"
    activate
    set newTab to do script $command
    set custom title of newTab to $title
    return id of front window
end tell
"""

CLOSE_SCRIPT = """
tell application "Terminal"
    try
        close window id $window_id
        return "closed"
    on error
        return "not_found"
    end try
end tell
"""


class TerminalAppDriver(TerminalDriver):
    """Apple Terminal driver. Addresses windows by numeric window id."""

    @property
    def name(self) -> str:
        return "terminal.app"

    @property
    def platforms(self) -> frozenset[Platform]:
        return frozenset({Platform.DARWIN})

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        if not self.supports(Platform.current()):
            return False
        env = self._env(env)
        if env.get("TERM_PROGRAM") == "Apple_Terminal":
            return True
        return env.get("__CFBundleIdentifier", "") == "com.apple.Terminal"

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        script = AppleScript(
            OPEN_SCRIPT,
            command=ScriptLiteral(options.shell_command()),
            title=ScriptLiteral(options.title),
        )
        result = script.run(timeout=self.timeouts.command)
        if result.ok:
            window_id = result.stdout.strip()
            logger.info(f"Opened Terminal.app window {window_id or '(unknown)'} in {options.directory}")
            return TabAddress(window_id=window_id or None)

        # Degraded: a plain window in the directory, without the command
        logger.warning(f"Terminal.app AppleScript failed ({result.stderr.strip()}), opening a plain window")
        result = try_command(
            ["open", "-a", "Terminal", options.directory], timeout=self.timeouts.command
        )
        if result.ok:
            logger.warning(f"Run manually in the new window: {options.shell_command()}")
            return TabAddress()

        raise TabOpenError("Failed to open Terminal.app", self.name)

    def _close(self, session: TerminalSession) -> bool:
        if not session.window_id:
            return False
        try:
            window_id = int(session.window_id)
        except ValueError:
            logger.debug(f"Ignoring non-numeric Terminal.app window id: {session.window_id!r}")
            return False

        result = AppleScript(CLOSE_SCRIPT, window_id=window_id).run(timeout=self.timeouts.command)
        return result.ok and result.stdout.strip() == "closed"
