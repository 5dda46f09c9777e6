"""iTerm2 driver for termtab.

This module handles AppleScript-based iTerm2 tab operations:
- Opening a tab in the current window and writing the command into it
- Closing a tab later by the session GUID captured at open time
"""

import logging
from collections.abc import Mapping

from termtab.backends.applescript import AppleScript, ScriptLiteral
from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import TabOpenError
from termtab.models.session import Platform, TerminalSession

logger = logging.getLogger(__name__)

OPEN_TAB_SCRIPT = """
tell application "iTerm2"
    tell current window
        create tab with default profile
        tell current session of current tab
            set name to $title
            write text $command
            return id
        end tell
    end tell
end tell
"""

# Used when there is no current window to add a tab to
OPEN_WINDOW_SCRIPT = """
tell application "iTerm2"
    activate
    set newWindow to (create window with default profile)
    tell current session of newWindow
        set name to $title
        write text $command
        return id
    end tell
end tell
"""

CLOSE_SESSION_SCRIPT = """
tell application "iTerm2"
    repeat with w in windows
        repeat with t in tabs of w
            repeat with s in sessions of t
                if id of s is $session_id then
                    close s
                    return "closed"
                end if
            end repeat
        end repeat
    end repeat
    return "not_found"
end tell
"""


class ITerm2Driver(TerminalDriver):
    """iTerm2 driver (macOS only).

    Addresses tabs by iTerm2 session GUID.
    """

    @property
    def name(self) -> str:
        return "iterm2"

    @property
    def platforms(self) -> frozenset[Platform]:
        return frozenset({Platform.DARWIN})

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        if not self.supports(Platform.current()):
            return False
        env = self._env(env)
        if env_has(env, "ITERM_SESSION_ID"):
            return True
        if env.get("TERM_PROGRAM") == "iTerm.app":
            return True
        bundle_id = env.get("__CFBundleIdentifier", "").lower()
        return "iterm2" in bundle_id

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        params = {
            "title": ScriptLiteral(options.title),
            "command": ScriptLiteral(options.shell_command()),
        }

        for template in (OPEN_TAB_SCRIPT, OPEN_WINDOW_SCRIPT):
            result = AppleScript(template, **params).run(timeout=self.timeouts.command)
            if result.ok:
                session_id = result.stdout.strip()
                logger.info(f"Opened iTerm2 session {session_id or '(unknown)'} in {options.directory}")
                return TabAddress(session_id=session_id or None)
            logger.warning(f"iTerm2 AppleScript failed: {result.stderr.strip()}")

        raise TabOpenError("Failed to open iTerm2 tab", self.name)

    def _close(self, session: TerminalSession) -> bool:
        if not session.session_id:
            return False
        script = AppleScript(CLOSE_SESSION_SCRIPT, session_id=ScriptLiteral(session.session_id))
        result = script.run(timeout=self.timeouts.command)
        return result.ok and result.stdout.strip() == "closed"
