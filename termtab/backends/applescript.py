"""AppleScript construction and execution for the macOS drivers.

Scripts are built from a ``$placeholder`` template. Every value substituted
into a template must be a ScriptLiteral (rendered as an escaped AppleScript
string literal) or an int. Plain strings are rejected, so a worktree path or
a command line can never be spliced into a script unescaped.
"""

import logging
from dataclasses import dataclass
from string import Template

from termtab.process import COMMAND_TIMEOUT, CommandResult, try_command

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_applescript(value: str) -> str:
    """Escape text for use inside an AppleScript double-quoted string."""
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


@dataclass(frozen=True)
class ScriptLiteral:
    """A value that renders as a quoted, escaped AppleScript string."""

    value: str

    def render(self) -> str:
        return f'"{escape_applescript(self.value)}"'

    def __str__(self) -> str:
        return self.render()


class AppleScript:
    """An AppleScript program with safely substituted parameters."""

    def __init__(self, template: str, **params: "ScriptLiteral | int"):
        rendered = {}
        for key, value in params.items():
            if isinstance(value, ScriptLiteral):
                rendered[key] = value.render()
            elif isinstance(value, int) and not isinstance(value, bool):
                rendered[key] = str(value)
            else:
                raise TypeError(
                    f"AppleScript parameter {key!r} must be ScriptLiteral or int, "
                    f"got {type(value).__name__}"
                )
        self.source = Template(template).substitute(rendered)

    def run(self, timeout: float = COMMAND_TIMEOUT) -> CommandResult:
        """Run the script with osascript. Never raises."""
        result = try_command(["osascript", "-e", self.source], timeout=timeout)
        if not result.ok:
            logger.debug(f"osascript failed: {result.stderr.strip()}")
        return result

    def __str__(self) -> str:
        return self.source
