"""Platform probes used by terminal detection.

Each probe answers one question about the surrounding desktop and returns
a candidate name (never a driver), so the detection chain itself stays
platform-neutral. Probes never raise: a missing tool, a timeout or an
unexpected output simply yields nothing.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import PurePath

from termtab.backends.applescript import AppleScript
from termtab.models.session import Platform
from termtab.process import PROBE_TIMEOUT, CommandResult, try_command

logger = logging.getLogger(__name__)

# Normalized executable name -> driver name
PROCESS_NAME_DRIVERS = {
    "tmux": "tmux",
    "iterm2": "iterm2",
    "iterm": "iterm2",
    "terminal": "terminal.app",
    "kitty": "kitty",
    "wezterm": "wezterm",
    "wezterm-gui": "wezterm",
    "alacritty": "alacritty",
    "konsole": "konsole",
    "gnome-terminal": "gnome-terminal",
    "gnome-terminal-server": "gnome-terminal",
    "ghostty": "ghostty",
    "rio": "rio",
    "hyper": "hyper",
}

# Lowercased macOS bundle identifier -> driver name
BUNDLE_ID_DRIVERS = {
    "com.googlecode.iterm2": "iterm2",
    "com.apple.terminal": "terminal.app",
    "net.kovidgoyal.kitty": "kitty",
    "com.github.wez.wezterm": "wezterm",
    "org.alacritty": "alacritty",
    "com.mitchellh.ghostty": "ghostty",
    "com.raphaelamorim.rio": "rio",
    "co.zeit.hyper": "hyper",
}

FRONTMOST_APP_SCRIPT = (
    'tell application "System Events" to get bundle identifier of '
    "first application process whose frontmost is true"
)


def _run_ps(pid: int, timeout: float = PROBE_TIMEOUT) -> CommandResult:
    """Ask ps for the parent PID and executable of one process."""
    return try_command(["ps", "-o", "ppid=,comm=", "-p", str(pid)], timeout=timeout)


def normalize_process_name(comm: str) -> str:
    """Reduce a ps ``comm`` value to a comparable executable name.

    ``/Applications/Ghostty.app/Contents/MacOS/ghostty`` -> ``ghostty``,
    ``-zsh`` -> ``zsh``, ``WindowsTerminal.exe`` -> ``windowsterminal``.
    """
    name = PurePath(comm.strip()).name.lower().lstrip("-")
    for suffix in (".app", ".exe"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def parse_ps_line(output: str) -> tuple[int, str] | None:
    """Parse ``ps -o ppid=,comm=`` output into (ppid, comm)."""
    line = output.strip().splitlines()[0] if output.strip() else ""
    parts = line.split(None, 1)
    if len(parts) != 2 or not parts[0].isdigit():
        return None
    return int(parts[0]), parts[1].strip()


def parent_process_names(max_depth: int = 5, timeout: float = PROBE_TIMEOUT) -> Iterator[str]:
    """Yield normalized names of our ancestor processes, nearest first.

    Stops at ``max_depth`` levels, at init, or at the first ps failure.
    Yields nothing on Windows, which has no ps.
    """
    if Platform.current() == Platform.WINDOWS:
        return

    pid = os.getppid()
    for _ in range(max_depth):
        if pid <= 1:
            return
        result = _run_ps(pid, timeout=timeout)
        if not result.ok:
            logger.debug(f"ps failed for PID {pid}: {result.stderr.strip()}")
            return
        parsed = parse_ps_line(result.stdout)
        if parsed is None:
            logger.debug(f"Unexpected ps output for PID {pid}: {result.stdout!r}")
            return
        ppid, comm = parsed
        yield normalize_process_name(comm)
        pid = ppid


def driver_for_process(name: str) -> str | None:
    return PROCESS_NAME_DRIVERS.get(name)


def frontmost_bundle_id(timeout: float = PROBE_TIMEOUT) -> str | None:
    """Return the bundle id of the frontmost macOS application.

    Returns None on other platforms, or when System Events refuses (the
    user has not granted Automation permission).
    """
    if Platform.current() != Platform.DARWIN:
        return None

    result = AppleScript(FRONTMOST_APP_SCRIPT).run(timeout=timeout)
    if not result.ok:
        logger.debug(f"Frontmost app query failed: {result.stderr.strip()}")
        return None
    return result.stdout.strip() or None


def driver_for_bundle_id(bundle_id: str) -> str | None:
    return BUNDLE_ID_DRIVERS.get(bundle_id.strip().lower())
