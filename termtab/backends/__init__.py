"""Terminal driver implementations."""

from termtab.backends.alacritty import AlacrittyDriver
from termtab.backends.applescript import AppleScript, ScriptLiteral, escape_applescript
from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver
from termtab.backends.fallback import BestEffortDriver, FallbackDriver, open_best_effort
from termtab.backends.gnome_terminal import GnomeTerminalDriver
from termtab.backends.ide import IDE_PROFILES, IDEDriver, IDEProfile, build_ide_drivers
from termtab.backends.iterm import ITerm2Driver
from termtab.backends.kitty import KittyDriver
from termtab.backends.konsole import KonsoleDriver
from termtab.backends.standalone import GhosttyDriver, HyperDriver, RioDriver
from termtab.backends.terminal_app import TerminalAppDriver
from termtab.backends.tmux import TmuxDriver
from termtab.backends.wezterm import WezTermDriver

__all__ = [
    "AlacrittyDriver",
    "AppleScript",
    "BestEffortDriver",
    "FallbackDriver",
    "GhosttyDriver",
    "GnomeTerminalDriver",
    "HyperDriver",
    "IDEDriver",
    "IDEProfile",
    "IDE_PROFILES",
    "ITerm2Driver",
    "KittyDriver",
    "KonsoleDriver",
    "RioDriver",
    "ScriptLiteral",
    "TabAddress",
    "TabOpenOptions",
    "TerminalAppDriver",
    "TerminalDriver",
    "TmuxDriver",
    "WezTermDriver",
    "build_ide_drivers",
    "escape_applescript",
    "open_best_effort",
]
