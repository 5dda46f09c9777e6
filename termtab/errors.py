"""Exception types for termtab."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from termtab.process import CommandResult


class TermtabError(Exception):
    """Base class for all termtab errors."""


class CommandError(TermtabError):
    """An external command failed, timed out, or was not found."""

    def __init__(self, message: str, result: "CommandResult | None" = None):
        super().__init__(message)
        self.result = result


class TabOpenError(TermtabError):
    """No path, including fallbacks, managed to open a terminal tab."""

    def __init__(self, message: str, driver_name: str | None = None):
        super().__init__(message)
        self.driver_name = driver_name
