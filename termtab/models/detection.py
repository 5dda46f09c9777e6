"""Detection result types."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from termtab.backends.base import TerminalDriver


class DetectionStrategy(str, Enum):
    """Which strategy of the detection chain picked the driver."""

    ENV = "env"
    PROCESS_TREE = "process-tree"
    FRONTMOST_APP = "frontmost-app"
    USER_CONFIG = "user-config"
    FALLBACK = "fallback"


@dataclass
class DetectionResult:
    """The driver chosen for this environment and how it was found."""

    driver: "TerminalDriver"
    strategy: DetectionStrategy
    detail: str = ""
