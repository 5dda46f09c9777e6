"""Data models for termtab."""

from termtab.models.config import (
    DetectionConfig,
    SessionStoreConfig,
    TermtabConfig,
    TimeoutConfig,
)
from termtab.models.detection import DetectionResult, DetectionStrategy
from termtab.models.session import (
    ADDRESS_FIELDS,
    SESSION_SCHEMA_VERSION,
    Platform,
    SessionMode,
    TerminalSession,
)

__all__ = [
    # Session
    "ADDRESS_FIELDS",
    "SESSION_SCHEMA_VERSION",
    "Platform",
    "SessionMode",
    "TerminalSession",
    # Detection
    "DetectionResult",
    "DetectionStrategy",
    # Config
    "DetectionConfig",
    "SessionStoreConfig",
    "TermtabConfig",
    "TimeoutConfig",
]
