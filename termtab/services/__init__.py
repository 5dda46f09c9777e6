"""Services for termtab."""

from termtab.services import probes
from termtab.services.config_service import (
    ConfigService,
    get_config_service,
    reset_config_service,
)
from termtab.services.detection import DetectionChain
from termtab.services.lifecycle import (
    OpenResult,
    close_session,
    close_worktree_tab,
    detect_terminal,
    open_worktree_tab,
)
from termtab.services.registry import (
    DriverRegistry,
    build_default_registry,
    get_driver_registry,
    reset_driver_registry,
)
from termtab.services.session_store import (
    SessionStore,
    get_session_store,
    reset_session_store,
)

__all__ = [
    "ConfigService",
    "DetectionChain",
    "DriverRegistry",
    "OpenResult",
    "SessionStore",
    "build_default_registry",
    "close_session",
    "close_worktree_tab",
    "detect_terminal",
    "get_config_service",
    "get_driver_registry",
    "get_session_store",
    "open_worktree_tab",
    "probes",
    "reset_config_service",
    "reset_driver_registry",
    "reset_session_store",
]
