"""Per-worktree session record storage.

Each worktree directory holds at most one TerminalSession, stored as JSON at
``<directory>/.termtab/session.json``. Writes go through a temporary file in
the same directory and are renamed into place, so a reader never sees a
half-written record.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from termtab.models.config import SessionStoreConfig
from termtab.models.session import TerminalSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Reads and writes the session record of a worktree.

    Handles:
    - Atomic writes
    - Tolerant reads (missing or corrupt records read as None)
    - Deleting a record after its tab was closed
    """

    def __init__(self, config: SessionStoreConfig | None = None):
        """Initialize the session store.

        Args:
            config: Location of the record inside each worktree.
        """
        self.config = config or SessionStoreConfig()

    def path_for(self, directory: str | Path) -> Path:
        """Return the session file path for a worktree directory."""
        return Path(directory) / self.config.directory / self.config.file_name

    def write(self, directory: str | Path, session: TerminalSession) -> bool:
        """Persist a session record, replacing any existing one.

        Args:
            directory: Worktree directory that owns the session.
            session: Record to store.

        Returns:
            True if the record was written.
        """
        path = self.path_for(directory)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(session.model_dump_json(indent=2))
                f.write("\n")
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Error writing session record {path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

        logger.debug(f"Wrote {session.driver_name} session record to {path}")
        return True

    def read(self, directory: str | Path) -> TerminalSession | None:
        """Load the session record of a worktree.

        Returns:
            The stored session, or None if there is no record or it cannot
            be parsed.
        """
        path = self.path_for(directory)
        if not path.exists():
            return None

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error reading session record {path}: {e}")
            return None

        try:
            return TerminalSession.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable session record {path}: {e.error_count()} error(s)")
            return None

    def delete(self, directory: str | Path) -> bool:
        """Remove the session record of a worktree.

        Returns:
            True if a record was removed.
        """
        path = self.path_for(directory)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Error removing session record {path}: {e}")
            return False
        return True


# Module-level singleton
_session_store: SessionStore | None = None


def get_session_store(config: SessionStoreConfig | None = None) -> SessionStore:
    """Get the global session store instance.

    Args:
        config: Store location (only used on first call).

    Returns:
        SessionStore singleton.
    """
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(config)
    return _session_store


def reset_session_store() -> None:
    """Reset the global session store (for testing)."""
    global _session_store
    _session_store = None
