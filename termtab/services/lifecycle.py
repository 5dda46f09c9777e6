"""Open and close worktree tabs.

These are the entry points the surrounding workflow calls: one to open a
tab for a new worktree and remember it, one to close it again when the
worktree is torn down. Closing never raises, because teardown must always
be allowed to continue.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from termtab.backends.base import TabOpenOptions
from termtab.errors import TabOpenError
from termtab.models.config import TermtabConfig
from termtab.models.detection import DetectionResult
from termtab.models.session import Platform, SessionMode, TerminalSession
from termtab.process import kill_pid
from termtab.services.detection import DetectionChain
from termtab.services.registry import DriverRegistry, get_driver_registry
from termtab.services.session_store import SessionStore, get_session_store

logger = logging.getLogger(__name__)


@dataclass
class OpenResult:
    """A freshly opened tab and how its terminal was chosen."""

    session: TerminalSession
    detection: DetectionResult


def detect_terminal(
    config: TermtabConfig | None = None,
    env: Mapping[str, str] | None = None,
    registry: DriverRegistry | None = None,
) -> DetectionResult:
    """Run the detection chain with the default registry."""
    config = config or TermtabConfig()
    registry = registry or get_driver_registry(config)
    return DetectionChain(registry, config).detect(env)


def open_worktree_tab(
    directory: str | Path,
    command: list[str],
    label: str = "",
    branch: str = "",
    *,
    registry: DriverRegistry | None = None,
    store: SessionStore | None = None,
    config: TermtabConfig | None = None,
    env: Mapping[str, str] | None = None,
    chain: DetectionChain | None = None,
) -> OpenResult:
    """Open a tab running ``command`` in ``directory`` and record it.

    Args:
        directory: Worktree directory; the tab starts there and the
            session record is stored under it.
        command: Argument vector to run in the new tab.
        label: Human-readable tab title.
        branch: Git branch, stored for reference.
        registry: Drivers to choose from. Defaults to the global registry.
        store: Where to record the session.
        config: Detection and timeout settings.
        env: Environment to detect from. Defaults to ``os.environ``.
        chain: Pre-built detection chain, mostly for tests.

    Returns:
        OpenResult with the persisted session.

    Raises:
        TabOpenError: If the chosen driver could not open anything. The
            message includes the command to run by hand.
    """
    config = config or TermtabConfig()
    registry = registry or get_driver_registry(config)
    store = store or get_session_store(config.session_store)
    chain = chain or DetectionChain(registry, config)

    options = TabOpenOptions(directory=directory, command=list(command), label=label, branch=branch)
    detection = chain.detect(env)
    driver = detection.driver
    logger.info(
        f"Opening {options.title} with {driver.name} (via {detection.strategy.value}: {detection.detail})"
    )

    try:
        address = driver.open_tab(options)
    except TabOpenError as e:
        raise TabOpenError(
            f"{driver.name} could not open a tab: {e}. "
            f"Open a terminal and run: {options.shell_command()}",
            driver.name,
        ) from e

    session = TerminalSession(
        driver_name=driver.name,
        platform=Platform.current(),
        mode=SessionMode.TERMINAL,
        branch=branch,
        label=label,
        working_directory=options.directory,
        **address.as_session_fields(),
    )
    if address.is_empty():
        logger.warning(f"{driver.name} tab for {options.directory} cannot be closed automatically")
    if not store.write(options.directory, session):
        logger.warning(f"Session for {options.directory} was opened but not recorded")

    return OpenResult(session=session, detection=detection)


def close_session(session: TerminalSession, registry: DriverRegistry | None = None) -> bool:
    """Close the tab described by ``session``. Never raises.

    Terminal sessions go through the driver named in the record; an
    unknown name is handled by the best-effort driver, which can only
    signal ``pid``. PTY and background sessions are closed by PID. A
    session recorded on another platform is left alone.

    Returns:
        True if the tab was closed or its process signalled.
    """
    current = Platform.current()
    if session.platform != current:
        # Window ids and PIDs from another OS mean nothing here.
        logger.warning(
            f"{session.driver_name} session was opened on {session.platform.value}, "
            f"not closing it from {current.value}"
        )
        return False

    if session.mode != SessionMode.TERMINAL:
        if session.pid is None:
            return False
        return kill_pid(session.pid)

    registry = registry or get_driver_registry()
    driver = registry.get(session.driver_name)
    if driver is None:
        logger.info(f"Unknown driver {session.driver_name!r}, closing by PID only")
        driver = registry.best_effort

    try:
        if driver.close_tab(session):
            return True
    except Exception as e:
        logger.debug(f"{driver.name} close_tab raised: {e}")

    if session.pid is not None:
        return kill_pid(session.pid)
    return False


def close_worktree_tab(
    directory: str | Path,
    *,
    registry: DriverRegistry | None = None,
    store: SessionStore | None = None,
) -> bool:
    """Close the tab recorded for ``directory`` and forget it.

    A directory with no (readable) record is a successful no-op. The
    record is only removed when the close succeeded.

    Returns:
        True if there was nothing to close or the tab was closed.
    """
    store = store or get_session_store()
    session = store.read(directory)
    if session is None:
        logger.debug(f"No session recorded for {directory}")
        return True

    closed = close_session(session, registry)
    if closed:
        store.delete(directory)
        logger.info(f"Closed {session.driver_name} session for {directory}")
    else:
        logger.info(f"{session.driver_name} session for {directory} was not closed (already gone?)")
    return closed
