"""Konsole (KDE) driver for termtab.

Talks to the running Konsole instance over the D-Bus session bus using the
``qdbus`` client (``qdbus6`` on Plasma 6). The bus service differs per
Konsole instance and is read from the environment on every call.
"""

import logging
from collections.abc import Mapping

from termtab.backends.base import TabAddress, TabOpenOptions, TerminalDriver, env_has
from termtab.errors import CommandError, TabOpenError
from termtab.models.session import TerminalSession
from termtab.process import spawn_detached, try_command, which

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "org.kde.konsole"
DEFAULT_WINDOW_PATH = "/Windows/1"


def find_qdbus() -> str | None:
    """Return the name of the available session-bus client, or None."""
    for binary in ("qdbus", "qdbus6"):
        if which(binary):
            return binary
    return None


def dbus_service(env: Mapping[str, str]) -> str:
    """Resolve the Konsole D-Bus service name for the current instance.

    Konsole exports ``KONSOLE_DBUS_SERVICE`` as either a unique bus name
    (``:1.42``) or a well-known name. A bare instance suffix is expanded to
    ``org.kde.konsole-<suffix>``.
    """
    service = env.get("KONSOLE_DBUS_SERVICE", "").strip()
    if not service:
        return DEFAULT_SERVICE
    if service.startswith(":") or "." in service:
        return service
    return f"{DEFAULT_SERVICE}-{service}"


class KonsoleDriver(TerminalDriver):
    """Konsole driver. Addresses tabs by D-Bus session object path."""

    @property
    def name(self) -> str:
        return "konsole"

    def detect(self, env: Mapping[str, str] | None = None) -> bool:
        return env_has(self._env(env), "KONSOLE_VERSION")

    def open_tab(self, options: TabOpenOptions) -> TabAddress:
        qdbus = find_qdbus()
        if qdbus:
            dbus_path = self._open_over_dbus(qdbus, options)
            if dbus_path:
                logger.info(f"Opened Konsole session {dbus_path} in {options.directory}")
                return TabAddress(dbus_path=dbus_path)
        else:
            logger.warning("Neither qdbus nor qdbus6 found, launching konsole directly")

        cmd = ["konsole", "--new-tab", "--workdir", options.directory, "-e", *options.command]
        try:
            pid = spawn_detached(cmd, cwd=options.directory)
        except CommandError as e:
            raise TabOpenError(f"Failed to open Konsole tab: {e}", self.name) from e

        logger.info(f"Spawned konsole PID {pid} in {options.directory}")
        return TabAddress(pid=pid)

    def _open_over_dbus(self, qdbus: str, options: TabOpenOptions) -> str | None:
        env = self._env(None)
        service = dbus_service(env)
        window_path = env.get("KONSOLE_DBUS_WINDOW") or DEFAULT_WINDOW_PATH
        timeout = self.timeouts.command

        result = try_command([qdbus, service, window_path, "newSession"], timeout=timeout)
        session_number = result.stdout.strip()
        if not result.ok or not session_number.isdigit():
            logger.warning(f"Konsole newSession failed: {result.stderr.strip() or session_number}")
            return None

        dbus_path = f"/Sessions/{session_number}"
        try_command([qdbus, service, dbus_path, "setTitle", "1", options.title], timeout=timeout)
        result = try_command(
            [qdbus, service, dbus_path, "runCommand", options.shell_command()], timeout=timeout
        )
        if not result.ok:
            logger.warning(f"Konsole runCommand failed: {result.stderr.strip()}")
            try_command([qdbus, service, dbus_path, "close"], timeout=timeout)
            return None
        return dbus_path

    def _close(self, session: TerminalSession) -> bool:
        if not session.dbus_path:
            return False
        qdbus = find_qdbus()
        if not qdbus:
            return False
        service = dbus_service(self._env(None))
        result = try_command([qdbus, service, session.dbus_path, "close"], timeout=self.timeouts.command)
        return result.ok
