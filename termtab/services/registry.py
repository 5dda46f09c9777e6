"""Driver registry: the ordered list of terminal drivers.

Order is the detection priority. tmux comes first because a multiplexer
runs inside some other terminal whose signals are usually also present.
The last terminal driver must be the catch-all so that detection always
finds something.
"""

import logging
from collections.abc import Iterable, Mapping

from termtab.backends.alacritty import AlacrittyDriver
from termtab.backends.base import TerminalDriver
from termtab.backends.fallback import BestEffortDriver, FallbackDriver
from termtab.backends.gnome_terminal import GnomeTerminalDriver
from termtab.backends.ide import build_ide_drivers
from termtab.backends.iterm import ITerm2Driver
from termtab.backends.kitty import KittyDriver
from termtab.backends.konsole import KonsoleDriver
from termtab.backends.standalone import GhosttyDriver, HyperDriver, RioDriver
from termtab.backends.terminal_app import TerminalAppDriver
from termtab.backends.tmux import TmuxDriver
from termtab.backends.wezterm import WezTermDriver
from termtab.models.config import TermtabConfig

logger = logging.getLogger(__name__)

BEST_EFFORT_NAME = "generic"


class DriverRegistry:
    """Ordered terminal drivers plus a name index.

    Terminal drivers and IDE drivers are kept apart: live detection only
    ever returns a terminal driver, while name lookup covers both.
    """

    def __init__(self, drivers: Iterable[TerminalDriver], ide_drivers: Iterable[TerminalDriver] = ()):
        """Initialize the registry.

        Args:
            drivers: Terminal drivers in detection order. The last one must
                be a catch-all.
            ide_drivers: IDE-embedded terminal drivers.

        Raises:
            ValueError: On duplicate names, a missing catch-all, or an IDE
                driver in the terminal list.
        """
        self._drivers = list(drivers)
        self._ide_drivers = list(ide_drivers)

        if not self._drivers or not self._drivers[-1].catch_all:
            raise ValueError("the last terminal driver must be a catch-all")
        for driver in self._drivers:
            if driver.is_ide:
                raise ValueError(f"IDE driver {driver.name!r} registered as a terminal driver")

        self._by_name: dict[str, TerminalDriver] = {}
        for driver in [*self._drivers, *self._ide_drivers]:
            if driver.name in self._by_name:
                raise ValueError(f"duplicate driver name: {driver.name!r}")
            self._by_name[driver.name] = driver

    def detect(self, env: Mapping[str, str] | None = None) -> TerminalDriver:
        """Return the first terminal driver whose signals are present.

        Always returns a driver because the catch-all matches everything.
        """
        for driver in self._drivers:
            if driver.detect(env):
                return driver
        return self.fallback

    def match(self, env: Mapping[str, str] | None = None) -> TerminalDriver | None:
        """Like ``detect`` but without the catch-all. None if nothing matched."""
        for driver in self._drivers:
            if not driver.catch_all and driver.detect(env):
                return driver
        return None

    def detect_ide(self, env: Mapping[str, str] | None = None) -> TerminalDriver | None:
        """Return the IDE whose embedded terminal we are running in, if any."""
        for driver in self._ide_drivers:
            if driver.detect(env):
                return driver
        return None

    def get(self, name: str) -> TerminalDriver | None:
        """Look up a driver by name. Unknown names return None."""
        return self._by_name.get(name)

    @property
    def fallback(self) -> TerminalDriver:
        """The catch-all driver."""
        return self._drivers[-1]

    @property
    def best_effort(self) -> TerminalDriver:
        """Driver used to close sessions whose driver is unknown."""
        return self._by_name.get(BEST_EFFORT_NAME) or self.fallback

    def terminal_drivers(self) -> list[TerminalDriver]:
        return list(self._drivers)

    def ide_drivers(self) -> list[TerminalDriver]:
        return list(self._ide_drivers)

    def names(self) -> list[str]:
        """All registered names, terminal drivers first, in order."""
        return list(self._by_name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)


def build_default_registry(config: TermtabConfig | None = None) -> DriverRegistry:
    """Build the registry of every built-in driver in detection order."""
    timeouts = (config or TermtabConfig()).timeouts
    drivers = [
        TmuxDriver(timeouts),
        ITerm2Driver(timeouts),
        TerminalAppDriver(timeouts),
        KittyDriver(timeouts),
        WezTermDriver(timeouts),
        AlacrittyDriver(timeouts),
        KonsoleDriver(timeouts),
        GnomeTerminalDriver(timeouts),
        GhosttyDriver(timeouts),
        RioDriver(timeouts),
        HyperDriver(timeouts),
        BestEffortDriver(timeouts),
        FallbackDriver(timeouts),
    ]
    return DriverRegistry(drivers, build_ide_drivers(timeouts))


# Module-level singleton
_driver_registry: DriverRegistry | None = None


def get_driver_registry(config: TermtabConfig | None = None) -> DriverRegistry:
    """Get the global driver registry.

    Args:
        config: Configuration used to build the drivers (only used on
            first call).

    Returns:
        DriverRegistry singleton.
    """
    global _driver_registry
    if _driver_registry is None:
        _driver_registry = build_default_registry(config)
        logger.debug(f"Registered drivers: {', '.join(_driver_registry.names())}")
    return _driver_registry


def reset_driver_registry() -> None:
    """Reset the global driver registry (for testing)."""
    global _driver_registry
    _driver_registry = None
