"""Detection chain: decide which terminal driver to use.

Environment variables alone are unreliable when a terminal is launched
indirectly or nested in a multiplexer, so several strategies are tried in
order and the first one that names a terminal driver wins:

1. env            - driver environment signatures
2. process-tree   - executable names of our parent processes
3. frontmost-app  - bundle id of the frontmost macOS application
4. user-config    - ``preferred_terminal`` from config.yaml
5. fallback       - the catch-all driver

IDE drivers are never returned, even when their signals are present.
"""

import logging
from collections.abc import Callable, Iterable, Mapping

from termtab.backends.base import TerminalDriver
from termtab.models.config import TermtabConfig
from termtab.models.detection import DetectionResult, DetectionStrategy
from termtab.models.session import Platform
from termtab.services import probes
from termtab.services.registry import DriverRegistry

logger = logging.getLogger(__name__)

ProcessNamesProbe = Callable[[int, float], Iterable[str]]
BundleIdProbe = Callable[[float], "str | None"]


class DetectionChain:
    """Multi-strategy terminal resolver."""

    def __init__(
        self,
        registry: DriverRegistry,
        config: TermtabConfig | None = None,
        process_names: ProcessNamesProbe = probes.parent_process_names,
        frontmost_bundle_id: BundleIdProbe = probes.frontmost_bundle_id,
    ):
        """Initialize the chain.

        Args:
            registry: Drivers to choose from.
            config: Detection settings and the preferred terminal.
            process_names: Probe yielding ancestor executable names.
            frontmost_bundle_id: Probe returning the frontmost app bundle id.
        """
        self.registry = registry
        self.config = config or TermtabConfig()
        self._process_names = process_names
        self._frontmost_bundle_id = frontmost_bundle_id

    def detect(self, env: Mapping[str, str] | None = None) -> DetectionResult:
        """Run the strategies in order and return the first match."""
        strategies = (
            (DetectionStrategy.ENV, self._from_env),
            (DetectionStrategy.PROCESS_TREE, self._from_process_tree),
            (DetectionStrategy.FRONTMOST_APP, self._from_frontmost_app),
            (DetectionStrategy.USER_CONFIG, self._from_user_config),
        )
        for strategy, resolve in strategies:
            if not self.config.detection.is_enabled(strategy):
                continue
            try:
                result = resolve(env)
            except Exception as e:
                logger.debug(f"Detection strategy {strategy.value} failed: {e}")
                continue
            if result is not None:
                logger.debug(
                    f"Detected {result.driver.name} via {result.strategy.value} ({result.detail})"
                )
                return result

        return DetectionResult(self.registry.fallback, DetectionStrategy.FALLBACK, "no terminal detected")

    def _usable(self, name: str | None) -> TerminalDriver | None:
        """Resolve a driver name to a terminal driver that can run here.

        IDE drivers, the catch-all and drivers for other platforms are
        rejected.
        """
        if not name:
            return None
        driver = self.registry.get(name)
        if driver is None or driver.is_ide or driver.catch_all:
            return None
        if not driver.supports(Platform.current()):
            logger.debug(f"{driver.name} does not run on {Platform.current().value}")
            return None
        return driver

    def _from_env(self, env: Mapping[str, str] | None) -> DetectionResult | None:
        driver = self.registry.match(env)
        if driver is None:
            return None
        return DetectionResult(driver, DetectionStrategy.ENV, f"{driver.name} environment variables")

    def _from_process_tree(self, env: Mapping[str, str] | None) -> DetectionResult | None:
        timeouts = self.config.timeouts
        max_depth = self.config.detection.process_tree_max_depth
        for depth, name in enumerate(self._process_names(max_depth, timeouts.probe), start=1):
            driver = self._usable(probes.driver_for_process(name))
            if driver is not None:
                return DetectionResult(
                    driver,
                    DetectionStrategy.PROCESS_TREE,
                    f"parent process {name} (depth {depth})",
                )
        return None

    def _from_frontmost_app(self, env: Mapping[str, str] | None) -> DetectionResult | None:
        bundle_id = self._frontmost_bundle_id(self.config.timeouts.probe)
        if not bundle_id:
            return None
        driver = self._usable(probes.driver_for_bundle_id(bundle_id))
        if driver is None:
            logger.debug(f"Frontmost app {bundle_id} is not a known terminal")
            return None
        return DetectionResult(driver, DetectionStrategy.FRONTMOST_APP, f"frontmost app {bundle_id}")

    def _from_user_config(self, env: Mapping[str, str] | None) -> DetectionResult | None:
        preferred = self.config.preferred_terminal
        driver = self._usable(preferred)
        if driver is None:
            if preferred:
                logger.warning(f"preferred_terminal={preferred} is not a usable terminal driver")
            return None
        return DetectionResult(driver, DetectionStrategy.USER_CONFIG, f"preferred_terminal={preferred}")
