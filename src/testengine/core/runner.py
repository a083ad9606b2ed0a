"""Test execution orchestration across one or more containers."""

import logging
from typing import Any, Iterable, Optional

from testengine.drivers.base import DriverRegistry, FrameworkDriver, default_registry
from testengine.events import NullListener, ResultListener
from testengine.exceptions import LoadFailure
from testengine.filters import EmptyFilter, TestFilter
from testengine.results.combiner import combine_results
from testengine.results.models import ResultTree

logger = logging.getLogger(__name__)


class TestRunner:
    """Loads test containers through drivers and runs them in order.

    Drivers are run one after another, in the order their containers were
    given to ``load``. A container that fails to load is recorded in
    ``load_failures`` and does not stop the others from loading.
    """

    def __init__(
        self,
        registry: Optional[DriverRegistry] = None,
        options: Optional[dict[str, Any]] = None,
        driver_options: Optional[dict[str, dict[str, Any]]] = None,
    ):
        """Initialize the test runner.

        Args:
            registry: Selects a driver for each container format
            options: Options passed to every driver
            driver_options: Extra options per container format
        """
        self.registry = registry or default_registry()
        self.options = options or {}
        self.driver_options = driver_options or {}

        self._drivers: list[tuple[FrameworkDriver, dict[str, Any]]] = []
        self.load_failures: list[LoadFailure] = []

    @property
    def drivers(self) -> list[FrameworkDriver]:
        """Drivers retained by the last call to ``load``."""
        return [driver for driver, _ in self._drivers]

    def load(self, containers: Iterable[str]) -> bool:
        """Load each container with the driver for its format.

        Replaces whatever was loaded before.

        Returns:
            True only if every container loaded
        """
        self.unload()
        self.load_failures = []

        containers = list(containers)
        count = 0

        for container in containers:
            format_name = self.registry.format_for(container)
            if format_name is None:
                self._record_failure(container, "no driver for this container format")
                continue

            driver = self.registry.create(format_name)
            options = self._options_for(format_name)
            if driver.load(container, options):
                self._drivers.append((driver, options))
                count += 1
                logger.debug(f"Loaded {container} with {format_name} driver")
            else:
                self._record_failure(container, f"{format_name} driver could not load it")

        return count == len(containers)

    def run(
        self,
        listener: Optional[ResultListener] = None,
        test_filter: Optional[TestFilter] = None,
    ) -> Optional[ResultTree]:
        """Run every loaded driver and return the combined result.

        Returns:
            None if nothing was loaded, the single driver's tree unchanged
            if one was loaded, otherwise a combined tree
        """
        listener = listener or NullListener()
        test_filter = test_filter or EmptyFilter()

        results = []
        for driver, options in self._drivers:
            results.append(driver.run(options, listener, test_filter))

        if not results:
            return None
        if len(results) == 1:
            return results[0]
        return combine_results(results)

    def unload(self) -> None:
        """Release all loaded drivers. Safe to call more than once."""
        for driver, _ in self._drivers:
            driver.unload()
        self._drivers = []

    def __enter__(self) -> "TestRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unload()

    def _options_for(self, format_name: str) -> dict[str, Any]:
        return {**self.options, **self.driver_options.get(format_name, {})}

    def _record_failure(self, container: str, reason: str) -> None:
        logger.warning(f"Could not load {container}: {reason}")
        self.load_failures.append(LoadFailure(container, reason))
