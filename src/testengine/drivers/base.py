"""Framework driver interface and the registry that selects drivers."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional

from testengine.events import ResultListener
from testengine.filters import TestFilter
from testengine.results.models import ResultTree


class FrameworkDriver(ABC):
    """Abstract base class for drivers that load and run one container."""

    @abstractmethod
    def load(self, container: str, options: dict[str, Any]) -> bool:
        """Load a test container.

        Args:
            container: Path or identifier of the container
            options: Driver options from the configuration

        Returns:
            True if the container was loaded, False if this driver could
            not load it
        """
        pass

    @abstractmethod
    def run(
        self,
        options: dict[str, Any],
        listener: ResultListener,
        test_filter: TestFilter,
    ) -> ResultTree:
        """Run the loaded container and return its result tree.

        Args:
            options: Driver options from the configuration
            listener: Receives progress events while tests run
            test_filter: Restricts which tests run

        Returns:
            The fully populated result tree for the container
        """
        pass

    def unload(self) -> None:
        """Release anything held since ``load``."""
        pass


DriverFactory = Callable[[], FrameworkDriver]


class DriverRegistry:
    """Maps container formats to driver factories."""

    def __init__(self):
        self._factories: dict[str, DriverFactory] = {}
        self._suffixes: dict[str, str] = {}
        self._directory_format: Optional[str] = None

    def register(
        self,
        format_name: str,
        factory: DriverFactory,
        suffixes: tuple[str, ...] = (),
        directories: bool = False,
    ) -> None:
        """Register a driver factory for a container format.

        Args:
            format_name: Key identifying the format (e.g. "junit")
            factory: Callable returning a new driver
            suffixes: File suffixes handled by this format
            directories: Whether directories are containers of this format
        """
        self._factories[format_name] = factory
        for suffix in suffixes:
            self._suffixes[suffix.lower()] = format_name
        if directories:
            self._directory_format = format_name

    @property
    def formats(self) -> list[str]:
        return list(self._factories)

    def format_for(self, container: str) -> Optional[str]:
        """Return the format key for a container, or None if unknown."""
        path = Path(container)
        if path.is_dir():
            return self._directory_format
        return self._suffixes.get(path.suffix.lower())

    def create(self, format_name: str) -> FrameworkDriver:
        return self._factories[format_name]()

    def driver_for(self, container: str) -> Optional[FrameworkDriver]:
        """Create a driver for the container's format, or None if unsupported."""
        format_name = self.format_for(container)
        if format_name is None:
            return None
        return self.create(format_name)


def default_registry() -> DriverRegistry:
    """Return a registry with the built-in drivers."""
    from testengine.drivers.junit import JUnitXmlDriver
    from testengine.drivers.pytest_driver import PytestDriver

    registry = DriverRegistry()
    registry.register("junit", JUnitXmlDriver, suffixes=(".xml",))
    registry.register("pytest", PytestDriver, suffixes=(".py",), directories=True)
    return registry
