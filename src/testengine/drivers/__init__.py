"""Framework drivers that load and run test containers."""

from testengine.drivers.base import DriverRegistry, FrameworkDriver, default_registry
from testengine.drivers.junit import JUnitConverter, JUnitXmlDriver
from testengine.drivers.pytest_driver import PytestDriver

__all__ = [
    "DriverRegistry",
    "FrameworkDriver",
    "JUnitConverter",
    "JUnitXmlDriver",
    "PytestDriver",
    "default_registry",
]
