"""Exception types raised by the test engine."""

from dataclasses import dataclass


class TestEngineError(Exception):
    """Base class for all test engine errors."""

    pass


class StructuralViolation(TestEngineError):
    """Raised when a caller breaks a programming contract of the engine."""

    pass


class DriverError(TestEngineError):
    """Raised when a driver is used in an invalid state."""

    pass


@dataclass
class LoadFailure:
    """A container that could not be loaded.

    Load failures are recorded by the runner rather than raised, so that
    the remaining containers in a batch still get loaded.
    """

    container: str
    reason: str

    def to_dict(self) -> dict:
        return {"container": self.container, "reason": self.reason}
