"""Progress events delivered to a result listener during a run."""

from dataclasses import dataclass
from typing import Protocol, Union

from testengine.results.models import ResultTree


@dataclass(frozen=True)
class TestStarted:
    """A test is about to run."""

    full_name: str


@dataclass(frozen=True)
class TestFinished:
    """A test or suite has finished."""

    result: ResultTree


@dataclass(frozen=True)
class TestOutput:
    """Text written by a test while it ran."""

    test_name: str
    stream: str
    text: str


TestEvent = Union[TestStarted, TestFinished, TestOutput]


class ResultListener(Protocol):
    """Receives events synchronously, in execution order."""

    def on_test_event(self, event: TestEvent) -> None:
        ...


class NullListener:
    """Listener that ignores every event."""

    def on_test_event(self, event: TestEvent) -> None:
        pass


class RecordingListener:
    """Listener that keeps every event it receives."""

    def __init__(self):
        self.events: list[TestEvent] = []

    def on_test_event(self, event: TestEvent) -> None:
        self.events.append(event)
