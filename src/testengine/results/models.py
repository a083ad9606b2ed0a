"""Data models for test results and run summaries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TestStatus(str, Enum):
    """Outcome of a test or suite."""

    PASSED = "Passed"
    FAILED = "Failed"
    SKIPPED = "Skipped"
    INCONCLUSIVE = "Inconclusive"


class FailureSite(str, Enum):
    """Phase of execution in which a failure originated."""

    TEST = "Test"
    SETUP = "SetUp"
    TEARDOWN = "TearDown"
    CHILD = "Child"
    PARENT = "Parent"


class TestKind(str, Enum):
    """Whether a result node is a suite or a single test case."""

    SUITE = "Suite"
    CASE = "Case"


@dataclass(frozen=True)
class ResultState:
    """Status of a result, optionally refined by a label and a failure site."""

    status: TestStatus
    label: Optional[str] = None
    site: FailureSite = FailureSite.TEST

    @property
    def display_label(self) -> str:
        """The label if one is set, otherwise the status name."""
        return self.label or self.status.value

    def with_site(self, site: FailureSite) -> "ResultState":
        return ResultState(self.status, self.label, site)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "label": self.label,
            "site": self.site.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResultState":
        return cls(
            status=TestStatus(data["status"]),
            label=data.get("label"),
            site=FailureSite(data.get("site", FailureSite.TEST.value)),
        )

    def __str__(self) -> str:
        if self.label:
            return f"{self.status.value}:{self.label}"
        return self.status.value


# Well-known states
ResultState.SUCCESS = ResultState(TestStatus.PASSED)
ResultState.FAILURE = ResultState(TestStatus.FAILED)
ResultState.ERROR = ResultState(TestStatus.FAILED, "Error")
ResultState.CANCELLED = ResultState(TestStatus.FAILED, "Cancelled")
ResultState.NOT_RUNNABLE = ResultState(TestStatus.FAILED, "Invalid")
ResultState.CHILD_FAILURE = ResultState(TestStatus.FAILED, site=FailureSite.CHILD)
ResultState.SKIPPED = ResultState(TestStatus.SKIPPED)
ResultState.IGNORED = ResultState(TestStatus.SKIPPED, "Ignored")
ResultState.EXPLICIT = ResultState(TestStatus.SKIPPED, "Explicit")
ResultState.INCONCLUSIVE = ResultState(TestStatus.INCONCLUSIVE)


@dataclass(frozen=True)
class AssertionResult:
    """One independent assertion outcome recorded by a test case."""

    message: Optional[str] = None
    stack_trace: Optional[str] = None

    def to_dict(self) -> dict:
        return {"message": self.message, "stack_trace": self.stack_trace}


@dataclass(frozen=True)
class ResultTree:
    """Result of a single test case or of a suite and all its descendants.

    Nodes are immutable once built. ``children`` and ``assertion_results``
    are stored as tuples in the order they were supplied.
    """

    full_name: str
    kind: TestKind = TestKind.CASE
    state: ResultState = ResultState.SUCCESS
    message: Optional[str] = None
    stack_trace: Optional[str] = None
    output: str = ""
    children: tuple["ResultTree", ...] = ()
    assertion_results: tuple[AssertionResult, ...] = ()
    suite_type: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "assertion_results", tuple(self.assertion_results))

    @property
    def name(self) -> str:
        """Last segment of the full name."""
        return self.full_name.rsplit(".", 1)[-1]

    @property
    def is_suite(self) -> bool:
        return self.kind == TestKind.SUITE

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def status(self) -> TestStatus:
        return self.state.status

    @property
    def label(self) -> Optional[str]:
        return self.state.label

    @property
    def site(self) -> FailureSite:
        return self.state.site

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "full_name": self.full_name,
            "kind": self.kind.value,
            "state": self.state.to_dict(),
            "message": self.message,
            "stack_trace": self.stack_trace,
            "output": self.output,
            "suite_type": self.suite_type,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
            "assertion_results": [a.to_dict() for a in self.assertion_results],
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResultTree":
        """Create from a dictionary produced by ``to_dict``."""
        return cls(
            full_name=data["full_name"],
            kind=TestKind(data.get("kind", TestKind.CASE.value)),
            state=ResultState.from_dict(data["state"]),
            message=data.get("message"),
            stack_trace=data.get("stack_trace"),
            output=data.get("output") or "",
            suite_type=data.get("suite_type"),
            start_time=datetime.fromisoformat(data["start_time"]) if data.get("start_time") else None,
            end_time=datetime.fromisoformat(data["end_time"]) if data.get("end_time") else None,
            duration=data.get("duration") or 0.0,
            assertion_results=[
                AssertionResult(a.get("message"), a.get("stack_trace"))
                for a in data.get("assertion_results", [])
            ],
            children=[cls.from_dict(c) for c in data.get("children", [])],
        )


@dataclass(frozen=True)
class RunSummary:
    """Statistics computed once from a finished result tree."""

    overall: ResultState
    start_time: datetime
    end_time: datetime
    pass_count: int = 0
    failure_count: int = 0
    error_count: int = 0
    invalid_count: int = 0
    inconclusive_count: int = 0
    ignore_count: int = 0
    explicit_count: int = 0
    skip_count: int = 0

    @property
    def failed_count(self) -> int:
        return self.failure_count + self.error_count + self.invalid_count

    @property
    def total_skip_count(self) -> int:
        return self.ignore_count + self.explicit_count + self.skip_count

    @property
    def test_count(self) -> int:
        return (
            self.pass_count
            + self.failed_count
            + self.inconclusive_count
            + self.total_skip_count
        )

    @property
    def duration(self) -> float:
        """Elapsed seconds between start and end, never negative."""
        return max(0.0, (self.end_time - self.start_time).total_seconds())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "overall": str(self.overall),
            "test_count": self.test_count,
            "pass_count": self.pass_count,
            "failed_count": self.failed_count,
            "failure_count": self.failure_count,
            "error_count": self.error_count,
            "invalid_count": self.invalid_count,
            "inconclusive_count": self.inconclusive_count,
            "total_skip_count": self.total_skip_count,
            "ignore_count": self.ignore_count,
            "explicit_count": self.explicit_count,
            "skip_count": self.skip_count,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
        }
