"""Result tree model, combination and summary statistics."""

from testengine.results.combiner import aggregate_state, combine_results
from testengine.results.models import (
    AssertionResult,
    FailureSite,
    ResultState,
    ResultTree,
    RunSummary,
    TestKind,
    TestStatus,
)
from testengine.results.summary import summarize

__all__ = [
    "AssertionResult",
    "FailureSite",
    "ResultState",
    "ResultTree",
    "RunSummary",
    "TestKind",
    "TestStatus",
    "aggregate_state",
    "combine_results",
    "summarize",
]
