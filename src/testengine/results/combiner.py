"""Combination of independent result trees into a single run result."""

from typing import Optional, Sequence

from testengine.exceptions import StructuralViolation
from testengine.results.models import (
    FailureSite,
    ResultState,
    ResultTree,
    TestKind,
    TestStatus,
)

COMBINED_RUN_NAME = "TestRun"

# Skipped and Inconclusive share a rank; the first one seen wins.
_SEVERITY = {
    TestStatus.PASSED: 0,
    TestStatus.SKIPPED: 1,
    TestStatus.INCONCLUSIVE: 1,
    TestStatus.FAILED: 2,
}


def aggregate_state(results: Sequence[ResultTree]) -> ResultState:
    """Return the state of a suite holding ``results``.

    A failure anywhere yields a child failure. Otherwise the most severe
    status wins, keeping the label of the first result that carried it.
    """
    worst: Optional[ResultTree] = None
    for result in results:
        if worst is None or _SEVERITY[result.status] > _SEVERITY[worst.status]:
            worst = result

    if worst is None or worst.status == TestStatus.PASSED:
        return ResultState.SUCCESS
    if worst.status == TestStatus.FAILED:
        return ResultState.CHILD_FAILURE
    return ResultState(worst.status, worst.label)


def combine_results(results: Sequence[ResultTree]) -> ResultTree:
    """Wrap two or more result trees in a synthetic run suite.

    The inputs become the children of the new root in their original order.
    The root carries no message, stack trace or output of its own.

    Raises:
        StructuralViolation: If fewer than two trees are supplied
    """
    results = list(results)
    if len(results) < 2:
        raise StructuralViolation(
            f"combine_results requires at least 2 results, got {len(results)}"
        )

    start_times = [r.start_time for r in results if r.start_time is not None]
    end_times = [r.end_time for r in results if r.end_time is not None]

    return ResultTree(
        full_name=COMBINED_RUN_NAME,
        kind=TestKind.SUITE,
        state=aggregate_state(results),
        children=results,
        suite_type=COMBINED_RUN_NAME,
        start_time=min(start_times) if start_times else None,
        end_time=max(end_times) if end_times else None,
        duration=sum(r.duration for r in results),
    )
