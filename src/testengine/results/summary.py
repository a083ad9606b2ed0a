"""Run-level statistics computed from a result tree."""

from datetime import datetime, timezone
from typing import Iterator

from testengine.results.models import ResultTree, RunSummary, TestStatus

_ERROR_LABELS = {"Error", "Cancelled"}
_INVALID_LABELS = {"Invalid"}


def iter_cases(result: ResultTree) -> Iterator[ResultTree]:
    """Yield every test case in the tree in pre-order."""
    if not result.is_suite:
        yield result
        return
    for child in result.children:
        yield from iter_cases(child)


def summarize(result: ResultTree) -> RunSummary:
    """Compute a RunSummary for a finished result tree.

    Each test case is counted exactly once, by status and label. Suites do
    not count as tests.
    """
    counts = {
        "pass_count": 0,
        "failure_count": 0,
        "error_count": 0,
        "invalid_count": 0,
        "inconclusive_count": 0,
        "ignore_count": 0,
        "explicit_count": 0,
        "skip_count": 0,
    }

    for case in iter_cases(result):
        counts[_classify(case)] += 1

    start_time = result.start_time or result.end_time or datetime.now(timezone.utc)
    end_time = result.end_time or start_time

    return RunSummary(
        overall=result.state,
        start_time=start_time,
        end_time=end_time,
        **counts,
    )


def _classify(case: ResultTree) -> str:
    """Return the name of the counter a test case belongs to."""
    status = case.status
    label = case.label

    if status == TestStatus.PASSED:
        return "pass_count"
    if status == TestStatus.FAILED:
        if label in _ERROR_LABELS:
            return "error_count"
        if label in _INVALID_LABELS:
            return "invalid_count"
        return "failure_count"
    if status == TestStatus.SKIPPED:
        if label == "Ignored":
            return "ignore_count"
        if label == "Explicit":
            return "explicit_count"
        return "skip_count"
    return "inconclusive_count"
