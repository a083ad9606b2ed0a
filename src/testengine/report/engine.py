"""Failure, not-run and summary reports built from a result tree."""

from dataclasses import dataclass
from typing import Iterator, Optional

from testengine.results.models import (
    FailureSite,
    ResultState,
    ResultTree,
    RunSummary,
    TestStatus,
)
from testengine.results.summary import summarize

TRIM_CHARS = "\r\n"
THEORY_SUITE_TYPE = "Theory"


@dataclass(frozen=True)
class ReportEntry:
    """One numbered entry of a failures or not-run report."""

    prefix: str
    state: ResultState
    full_name: str
    message: Optional[str] = None
    stack_trace: Optional[str] = None

    @property
    def status_label(self) -> str:
        """Label shown for the entry, e.g. "Failed", "Ignored" or "SetUp Error"."""
        label = self.state.display_label
        if self.state.status == TestStatus.FAILED and self.state.site in (
            FailureSite.SETUP,
            FailureSite.TEARDOWN,
        ):
            return f"{self.state.site.value} {label}"
        return label

    def render(self) -> str:
        lines = [f"{self.prefix}) {self.status_label} : {self.full_name}"]
        if self.message:
            lines.append(self.message.rstrip(TRIM_CHARS))
        if self.stack_trace:
            lines.append(self.stack_trace.rstrip(TRIM_CHARS))
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "prefix": self.prefix,
            "status_label": self.status_label,
            "status": self.state.status.value,
            "full_name": self.full_name,
            "message": self.message.rstrip(TRIM_CHARS) if self.message else None,
            "stack_trace": self.stack_trace.rstrip(TRIM_CHARS) if self.stack_trace else None,
        }


def iter_failures(result: ResultTree) -> Iterator[ResultTree]:
    """Yield the nodes that belong in the errors and failures report.

    A suite that failed in SetUp is reported in place of its children. A
    suite that failed in TearDown, or a theory, is reported together with
    its children. Any other failed suite is only a consequence of its
    children failing and is not reported itself.
    """
    if result.is_suite:
        if result.status == TestStatus.FAILED:
            site = result.site
            if result.suite_type == THEORY_SUITE_TYPE or site in (
                FailureSite.SETUP,
                FailureSite.TEARDOWN,
            ):
                yield result
            if site == FailureSite.SETUP:
                return

        for child in result.children:
            yield from iter_failures(child)

    elif result.status == TestStatus.FAILED:
        yield result


def iter_not_run(result: ResultTree) -> Iterator[ResultTree]:
    """Yield every skipped node that has no children."""
    if result.has_children:
        for child in result.children:
            yield from iter_not_run(child)
    elif result.status == TestStatus.SKIPPED:
        yield result


def number_entries(nodes: Iterator[ResultTree], index: int = 0) -> list[ReportEntry]:
    """Number report nodes in order, starting after ``index``.

    A node with several assertion results expands into one entry per
    assertion, numbered ``n``, ``n-2``, ``n-3`` and so on.
    """
    entries = []
    for node in nodes:
        index += 1
        report_id = str(index)

        if not node.assertion_results:
            entries.append(
                ReportEntry(report_id, node.state, node.full_name, node.message, node.stack_trace)
            )
            continue

        for position, assertion in enumerate(node.assertion_results, start=1):
            prefix = report_id if position == 1 else f"{report_id}-{position}"
            entries.append(
                ReportEntry(prefix, node.state, node.full_name, assertion.message, assertion.stack_trace)
            )
    return entries


def failure_entries(result: ResultTree) -> list[ReportEntry]:
    return number_entries(iter_failures(result))


def not_run_entries(result: ResultTree) -> list[ReportEntry]:
    return number_entries(iter_not_run(result))


def render_entries(entries: list[ReportEntry]) -> str:
    return "\n\n".join(entry.render() for entry in entries)


class ReportEngine:
    """Produces the text reports for a finished run.

    The engine holds no state between calls; every report is numbered from 1.
    """

    def summarize(self, result: ResultTree) -> RunSummary:
        return summarize(result)

    def render_failures(self, result: ResultTree) -> str:
        """Render the errors and failures report."""
        return render_entries(failure_entries(result))

    def render_not_run(self, result: ResultTree) -> str:
        """Render the tests not run report."""
        return render_entries(not_run_entries(result))
