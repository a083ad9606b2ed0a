"""Console presentation of a test run using rich."""

from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from testengine import __version__
from testengine.events import TestEvent, TestFinished, TestOutput
from testengine.report.engine import ReportEntry, failure_entries, not_run_entries
from testengine.results.models import ResultTree, RunSummary, TestStatus

STYLE_SECTION = "bold cyan"
STYLE_LABEL = "bold"
STYLE_VALUE = "bold white"
STYLE_PASS = "green"
STYLE_FAILURE = "red"
STYLE_ERROR = "bold red"
STYLE_WARNING = "yellow"
STYLE_OUTPUT = "default"


class TextUI:
    """Writes run information, live test output and reports to a console.

    Also acts as the result listener for a run, echoing test labels and
    captured output as events arrive.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        labels: str = "ON",
        stop_on_error: bool = False,
    ):
        self.console = console or Console(highlight=False)
        self.labels = labels.upper()
        self.stop_on_error = stop_on_error

        self._current_label: Optional[str] = None
        self._test_created_output = False

    def display_header(self) -> None:
        self.console.print(
            Panel.fit(
                "[bold blue]TestEngine[/bold blue] - test execution and reporting",
                subtitle=f"v{__version__}",
            )
        )
        self.console.print()

    def display_test_files(self, test_files: Iterable[str]) -> None:
        self._write_section_header("Test Files")
        for test_file in test_files:
            self.console.print("    " + test_file, markup=False)
        self.console.print()

    def display_test_filters(self, tests: Iterable[str], where: Optional[str]) -> None:
        tests = list(tests)
        if not tests and not where:
            return

        self._write_section_header("Test Filters")
        for name in tests:
            self._write_label_line("    Test: ", name)
        if where:
            self._write_label_line("    Where: ", where.strip())
        self.console.print()

    def display_run_settings(self, settings: dict[str, object]) -> None:
        self._write_section_header("Run Settings")
        for label, value in settings.items():
            self._write_label_line(f"    {label}: ", value)
        self.console.print()

    def on_test_event(self, event: TestEvent) -> None:
        """Echo test labels and output while the run is in progress."""
        if isinstance(event, TestOutput):
            if self.labels in ("ON", "ALL") and event.test_name:
                self._write_test_label(event.test_name)
            style = STYLE_ERROR if event.stream == "Error" else STYLE_OUTPUT
            self._write_output(event.text, style)

        elif isinstance(event, TestFinished):
            result = event.result
            if not result.is_suite and self.labels == "ALL":
                self._write_test_label(result.full_name)

    def display_summary_report(self, summary: RunSummary) -> None:
        status = summary.overall.status
        overall = summary.overall.display_label
        if status == TestStatus.SKIPPED:
            overall = "Warning"

        overall_style = {
            TestStatus.PASSED: STYLE_PASS,
            TestStatus.FAILED: STYLE_FAILURE,
            TestStatus.SKIPPED: STYLE_WARNING,
        }.get(status, STYLE_OUTPUT)

        if self._test_created_output:
            self.console.print()
            self._test_created_output = False

        self._write_section_header("Test Run Summary")
        self._write_label_line("  Overall result: ", overall, overall_style)

        line = Text()
        self._append_count(line, "  Test Count: ", summary.test_count)
        self._append_count(line, ", Passed: ", summary.pass_count)
        self._append_count(line, ", Failed: ", summary.failed_count, STYLE_FAILURE)
        self._append_count(line, ", Inconclusive: ", summary.inconclusive_count)
        self._append_count(line, ", Skipped: ", summary.total_skip_count)
        self.console.print(line)

        if summary.failed_count > 0:
            line = Text()
            self._append_count(line, "    Failed Tests - Failures: ", summary.failure_count, STYLE_FAILURE)
            self._append_count(line, ", Errors: ", summary.error_count, STYLE_ERROR)
            self._append_count(line, ", Invalid: ", summary.invalid_count, STYLE_ERROR)
            self.console.print(line)

        if summary.total_skip_count > 0:
            line = Text()
            self._append_count(line, "    Skipped Tests - Ignored: ", summary.ignore_count, STYLE_WARNING)
            self._append_count(line, ", Explicit: ", summary.explicit_count)
            self._append_count(line, ", Other: ", summary.skip_count)
            self.console.print(line)

        self._write_label_line("  Start time: ", summary.start_time.strftime("%Y-%m-%d %H:%M:%S"))
        self._write_label_line("    End time: ", summary.end_time.strftime("%Y-%m-%d %H:%M:%S"))
        self._write_label_line("    Duration: ", f"{summary.duration:.3f} seconds")
        self.console.print()

    def display_errors_and_failures_report(self, result: ResultTree) -> None:
        self._write_section_header("Errors and Failures")
        for entry in failure_entries(result):
            self._write_entry(entry)
        self.console.print()

        if self.stop_on_error:
            self.console.print("Execution terminated after first error", style=STYLE_FAILURE)
            self.console.print()

    def display_not_run_report(self, result: ResultTree) -> None:
        self._write_section_header("Tests Not Run")
        for entry in not_run_entries(result):
            self._write_entry(entry)
        self.console.print()

    def display_warning(self, text: str) -> None:
        self.console.print(text, style=STYLE_WARNING, markup=False)

    def display_error(self, text: str) -> None:
        self.console.print(text, style=STYLE_ERROR, markup=False)

    def display_errors(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.display_error(message)

    def _write_entry(self, entry: ReportEntry) -> None:
        status = entry.state.status
        if status == TestStatus.FAILED:
            style = STYLE_FAILURE
        elif status == TestStatus.SKIPPED:
            style = STYLE_WARNING if entry.state.label == "Ignored" else STYLE_OUTPUT
        elif status == TestStatus.PASSED:
            style = STYLE_PASS
        else:
            style = STYLE_OUTPUT

        self.console.print()
        self.console.print(entry.render(), style=style, markup=False)

    def _write_section_header(self, text: str) -> None:
        self.console.print(text, style=STYLE_SECTION, markup=False)

    def _write_label_line(self, label: str, value: object, style: str = STYLE_VALUE) -> None:
        line = Text(label, style=STYLE_LABEL)
        line.append(str(value), style=style)
        self.console.print(line)

    def _append_count(self, line: Text, label: str, count: int, style: Optional[str] = None) -> None:
        line.append(label, style=STYLE_LABEL)
        line.append(str(count), style=style if style and count > 0 else STYLE_VALUE)

    def _write_test_label(self, label: str) -> None:
        if label != self._current_label:
            self.console.print("=> " + label, style=STYLE_SECTION, markup=False)
            self._test_created_output = True
            self._current_label = label

    def _write_output(self, text: str, style: str) -> None:
        self.console.print(text, style=style, markup=False, end="" if text.endswith("\n") else "\n")
        self._test_created_output = True
