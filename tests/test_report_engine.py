"""Tests for the failure and not-run reports."""

import pytest

from testengine.report.engine import (
    ReportEngine,
    ReportEntry,
    failure_entries,
    iter_failures,
    iter_not_run,
    not_run_entries,
)
from testengine.results.models import (
    AssertionResult,
    FailureSite,
    ResultState,
    ResultTree,
    TestKind,
)


def case(name, state=ResultState.SUCCESS, **kwargs):
    return ResultTree(full_name=name, state=state, **kwargs)


def suite(name, children, state=ResultState.CHILD_FAILURE, **kwargs):
    return ResultTree(full_name=name, kind=TestKind.SUITE, state=state, children=children, **kwargs)


@pytest.fixture
def engine():
    return ReportEngine()


class TestFailureTraversal:
    """Tests for which nodes appear in the failures report."""

    def test_ordinary_suite_failure_reports_children_only(self):
        """A suite that failed because of its children is not reported itself."""
        tree = suite(
            "A",
            [
                case("A.ok"),
                case("A.bad", ResultState.FAILURE, message="expected 1"),
                case("A.worse", ResultState.ERROR, message="KeyError"),
            ],
        )
        assert [n.full_name for n in iter_failures(tree)] == ["A.bad", "A.worse"]

    def test_setup_failure_suppresses_children(self):
        """A SetUp failure is reported instead of the suite's children."""
        tree = suite(
            "Root",
            [
                suite(
                    "Root.Fixture",
                    [case("Root.Fixture.one", ResultState.FAILURE), case("Root.Fixture.two", ResultState.FAILURE)],
                    ResultState.ERROR.with_site(FailureSite.SETUP),
                ),
                case("Root.other", ResultState.FAILURE),
            ],
        )
        assert [n.full_name for n in iter_failures(tree)] == ["Root.Fixture", "Root.other"]

    def test_teardown_failure_reports_suite_and_children(self):
        """A TearDown failure is reported along with the failing children."""
        tree = suite(
            "Fixture",
            [case("Fixture.ok"), case("Fixture.bad", ResultState.FAILURE)],
            ResultState.ERROR.with_site(FailureSite.TEARDOWN),
        )
        assert [n.full_name for n in iter_failures(tree)] == ["Fixture", "Fixture.bad"]

    def test_theory_failure_reports_suite_and_children(self):
        """A failed theory is reported along with its failing cases."""
        tree = suite(
            "Fixture",
            [
                suite(
                    "Fixture.Theory",
                    [case("Fixture.Theory(1)"), case("Fixture.Theory(2)", ResultState.FAILURE)],
                    ResultState.FAILURE,
                    suite_type="Theory",
                )
            ],
        )
        assert [n.full_name for n in iter_failures(tree)] == ["Fixture.Theory", "Fixture.Theory(2)"]

    def test_failed_case_reported_regardless_of_site(self):
        """Failed cases are always reported, even with a SetUp site."""
        tree = suite("A", [case("A.x", ResultState.ERROR.with_site(FailureSite.SETUP))])
        assert [n.full_name for n in iter_failures(tree)] == ["A.x"]

    def test_passed_and_skipped_not_reported(self):
        """Only failures are reported."""
        tree = suite(
            "A",
            [case("A.ok"), case("A.skip", ResultState.IGNORED), case("A.inc", ResultState.INCONCLUSIVE)],
            ResultState.IGNORED,
        )
        assert list(iter_failures(tree)) == []

    def test_nested_order_is_pre_order(self):
        """Nodes come out in depth-first order."""
        tree = suite(
            "R",
            [
                suite("R.A", [case("R.A.1", ResultState.FAILURE), case("R.A.2", ResultState.FAILURE)]),
                case("R.b", ResultState.FAILURE),
                suite("R.C", [case("R.C.1", ResultState.FAILURE)]),
            ],
        )
        assert [n.full_name for n in iter_failures(tree)] == ["R.A.1", "R.A.2", "R.b", "R.C.1"]


class TestNotRunTraversal:
    """Tests for which nodes appear in the not-run report."""

    def test_skipped_leaves_only(self):
        """Skipped leaves are found through every suite level."""
        tree = suite(
            "R",
            [
                suite(
                    "R.A",
                    [case("R.A.ignored", ResultState.IGNORED), case("R.A.ok")],
                    ResultState.IGNORED,
                ),
                case("R.explicit", ResultState.EXPLICIT),
                case("R.failed", ResultState.FAILURE),
            ],
        )
        assert [n.full_name for n in iter_not_run(tree)] == ["R.A.ignored", "R.explicit"]

    def test_skipped_suite_with_children_not_reported(self):
        """A skipped suite is never reported itself, only its leaves."""
        tree = suite("R", [case("R.one", ResultState.IGNORED)], ResultState.IGNORED)
        assert [n.full_name for n in iter_not_run(tree)] == ["R.one"]

    def test_childless_skipped_suite_is_a_leaf(self):
        """A skipped suite without children counts as a leaf."""
        tree = suite("R", [suite("R.Empty", [], ResultState.IGNORED)], ResultState.IGNORED)
        assert [n.full_name for n in iter_not_run(tree)] == ["R.Empty"]


class TestNumbering:
    """Tests for report indices."""

    def test_sequential_one_based(self):
        """Entries are numbered from 1 in traversal order."""
        tree = suite("A", [case("A.1", ResultState.FAILURE), case("A.2", ResultState.FAILURE)])
        assert [e.prefix for e in failure_entries(tree)] == ["1", "2"]

    def test_multiple_assertions(self):
        """Several assertions share an index: n, n-2, n-3."""
        tree = suite(
            "A",
            [
                case("A.first", ResultState.FAILURE),
                case(
                    "A.soft",
                    ResultState.FAILURE,
                    assertion_results=[
                        AssertionResult("one", "st1"),
                        AssertionResult("two", "st2"),
                        AssertionResult("three", "st3"),
                    ],
                ),
                case("A.last", ResultState.FAILURE),
            ],
        )
        entries = failure_entries(tree)

        assert [e.prefix for e in entries] == ["1", "2", "2-2", "2-3", "3"]
        assert [e.message for e in entries[1:4]] == ["one", "two", "three"]
        assert entries[3].stack_trace == "st3"
        assert all(e.full_name == "A.soft" for e in entries[1:4])

    def test_single_assertion(self):
        """A single assertion result replaces the top-level message."""
        tree = case(
            "A.soft",
            ResultState.FAILURE,
            message="summary",
            assertion_results=[AssertionResult("only one")],
        )
        entries = failure_entries(tree)
        assert [(e.prefix, e.message) for e in entries] == [("1", "only one")]

    def test_reports_numbered_independently(self):
        """The not-run report starts again at 1."""
        tree = suite(
            "A",
            [
                case("A.f1", ResultState.FAILURE),
                case("A.f2", ResultState.FAILURE),
                case("A.s1", ResultState.IGNORED),
            ],
        )
        assert [e.prefix for e in failure_entries(tree)] == ["1", "2"]
        assert [e.prefix for e in not_run_entries(tree)] == ["1"]

    def test_repeated_calls_restart(self, engine):
        """Rendering the same report twice gives identical text."""
        tree = suite("A", [case("A.f1", ResultState.FAILURE)])
        assert engine.render_failures(tree) == engine.render_failures(tree)
        assert engine.render_failures(tree).startswith("1) ")


class TestReportEntry:
    """Tests for entry rendering."""

    def test_plain_status(self):
        """Without a label the status name is shown."""
        entry = ReportEntry("1", ResultState.FAILURE, "A.b")
        assert entry.render() == "1) Failed : A.b"

    def test_label(self):
        """A label replaces the status name."""
        entry = ReportEntry("3", ResultState.IGNORED, "A.b", "not today")
        assert entry.render() == "3) Ignored : A.b\nnot today"

    def test_setup_site(self):
        """SetUp failures are prefixed with the site."""
        entry = ReportEntry("1", ResultState.ERROR.with_site(FailureSite.SETUP), "Fixture")
        assert entry.status_label == "SetUp Error"

    def test_teardown_site(self):
        """TearDown failures are prefixed with the site."""
        entry = ReportEntry("1", ResultState.FAILURE.with_site(FailureSite.TEARDOWN), "Fixture")
        assert entry.status_label == "TearDown Failed"

    def test_child_site_not_prefixed(self):
        """Other sites are not shown."""
        entry = ReportEntry("1", ResultState.CHILD_FAILURE, "Fixture")
        assert entry.status_label == "Failed"

    def test_message_and_stack_trace_trimmed(self):
        """Trailing newlines are removed from message and stack trace."""
        entry = ReportEntry("1", ResultState.ERROR, "A.b", "boom\r\n\n", "  at A.b()\n")
        assert entry.render() == "1) Error : A.b\nboom\n  at A.b()"

    def test_empty_message_omitted(self):
        """Empty diagnostics produce no lines."""
        entry = ReportEntry("1", ResultState.FAILURE, "A.b", "", None)
        assert entry.render() == "1) Failed : A.b"


class TestReportEngine:
    """Tests for the ReportEngine facade."""

    def test_render_failures(self, engine):
        """Entries are separated by a blank line."""
        tree = suite(
            "A",
            [
                case("A.one", ResultState.FAILURE, message="expected 1\n", stack_trace="line 3"),
                case("A.two", ResultState.ERROR.with_site(FailureSite.TEARDOWN)),
            ],
        )
        assert engine.render_failures(tree) == (
            "1) Failed : A.one\nexpected 1\nline 3\n\n2) TearDown Error : A.two"
        )

    def test_render_not_run(self, engine):
        """Skipped leaves are rendered with their labels."""
        tree = suite(
            "A",
            [case("A.one", ResultState.IGNORED, message="later"), case("A.two", ResultState.EXPLICIT)],
            ResultState.IGNORED,
        )
        assert engine.render_not_run(tree) == "1) Ignored : A.one\nlater\n\n2) Explicit : A.two"

    def test_render_nothing(self, engine):
        """A clean run renders empty reports."""
        tree = suite("A", [case("A.one")], ResultState.SUCCESS)
        assert engine.render_failures(tree) == ""
        assert engine.render_not_run(tree) == ""

    def test_summarize(self, engine):
        """summarize delegates to the summary computation."""
        tree = suite("A", [case("A.one"), case("A.two", ResultState.FAILURE)])
        summary = engine.summarize(tree)
        assert summary.test_count == 2
        assert summary.failed_count == 1
