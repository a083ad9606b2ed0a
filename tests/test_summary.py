"""Tests for run summaries."""

from datetime import datetime

import pytest

from testengine.results.models import (
    AssertionResult,
    ResultState,
    ResultTree,
    TestKind,
)
from testengine.results.summary import iter_cases, summarize


def case(name, state=ResultState.SUCCESS, **kwargs):
    return ResultTree(full_name=name, state=state, **kwargs)


def suite(name, children, state=ResultState.SUCCESS, **kwargs):
    return ResultTree(full_name=name, kind=TestKind.SUITE, state=state, children=children, **kwargs)


@pytest.fixture
def mixed_tree():
    """A tree with one case of every classification."""
    return suite(
        "Assembly",
        [
            suite(
                "Fixture",
                [
                    case("Fixture.pass1"),
                    case("Fixture.pass2"),
                    case("Fixture.failure", ResultState.FAILURE),
                    case("Fixture.error", ResultState.ERROR),
                    case("Fixture.cancelled", ResultState.CANCELLED),
                    case("Fixture.invalid", ResultState.NOT_RUNNABLE),
                ],
                ResultState.CHILD_FAILURE,
            ),
            suite(
                "Other",
                [
                    case("Other.ignored", ResultState.IGNORED),
                    case("Other.explicit", ResultState.EXPLICIT),
                    case("Other.skipped", ResultState.SKIPPED),
                    case("Other.inconclusive", ResultState.INCONCLUSIVE),
                ],
                ResultState.IGNORED,
            ),
        ],
        ResultState.CHILD_FAILURE,
        start_time=datetime(2024, 1, 1, 12, 0, 0),
        end_time=datetime(2024, 1, 1, 12, 0, 3),
    )


class TestSummarize:
    """Tests for summarize."""

    def test_counts(self, mixed_tree):
        """Every case lands in exactly one counter."""
        summary = summarize(mixed_tree)

        assert summary.pass_count == 2
        assert summary.failure_count == 1
        assert summary.error_count == 2
        assert summary.invalid_count == 1
        assert summary.ignore_count == 1
        assert summary.explicit_count == 1
        assert summary.skip_count == 1
        assert summary.inconclusive_count == 1
        assert summary.test_count == 10

    def test_counts_are_consistent(self, mixed_tree):
        """Totals equal the sum of their parts."""
        s = summarize(mixed_tree)

        assert s.test_count == s.pass_count + s.failed_count + s.inconclusive_count + s.total_skip_count
        assert s.failed_count == s.failure_count + s.error_count + s.invalid_count
        assert s.total_skip_count == s.ignore_count + s.explicit_count + s.skip_count

    def test_overall_state_and_times(self, mixed_tree):
        """The overall state and time span come from the root."""
        summary = summarize(mixed_tree)

        assert summary.overall == ResultState.CHILD_FAILURE
        assert summary.start_time == datetime(2024, 1, 1, 12, 0, 0)
        assert summary.duration == 3.0

    def test_suites_are_not_tests(self):
        """Suites, even empty ones, are not counted."""
        tree = suite("A", [suite("Empty", []), case("A.one")])
        assert summarize(tree).test_count == 1

    def test_multiple_assertions_count_once(self):
        """A case with several assertion results is still one test."""
        tree = suite(
            "A",
            [
                case(
                    "A.soft",
                    ResultState.FAILURE,
                    assertion_results=[AssertionResult("one"), AssertionResult("two")],
                )
            ],
            ResultState.CHILD_FAILURE,
        )
        summary = summarize(tree)
        assert summary.test_count == 1
        assert summary.failure_count == 1

    def test_single_case_root(self):
        """A bare case can be summarized."""
        summary = summarize(case("only", ResultState.IGNORED))
        assert summary.test_count == 1
        assert summary.ignore_count == 1

    def test_missing_times(self):
        """Without timing information the duration is zero."""
        summary = summarize(suite("A", [case("A.one")]))
        assert summary.duration == 0.0

    def test_only_end_time(self):
        """A missing start time falls back to the end time."""
        end = datetime(2024, 1, 1, 12, 0, 0)
        summary = summarize(suite("A", [], end_time=end))
        assert summary.start_time == end
        assert summary.end_time == end


class TestIterCases:
    """Tests for iter_cases."""

    def test_pre_order(self, mixed_tree):
        """Cases are yielded in tree order."""
        names = [c.full_name for c in iter_cases(mixed_tree)]
        assert names[0] == "Fixture.pass1"
        assert names[-1] == "Other.inconclusive"
        assert len(names) == 10
