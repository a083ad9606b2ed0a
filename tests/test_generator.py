"""Tests for HTML report generation."""

from datetime import datetime

import pytest

from testengine.config import get_default_config
from testengine.report.generator import ReportGenerator
from testengine.results.models import ResultState, ResultTree, TestKind
from testengine.results.summary import summarize


@pytest.fixture
def result():
    return ResultTree(
        full_name="Run",
        kind=TestKind.SUITE,
        state=ResultState.CHILD_FAILURE,
        start_time=datetime(2024, 1, 1, 9, 0, 0),
        end_time=datetime(2024, 1, 1, 9, 0, 1),
        children=[
            ResultTree(full_name="Run.ok"),
            ResultTree(full_name="Run.bad", state=ResultState.FAILURE, message="<expected> 1"),
            ResultTree(full_name="Run.later", state=ResultState.IGNORED, message="not today"),
        ],
    )


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_generate_writes_file(self, tmp_path, result):
        """The report is written to the configured location."""
        config = get_default_config()
        config.report.output_dir = "out"
        config.report.filename = "run.html"

        path = ReportGenerator(config, tmp_path).generate(result, summarize(result))

        assert path == tmp_path / "out" / "run.html"
        assert path.exists()

    def test_report_content(self, tmp_path, result):
        """Summary, failures and skipped tests appear in the report."""
        config = get_default_config()
        config.report.title = "Nightly"

        path = ReportGenerator(config, tmp_path).generate(result, summarize(result))
        html = path.read_text(encoding="utf-8")

        assert "<title>Nightly</title>" in html
        assert "1) Failed</strong> : Run.bad" in html
        assert "1) Ignored</strong> : Run.later" in html
        assert "33.3%" in html

    def test_messages_are_escaped(self, tmp_path, result):
        """Test messages are HTML-escaped."""
        path = ReportGenerator(get_default_config(), tmp_path).generate(result, summarize(result))
        html = path.read_text(encoding="utf-8")

        assert "&lt;expected&gt; 1" in html
        assert "<expected>" not in html


class TestFormatters:
    """Tests for template filters."""

    def test_duration_format(self):
        """Durations are shown in the most readable unit."""
        assert ReportGenerator._format_duration(0.25) == "250ms"
        assert ReportGenerator._format_duration(1.5) == "1.50s"
        assert ReportGenerator._format_duration(90) == "1m 30.0s"

    def test_datetime_format(self):
        """Datetimes and ISO strings are formatted alike."""
        moment = datetime(2024, 5, 6, 7, 8, 9)
        assert ReportGenerator._format_datetime(moment) == "2024-05-06 07:08:09"
        assert ReportGenerator._format_datetime(moment.isoformat()) == "2024-05-06 07:08:09"
        assert ReportGenerator._format_datetime("not a date") == "not a date"

    def test_percentage(self):
        """Percentages have one decimal place."""
        assert ReportGenerator._format_percentage(50) == "50.0%"
