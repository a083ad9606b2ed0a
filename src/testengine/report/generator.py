"""HTML report generation using Jinja2 templates."""

from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from testengine.config import EngineConfig
from testengine.report.engine import failure_entries, not_run_entries
from testengine.results.models import ResultTree, RunSummary


class ReportGenerator:
    """Generates a static HTML report from a finished run."""

    def __init__(self, config: EngineConfig, base_dir: Path):
        """Initialize the report generator.

        Args:
            config: Engine configuration
            base_dir: Directory that relative report paths are resolved against
        """
        self.config = config
        self.base_dir = base_dir

        template_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

        self.env.filters["duration_format"] = self._format_duration
        self.env.filters["datetime_format"] = self._format_datetime
        self.env.filters["percentage"] = self._format_percentage

    def generate(self, result: ResultTree, summary: RunSummary) -> Path:
        """Render the report and write it to the configured location.

        Returns:
            Path to the generated report file
        """
        context = self._prepare_context(result, summary)

        template = self.env.get_template("report.html")
        html_content = template.render(**context)

        output_dir = self.base_dir / self.config.report.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        report_path = output_dir / self.config.report.filename
        report_path.write_text(html_content, encoding="utf-8")

        return report_path

    def _prepare_context(self, result: ResultTree, summary: RunSummary) -> dict[str, Any]:
        total = summary.test_count
        pass_rate = (summary.pass_count / total * 100) if total > 0 else 0

        return {
            "title": self.config.report.title,
            "generated_at": datetime.now(),
            "root_name": result.full_name,
            "overall": summary.overall.display_label,
            "overall_status": summary.overall.status.value.lower(),
            "summary": summary,
            "pass_rate": pass_rate,
            "failures": [e.to_dict() for e in failure_entries(result)],
            "not_run": [e.to_dict() for e in not_run_entries(result)],
        }

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Format a duration in seconds as a human-readable string."""
        ms = int(seconds * 1000)
        if ms < 1000:
            return f"{ms}ms"
        elif ms < 60000:
            return f"{ms / 1000:.2f}s"
        else:
            minutes = ms // 60000
            rest = (ms % 60000) / 1000
            return f"{minutes}m {rest:.1f}s"

    @staticmethod
    def _format_datetime(dt: Any) -> str:
        if isinstance(dt, str):
            try:
                dt = datetime.fromisoformat(dt)
            except ValueError:
                return dt

        if isinstance(dt, datetime):
            return dt.strftime("%Y-%m-%d %H:%M:%S")

        return str(dt)

    @staticmethod
    def _format_percentage(value: float) -> str:
        return f"{value:.1f}%"
