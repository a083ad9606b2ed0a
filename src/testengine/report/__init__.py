"""Text, console and HTML reports for a finished run."""

from testengine.report.engine import ReportEngine, ReportEntry
from testengine.report.generator import ReportGenerator
from testengine.report.text_ui import TextUI

__all__ = ["ReportEngine", "ReportEntry", "ReportGenerator", "TextUI"]
