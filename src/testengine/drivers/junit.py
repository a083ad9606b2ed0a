"""Driver and converter for JUnit XML reports."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from testengine.drivers.base import FrameworkDriver
from testengine.events import ResultListener, TestFinished, TestOutput, TestStarted
from testengine.exceptions import DriverError
from testengine.filters import EmptyFilter, TestFilter
from testengine.results.combiner import aggregate_state
from testengine.results.models import (
    AssertionResult,
    FailureSite,
    ResultState,
    ResultTree,
    TestKind,
    TestStatus,
)

logger = logging.getLogger(__name__)

_SKIP_LABELS = {
    "ignore": "Ignored",
    "ignored": "Ignored",
    "explicit": "Explicit",
}


class JUnitConverter:
    """Converts a parsed JUnit XML document into a ResultTree.

    The converter notifies the listener as it walks the document, so a
    replayed report produces the same event stream a live run would.
    """

    def __init__(
        self,
        listener: Optional[ResultListener] = None,
        test_filter: Optional[TestFilter] = None,
    ):
        self.listener = listener
        self.test_filter = test_filter or EmptyFilter()

    def convert(self, document: ET.Element, name: str) -> ResultTree:
        """Convert a ``<testsuites>`` or ``<testsuite>`` root element.

        Args:
            document: Root element of the report
            name: Full name given to the container's root suite

        Returns:
            An "Assembly" suite holding one suite per ``<testsuite>``
        """
        if document.tag == "testsuite":
            suite_elements = [document]
        else:
            suite_elements = document.findall("testsuite")

        suites = [self._convert_suite(element) for element in suite_elements]
        start_times = [s.start_time for s in suites if s.start_time is not None]
        end_times = [s.end_time for s in suites if s.end_time is not None]

        root = ResultTree(
            full_name=name,
            kind=TestKind.SUITE,
            state=aggregate_state(suites),
            children=suites,
            suite_type="Assembly",
            start_time=min(start_times) if start_times else None,
            end_time=max(end_times) if end_times else None,
            duration=_float(document.get("time")) or sum(s.duration for s in suites),
        )
        self._notify(TestFinished(root))
        return root

    def _convert_suite(self, element: ET.Element) -> ResultTree:
        """Convert one ``<testsuite>``, grouping its cases by class name."""
        children: list = []
        fixtures: dict[str, list[ResultTree]] = {}

        for child_element in element:
            if child_element.tag == "testsuite":
                children.append(self._convert_suite(child_element))
                continue
            if child_element.tag != "testcase":
                continue
            case = self._convert_case(child_element)
            if case is None:
                continue
            classname = child_element.get("classname", "")
            if not classname:
                children.append(case)
                continue
            if classname not in fixtures:
                fixtures[classname] = []
                # Placeholder keeps the fixture at its first-seen position
                children.append(classname)
            fixtures[classname].append(case)

        nodes = [
            self._build_fixture(child, fixtures[child]) if isinstance(child, str) else child
            for child in children
        ]

        duration = _float(element.get("time"))
        start_time = _timestamp(element.get("timestamp"))
        end_time = start_time + timedelta(seconds=duration) if start_time else None

        suite = ResultTree(
            full_name=element.get("name", "testsuite"),
            kind=TestKind.SUITE,
            state=aggregate_state(nodes),
            output=_system_output(element),
            children=nodes,
            suite_type="TestSuite",
            start_time=start_time,
            end_time=end_time,
            duration=duration,
        )
        self._notify(TestFinished(suite))
        return suite

    def _build_fixture(self, classname: str, cases: list[ResultTree]) -> ResultTree:
        fixture = ResultTree(
            full_name=classname,
            kind=TestKind.SUITE,
            state=aggregate_state(cases),
            children=cases,
            suite_type="TestFixture",
            duration=sum(c.duration for c in cases),
        )
        self._notify(TestFinished(fixture))
        return fixture

    def _convert_case(self, element: ET.Element) -> Optional[ResultTree]:
        """Convert one ``<testcase>``, or return None if the filter rejects it."""
        classname = element.get("classname", "")
        name = element.get("name", "")
        full_name = f"{classname}.{name}" if classname else name

        if not self.test_filter.passes(full_name):
            return None

        self._notify(TestStarted(full_name))

        problems = [child for child in element if child.tag in ("error", "failure")]
        skipped = element.find("skipped")

        message = None
        stack_trace = None
        assertions: list[AssertionResult] = []

        if problems:
            state = _problem_state(problems[0])
            message = problems[0].get("message")
            stack_trace = _text(problems[0])
            if len(problems) > 1:
                assertions = [AssertionResult(p.get("message"), _text(p)) for p in problems]
        elif skipped is not None:
            label = _SKIP_LABELS.get((skipped.get("type") or "").lower())
            state = ResultState(TestStatus.SKIPPED, label)
            message = skipped.get("message") or _text(skipped)
        else:
            state = ResultState.SUCCESS

        output = _system_output(element)
        if output:
            self._notify(TestOutput(full_name, "Out", output))

        case = ResultTree(
            full_name=full_name,
            kind=TestKind.CASE,
            state=state,
            message=message or None,
            stack_trace=stack_trace,
            output=output,
            assertion_results=assertions,
            duration=_float(element.get("time")),
        )
        self._notify(TestFinished(case))
        return case

    def _notify(self, event) -> None:
        if self.listener is not None:
            self.listener.on_test_event(event)


class JUnitXmlDriver(FrameworkDriver):
    """Replays an existing JUnit XML report as a test container."""

    def __init__(self):
        self.container: Optional[Path] = None
        self._document: Optional[ET.Element] = None

    def load(self, container: str, options: dict[str, Any]) -> bool:
        path = Path(container)
        if not path.is_file():
            logger.debug(f"JUnit report not found: {path}")
            return False

        try:
            document = ET.parse(path).getroot()
        except ET.ParseError as e:
            logger.warning(f"Could not parse JUnit report {path}: {e}")
            return False

        if document.tag not in ("testsuites", "testsuite"):
            logger.warning(f"{path} is not a JUnit report (root element <{document.tag}>)")
            return False

        self.container = path
        self._document = document
        return True

    def run(
        self,
        options: dict[str, Any],
        listener: ResultListener,
        test_filter: TestFilter,
    ) -> ResultTree:
        if self._document is None or self.container is None:
            raise DriverError("run() called before a container was loaded")

        converter = JUnitConverter(listener, test_filter)
        return converter.convert(self._document, self.container.stem)

    def unload(self) -> None:
        self.container = None
        self._document = None


def _problem_state(element: ET.Element) -> ResultState:
    """State for a case whose first problem element is ``element``."""
    if element.tag == "failure":
        return ResultState.FAILURE

    message = (element.get("message") or "").lower()
    if "failed on setup" in message:
        return ResultState.ERROR.with_site(FailureSite.SETUP)
    if "failed on teardown" in message:
        return ResultState.ERROR.with_site(FailureSite.TEARDOWN)
    return ResultState.ERROR


def _system_output(element: ET.Element) -> str:
    parts = []
    for tag in ("system-out", "system-err"):
        child = element.find(tag)
        if child is not None and child.text:
            parts.append(child.text)
    return "".join(parts)


def _text(element: ET.Element) -> Optional[str]:
    text = (element.text or "").strip("\r\n")
    return text or None


def _float(value: Optional[str]) -> float:
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
