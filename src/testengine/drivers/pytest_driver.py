"""Driver that runs a pytest file or directory in a subprocess.

The driver asks pytest for a JUnit XML report and converts it into a
ResultTree, so pytest itself stays an external collaborator. When a filter
is given, the container is collected first and only the tests the filter
accepts are run.
"""

import logging
import os
import re
import shutil
import subprocess
import sys
import tempfile
import time
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional

from testengine.drivers import pytest_select
from testengine.drivers.base import FrameworkDriver
from testengine.drivers.junit import JUnitConverter
from testengine.events import ResultListener, TestFinished, TestStarted
from testengine.exceptions import DriverError
from testengine.filters import TestFilter
from testengine.results.models import ResultState, ResultTree, TestKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300
SELECT_PLUGIN = "testengine_select"

# pytest exit codes
EXIT_OK = 0
EXIT_NO_TESTS_COLLECTED = 5


def node_full_name(node_id: str) -> str:
    """Full name pytest gives a node in its JUnit report.

    ``tests/test_math.py::TestAdd::test_one[2]`` becomes
    ``tests.test_math.TestAdd.test_one[2]``.
    """
    path, bracket, params = node_id.partition("[")
    names = path.split("::")
    names[0] = re.sub(r"\.py$", "", names[0].replace("/", "."))
    names[-1] += bracket + params
    return ".".join(names)


def parse_collected(output: str) -> list[str]:
    """Read node ids from the output of ``pytest --collect-only -q``."""
    node_ids: list[str] = []
    for line in output.splitlines():
        if not line.strip():
            if node_ids:
                break
            continue
        if "::" in line and not line[0].isspace():
            node_ids.append(line.rstrip())
    return node_ids


class PytestDriver(FrameworkDriver):
    """Executes a pytest container and captures its results."""

    def __init__(self, python: Optional[str] = None):
        """Initialize the driver.

        Args:
            python: Interpreter used to run pytest, defaults to the current one
        """
        self.python = python or sys.executable
        self.container: Optional[Path] = None

    def load(self, container: str, options: dict[str, Any]) -> bool:
        path = Path(container)
        if path.is_dir() or (path.is_file() and path.suffix == ".py"):
            self.container = path
            return True

        logger.debug(f"Not a pytest container: {path}")
        return False

    def run(
        self,
        options: dict[str, Any],
        listener: ResultListener,
        test_filter: TestFilter,
    ) -> ResultTree:
        if self.container is None:
            raise DriverError("run() called before a container was loaded")

        timeout_seconds = options.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        working_directory = Path(options.get("work_directory") or Path.cwd())
        env = {**os.environ, **options.get("environment", {})}
        name = self.container.stem or self.container.resolve().name

        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            select = False

            if not test_filter.is_empty:
                try:
                    node_ids = self._collect(options, working_directory, env, timeout_seconds)
                except subprocess.TimeoutExpired:
                    return self._execution_error(
                        name,
                        f"Test collection timed out after {timeout_seconds} seconds",
                        None,
                        float(timeout_seconds),
                        listener,
                    )

                if node_ids is not None:
                    selected = [n for n in node_ids if test_filter.passes(node_full_name(n))]
                    if not selected:
                        logger.debug(f"{name}: no tests pass the filter")
                        return JUnitConverter(listener, test_filter).convert(
                            ET.Element("testsuites"), name
                        )
                    if len(selected) < len(node_ids):
                        env = self._selection_env(tmp, selected, env)
                        select = True

            report_path = tmp / "junit.xml"
            cmd = self._build_command(report_path, options, select)
            logger.debug(f"Running {' '.join(cmd)}")

            start_time = time.time()
            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    cwd=working_directory,
                    timeout=timeout_seconds,
                    env=env,
                )
            except subprocess.TimeoutExpired:
                return self._execution_error(
                    name,
                    f"Test execution timed out after {timeout_seconds} seconds",
                    None,
                    float(timeout_seconds),
                    listener,
                )

            duration = time.time() - start_time

            if not report_path.exists():
                return self._execution_error(
                    name,
                    f"pytest exited with code {completed.returncode} without writing a report",
                    (completed.stderr or completed.stdout).strip() or None,
                    duration,
                    listener,
                )

            try:
                document = ET.parse(report_path).getroot()
            except ET.ParseError as e:
                return self._execution_error(
                    name, f"Could not parse pytest report: {e}", None, duration, listener
                )

        converter = JUnitConverter(listener, test_filter)
        return converter.convert(document, name)

    def unload(self) -> None:
        self.container = None

    def _collect(
        self,
        options: dict[str, Any],
        working_directory: Path,
        env: dict[str, str],
        timeout_seconds: int,
    ) -> Optional[list[str]]:
        """Return the node ids pytest would run, or None if collection failed.

        A failed collection is left for the real run to report.
        """
        cmd = [
            self.python,
            "-m",
            "pytest",
            str(self.container),
            "--collect-only",
            "-q",
            "-p",
            "no:cacheprovider",
        ]
        cmd.extend(options.get("args", []))
        logger.debug(f"Collecting {' '.join(cmd)}")

        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=working_directory,
            timeout=timeout_seconds,
            env=env,
        )
        if completed.returncode not in (EXIT_OK, EXIT_NO_TESTS_COLLECTED):
            logger.warning(f"pytest collection exited with code {completed.returncode}")
            return None

        return parse_collected(completed.stdout)

    def _selection_env(self, tmp: Path, selected: list[str], env: dict[str, str]) -> dict[str, str]:
        """Write the selection plugin and its node ids, and point pytest at them."""
        shutil.copyfile(Path(pytest_select.__file__), tmp / f"{SELECT_PLUGIN}.py")
        selection_file = tmp / "selected.txt"
        selection_file.write_text("\n".join(selected) + "\n", encoding="utf-8")

        python_path = [str(tmp)]
        if env.get("PYTHONPATH"):
            python_path.append(env["PYTHONPATH"])
        return {
            **env,
            "PYTHONPATH": os.pathsep.join(python_path),
            pytest_select.SELECTED_ENV: str(selection_file),
        }

    def _build_command(
        self,
        report_path: Path,
        options: dict[str, Any],
        select: bool = False,
    ) -> list[str]:
        """Build the pytest command line."""
        cmd = [
            self.python,
            "-m",
            "pytest",
            str(self.container),
            f"--junitxml={report_path}",
            "-q",
            "-p",
            "no:cacheprovider",
        ]
        if select:
            cmd.extend(["-p", SELECT_PLUGIN])
        cmd.extend(options.get("args", []))
        return cmd

    def _execution_error(
        self,
        name: str,
        message: str,
        stack_trace: Optional[str],
        duration: float,
        listener: ResultListener,
    ) -> ResultTree:
        """Report a run that produced no results as a single failed case."""
        logger.warning(f"{name}: {message}")

        case_name = f"{name}.<execution>"
        listener.on_test_event(TestStarted(case_name))
        case = ResultTree(
            full_name=case_name,
            kind=TestKind.CASE,
            state=ResultState.ERROR,
            message=message,
            stack_trace=stack_trace,
            duration=duration,
        )
        listener.on_test_event(TestFinished(case))

        root = ResultTree(
            full_name=name,
            kind=TestKind.SUITE,
            state=ResultState.CHILD_FAILURE,
            children=[case],
            suite_type="Assembly",
            duration=duration,
        )
        listener.on_test_event(TestFinished(root))
        return root
