"""Command-line interface for TestEngine."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from testengine import __version__
from testengine.config import EngineConfig, create_example_config, get_default_config


console = Console(highlight=False)


def configure_logging(verbose: bool) -> None:
    """Send library log records to the console through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def load_config(config_path: Optional[str]) -> tuple[EngineConfig, Path]:
    """Load the configuration, falling back to defaults when none exists."""
    if config_path:
        return EngineConfig.from_file(config_path), Path(config_path).resolve().parent

    try:
        return EngineConfig.find_and_load(), Path.cwd()
    except FileNotFoundError:
        return get_default_config(), Path.cwd()


def display_results(ui, result, summary) -> bool:
    """Print the summary and whichever reports have entries.

    Returns:
        True if the run failed, including suites that failed in SetUp or
        TearDown while all of their test cases passed
    """
    from testengine.report.engine import failure_entries, not_run_entries
    from testengine.results.models import TestStatus

    ui.display_summary_report(summary)

    failed = summary.overall.status == TestStatus.FAILED or bool(failure_entries(result))
    if failed:
        ui.display_errors_and_failures_report(result)
    if not_run_entries(result):
        ui.display_not_run_report(result)
    return failed


@click.group()
@click.version_option(version=__version__, prog_name="testengine")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: testengine.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """TestEngine - run test containers and report their results.

    Loads each container through the driver for its format, merges the
    results and prints a summary, failures and tests not run.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config
    configure_logging(verbose)


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="testengine.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
def init(output: str, force: bool) -> None:
    """Initialize a new TestEngine configuration file."""
    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {output_path}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Created configuration file:[/green] {output_path}")
    console.print("\nNext steps:")
    console.print("  1. List your test containers in the configuration file")
    console.print("  2. Run [bold]testengine run[/bold] to execute them")


@main.command()
@click.argument("containers", nargs=-1)
@click.option("--test", "tests", multiple=True, help="Run only the named test or suite (repeatable)")
@click.option("--where", help="Run only tests whose full name matches this glob pattern")
@click.option(
    "--labels",
    type=click.Choice(["OFF", "ON", "ALL"], case_sensitive=False),
    help="Show test names: OFF, ON (when a test writes output) or ALL",
)
@click.option("--stop-on-error", is_flag=True, help="Note that the run stopped at the first error")
@click.option("--result", "result_file", type=click.Path(), help="Write the result tree as JSON to this file")
@click.option("--report/--no-report", default=True, help="Generate HTML report after tests")
@click.pass_context
def run(
    ctx: click.Context,
    containers: tuple[str, ...],
    tests: tuple[str, ...],
    where: Optional[str],
    labels: Optional[str],
    stop_on_error: bool,
    result_file: Optional[str],
    report: bool,
) -> None:
    """Load and run test containers, then report the results."""
    try:
        config, base_dir = load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValidationError, json.JSONDecodeError) as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        sys.exit(2)

    if containers:
        config.containers = list(containers)
    if tests:
        config.filters.tests = list(tests)
    if where:
        config.filters.where = where
    if labels:
        config.run.labels = labels.upper()
    if stop_on_error:
        config.run.stop_on_error = True
    if result_file:
        config.report.result_file = result_file

    if not config.containers:
        console.print("[red]Error:[/red] no test containers given")
        sys.exit(2)

    from testengine.core.runner import TestRunner
    from testengine.filters import build_filter
    from testengine.report.text_ui import TextUI
    from testengine.results.summary import summarize

    ui = TextUI(console, labels=config.run.labels, stop_on_error=config.run.stop_on_error)
    ui.display_header()
    ui.display_test_files(config.containers)
    ui.display_test_filters(config.filters.tests, config.filters.where)
    paths = config.get_absolute_paths(base_dir)
    ui.display_run_settings(
        {
            "Default timeout": config.run.default_timeout,
            "Work Directory": paths["work_directory"],
            "Labels": config.run.labels,
        }
    )

    runner = TestRunner(
        options=config.runner_options(base_dir),
        driver_options=config.driver_options(),
    )
    test_filter = build_filter(config.filters.tests, config.filters.where)

    with runner:
        all_loaded = runner.load(config.containers)
        for failure in runner.load_failures:
            ui.display_error(f"Unable to load {failure.container}: {failure.reason}")

        result = runner.run(ui, test_filter)

    if result is None:
        ui.display_warning("No tests were run")
        sys.exit(1)

    summary = summarize(result)
    failed = display_results(ui, result, summary)

    if "result_file" in paths:
        paths["result_file"].parent.mkdir(parents=True, exist_ok=True)
        paths["result_file"].write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        console.print(f"[green]Results saved:[/green] {paths['result_file']}")

    if report:
        from testengine.report.generator import ReportGenerator

        try:
            report_path = ReportGenerator(config, base_dir).generate(result, summary)
            console.print(f"[green]Report generated:[/green] {report_path}")
        except OSError as e:
            console.print(f"[red]Error generating report:[/red] {e}")

    if failed or not all_loaded:
        sys.exit(1)


@main.command()
@click.argument("result_file", type=click.Path(exists=True))
def report(result_file: str) -> None:
    """Print the reports for a result tree saved with --result."""
    from testengine.report.text_ui import TextUI
    from testengine.results.models import ResultTree
    from testengine.results.summary import summarize

    with open(result_file) as f:
        result = ResultTree.from_dict(json.load(f))

    display_results(TextUI(console), result, summarize(result))


if __name__ == "__main__":
    main()
