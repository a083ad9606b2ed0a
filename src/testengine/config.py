"""Configuration management for TestEngine."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

CONFIG_NAMES = ["testengine.json", ".testengine.json"]


class RunConfig(BaseModel):
    """Test execution settings."""

    default_timeout: int = Field(default=300, description="Timeout in seconds for each container run")
    work_directory: str = Field(default=".", description="Directory drivers run tests in")
    labels: str = Field(default="ON", description="Test label display: OFF, ON or ALL")
    stop_on_error: bool = Field(default=False, description="Report that the run stopped at the first error")
    environment: dict[str, str] = Field(default_factory=dict, description="Additional environment variables")

    @field_validator("default_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Timeout must be at least 1 second")
        return v

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: str) -> str:
        allowed = {"OFF", "ON", "ALL"}
        if v.upper() not in allowed:
            raise ValueError(f"Labels must be one of: {allowed}")
        return v.upper()


class FilterConfig(BaseModel):
    """Which tests to run."""

    tests: list[str] = Field(default_factory=list, description="Full names of tests or suites to run")
    where: Optional[str] = Field(default=None, description="Glob pattern matched against full names")


class ReportConfig(BaseModel):
    """Report generation configuration."""

    output_dir: str = Field(default="./reports", description="Directory for report output")
    filename: str = Field(default="test_report.html", description="HTML report filename")
    title: str = Field(default="Test Results", description="Report title")
    result_file: Optional[str] = Field(default=None, description="Write the result tree as JSON to this file")


class DriverConfig(BaseModel):
    """Options passed to the driver for one container format."""

    options: dict[str, Any] = Field(default_factory=dict, description="Driver-specific options")


class EngineConfig(BaseModel):
    """Main configuration for TestEngine."""

    containers: list[str] = Field(default_factory=list, description="Test containers to load")
    run: RunConfig = Field(default_factory=RunConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    drivers: dict[str, DriverConfig] = Field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path | str) -> "EngineConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "EngineConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        current = start_dir.resolve()
        while True:
            for name in CONFIG_NAMES:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Create testengine.json or run 'testengine init'"
        )

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def runner_options(self, base_dir: Path | str | None = None) -> dict[str, Any]:
        """Options every driver receives."""
        paths = self.get_absolute_paths(base_dir)
        return {
            "timeout_seconds": self.run.default_timeout,
            "work_directory": str(paths["work_directory"]),
            "environment": dict(self.run.environment),
        }

    def driver_options(self) -> dict[str, dict[str, Any]]:
        """Extra options keyed by container format."""
        return {name: dict(driver.options) for name, driver in self.drivers.items()}

    def get_absolute_paths(self, base_dir: Path | str | None = None) -> dict[str, Path]:
        """Get absolute paths for various config paths."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        paths = {
            "work_directory": (base_dir / self.run.work_directory).resolve(),
            "report_output_dir": (base_dir / self.report.output_dir).resolve(),
        }
        if self.report.result_file:
            paths["result_file"] = (base_dir / self.report.result_file).resolve()
        return paths


def get_default_config() -> EngineConfig:
    """Return a default configuration."""
    return EngineConfig(
        containers=["tests"],
        run=RunConfig(default_timeout=300, work_directory="."),
        drivers={"pytest": DriverConfig(options={"args": []})},
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.report.title = "Test Results for my-project"
    config.to_file(output_path)
    return output_path
