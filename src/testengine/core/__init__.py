"""Core test execution functionality."""

from testengine.core.runner import TestRunner

__all__ = ["TestRunner"]
