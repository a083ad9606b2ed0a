"""
TestEngine - test execution and reporting engine.

This package provides tools to:
- Load test containers through pluggable framework drivers
- Run them and merge their result trees into a single outcome
- Summarize a run and report failures and skipped tests
- Compare collections for order-independent equivalence
"""

__version__ = "0.1.0"
__author__ = "TestEngine Team"
