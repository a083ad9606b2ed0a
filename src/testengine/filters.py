"""Test filters passed through the runner to drivers."""

from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from typing import Iterable, Optional


class TestFilter(ABC):
    """Predicate over test full names."""

    @abstractmethod
    def passes(self, full_name: str) -> bool:
        """Return True if the named test should run."""
        pass

    @property
    def is_empty(self) -> bool:
        return False


class EmptyFilter(TestFilter):
    """Filter that lets every test through."""

    def passes(self, full_name: str) -> bool:
        return True

    @property
    def is_empty(self) -> bool:
        return True


class NameFilter(TestFilter):
    """Selects tests by full name or by the name of an enclosing suite."""

    def __init__(self, names: Iterable[str]):
        self.names = [n.strip() for n in names if n.strip()]

    def passes(self, full_name: str) -> bool:
        for name in self.names:
            if full_name == name or full_name.startswith(name + "."):
                return True
        return False


class WhereFilter(TestFilter):
    """Selects tests whose full name matches a glob pattern."""

    def __init__(self, pattern: str):
        self.pattern = pattern.strip()

    def passes(self, full_name: str) -> bool:
        return fnmatchcase(full_name, self.pattern)


class AndFilter(TestFilter):
    """Passes only tests accepted by every inner filter."""

    def __init__(self, *filters: TestFilter):
        self.filters = list(filters)

    def passes(self, full_name: str) -> bool:
        return all(f.passes(full_name) for f in self.filters)

    @property
    def is_empty(self) -> bool:
        return all(f.is_empty for f in self.filters)


def build_filter(tests: Optional[Iterable[str]] = None, where: Optional[str] = None) -> TestFilter:
    """Build a filter from a list of test names and an optional pattern."""
    filters: list[TestFilter] = []

    names = [t for t in (tests or []) if t.strip()]
    if names:
        filters.append(NameFilter(names))
    if where and where.strip():
        filters.append(WhereFilter(where))

    if not filters:
        return EmptyFilter()
    if len(filters) == 1:
        return filters[0]
    return AndFilter(*filters)
