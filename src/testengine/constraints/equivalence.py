"""Order-independent collection equivalence."""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from testengine.exceptions import StructuralViolation

EqualityPredicate = Callable[[Any, Any], bool]


def default_equal(x: Any, y: Any) -> bool:
    """Plain value equality."""
    return x == y


def case_insensitive_equal(x: Any, y: Any) -> bool:
    """Value equality that ignores case when both values are strings."""
    if isinstance(x, str) and isinstance(y, str):
        return x.casefold() == y.casefold()
    return x == y


def are_equivalent(
    expected: Iterable[Any],
    actual: Iterable[Any],
    eq: Optional[EqualityPredicate] = None,
) -> bool:
    """Check whether ``actual`` is a permutation of ``expected`` under ``eq``.

    Duplicates matter: each element of ``expected`` can be matched by at
    most one element of ``actual``. ``None`` goes through ``eq`` like any
    other value. No hashing is done, so ``eq`` may be any binary predicate.

    Args:
        expected: The expected collection
        actual: The collection under test
        eq: Equality predicate, defaults to ``==``

    Returns:
        True if both collections hold the same elements with the same
        multiplicities
    """
    eq = eq or default_equal
    remaining = list(expected)

    for item in actual:
        for index, candidate in enumerate(remaining):
            if eq(item, candidate):
                del remaining[index]
                break
        else:
            return False

    return not remaining


@dataclass
class ConstraintResult:
    """Outcome of applying a constraint to an actual value."""

    is_success: bool
    actual: Any
    description: str

    @property
    def has_succeeded(self) -> bool:
        return self.is_success


class CollectionEquivalentConstraint:
    """Constraint that succeeds when a collection is equivalent to ``expected``.

    Example:
        CollectionEquivalentConstraint(["x", "y"]).ignore_case.matches(["Y", "X"])
    """

    def __init__(self, expected: Iterable[Any]):
        self.expected = list(expected)
        self._ignore_case = False
        self._predicate: Optional[EqualityPredicate] = None

    @property
    def ignore_case(self) -> "CollectionEquivalentConstraint":
        """Compare strings without regard to case."""
        if self._predicate is not None:
            raise StructuralViolation("ignore_case cannot be combined with using()")
        self._ignore_case = True
        return self

    def using(self, predicate: EqualityPredicate) -> "CollectionEquivalentConstraint":
        """Compare elements with a caller-supplied equality predicate."""
        if self._ignore_case:
            raise StructuralViolation("using() cannot be combined with ignore_case")
        if self._predicate is not None:
            raise StructuralViolation("only one comparer may be specified")
        self._predicate = predicate
        return self

    @property
    def description(self) -> str:
        text = "equivalent to < " + ", ".join(_display(e) for e in self.expected) + " >"
        if self._ignore_case:
            text += ", ignoring case"
        return text

    def matches(self, actual: Iterable[Any]) -> ConstraintResult:
        if isinstance(actual, (str, bytes)) or not isinstance(actual, Iterable):
            raise TypeError(f"actual must be a collection, got {type(actual).__name__}")

        if self._predicate is not None:
            eq = self._predicate
        elif self._ignore_case:
            eq = case_insensitive_equal
        else:
            eq = default_equal

        actual = list(actual)
        return ConstraintResult(
            is_success=are_equivalent(self.expected, actual, eq),
            actual=actual,
            description=self.description,
        )


def _display(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value)
