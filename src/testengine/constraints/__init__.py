"""Collection constraints."""

from testengine.constraints.equivalence import (
    CollectionEquivalentConstraint,
    ConstraintResult,
    are_equivalent,
    case_insensitive_equal,
)

__all__ = [
    "CollectionEquivalentConstraint",
    "ConstraintResult",
    "are_equivalent",
    "case_insensitive_equal",
]
