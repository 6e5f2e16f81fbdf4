"""Fold built predicates into one according to the logic mode."""

from collections.abc import Sequence

from server.apps.assets.logic.search.predicates import (
    MATCH_ALL,
    MATCH_NONE,
    And,
    Or,
    Predicate,
)


def combine(predicates: Sequence[Predicate], *, use_or: bool) -> Predicate:
    """Combine predicates with AND or OR.

    With no predicates AND yields ``MATCH_ALL`` and OR yields
    ``MATCH_NONE``. A single predicate is returned unchanged.

    Args:
        predicates: Built predicates, in condition order.
        use_or: Disjunction when True, conjunction otherwise.

    Returns:
        Combined predicate.
    """
    if not predicates:
        return MATCH_NONE if use_or else MATCH_ALL
    if len(predicates) == 1:
        return predicates[0]
    if use_or:
        return Or(tuple(predicates))
    return And(tuple(predicates))
