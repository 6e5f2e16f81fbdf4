"""Predicate tree evaluated against assets.

Builders produce these values, the combinator folds them and a data
source either evaluates them in memory (``evaluate``) or translates them
to its native query form. Predicates never reference a backend.
"""

import operator
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final, Literal

from server.apps.assets.logic.search.records import AssetRecord
from server.apps.assets.logic.search.values import escape_like, like_matches

type CompareOp = Literal[
    'eq', 'ilike', 'in', 'lower_in', 'gt', 'gte', 'lt', 'lte', 'isnull',
]
type TagMode = Literal['any', 'all']
type MetadataOp = Literal[
    'untagged', 'equals', 'isnot', 'startswith', 'endswith', 'contains',
]

TAG_MODE_ANY: Final = 'any'
TAG_MODE_ALL: Final = 'all'


@dataclass(frozen=True)
class Compare:
    """Compare one asset attribute with a constant.

    ``ilike`` takes a LIKE pattern; ``in`` and ``lower_in`` take a
    frozenset; ``isnull`` takes a bool.
    """

    field: str
    op: CompareOp
    value: Any


@dataclass(frozen=True)
class TagMembership:
    """Asset holds any (or all) of the given tags."""

    mode: TagMode
    tag_ids: frozenset[uuid.UUID]


@dataclass(frozen=True)
class MetadataMatch:
    """Substring match against the serialized metadata blob."""

    key: str
    op: MetadataOp
    value: str = ''


@dataclass(frozen=True)
class And:
    """Conjunction. No children means match everything."""

    predicates: tuple['Predicate', ...]


@dataclass(frozen=True)
class Or:
    """Disjunction. No children means match nothing."""

    predicates: tuple['Predicate', ...]


type Predicate = Compare | TagMembership | MetadataMatch | And | Or

MATCH_ALL: Final = And(())
MATCH_NONE: Final = Or(())

_ORDERING_OPS: Final[dict[str, Callable[[Any, Any], bool]]] = {
    'gt': operator.gt,
    'gte': operator.ge,
    'lt': operator.lt,
    'lte': operator.le,
}


def metadata_key_pattern(key: str) -> str:
    """LIKE pattern matching a blob that contains ``"<key>":``."""
    return f'%"{escape_like(key)}":%'


def metadata_value_pattern(key: str, op: MetadataOp, value: str) -> str:
    """LIKE pattern matching a ``"<key>":"<value>"`` pair in a blob.

    Args:
        key: Metadata key.
        op: 'equals' and 'isnot' anchor the whole value, 'startswith'
            and 'endswith' one side of it, anything else neither.
        value: Value to look for, matched literally.

    Returns:
        Pattern for the ``ilike`` lookup.
    """
    escaped_key = escape_like(key)
    escaped_value = escape_like(value)
    match op:
        case 'equals' | 'isnot':
            body = escaped_value
        case 'startswith':
            body = f'{escaped_value}%'
        case 'endswith':
            body = f'%{escaped_value}'
        case _:
            body = f'%{escaped_value}%'
    return f'%"{escaped_key}":"{body}"%'


def evaluate(predicate: Predicate, record: AssetRecord) -> bool:
    """Evaluate a predicate against one asset in memory.

    Args:
        predicate: Predicate tree.
        record: Asset projection.

    Returns:
        Whether the asset satisfies the predicate.
    """
    match predicate:
        case And(predicates=children):
            return all([evaluate(child, record) for child in children])
        case Or(predicates=children):
            return any([evaluate(child, record) for child in children])
        case Compare():
            return _evaluate_compare(predicate, record)
        case TagMembership(mode=mode, tag_ids=tag_ids):
            if mode == TAG_MODE_ALL:
                return tag_ids <= record.tag_ids
            return not tag_ids.isdisjoint(record.tag_ids)
        case MetadataMatch():
            return _evaluate_metadata(predicate, record.metadata)
    raise TypeError(f'Unsupported predicate: {predicate!r}')


def _evaluate_compare(predicate: Compare, record: AssetRecord) -> bool:
    actual = getattr(record, predicate.field)
    expected = predicate.value

    match predicate.op:
        case 'isnull':
            return (actual is None) == bool(expected)
        case 'eq':
            return actual == expected
        case 'in':
            return actual in expected
        case 'lower_in':
            return actual is not None and str(actual).lower() in expected
        case 'ilike':
            return (
                actual is not None
                and like_matches(expected, str(actual))
            )
        case op if op in _ORDERING_OPS:
            return actual is not None and _ORDERING_OPS[op](actual, expected)
    raise ValueError(f'Unsupported comparison operator: {predicate.op!r}')


def _evaluate_metadata(predicate: MetadataMatch, blob: str | None) -> bool:
    has_key = bool(blob) and _like(blob, metadata_key_pattern(predicate.key))
    if predicate.op == 'untagged':
        return not has_key
    if blob is None:
        return False

    has_value = _like(
        blob,
        metadata_value_pattern(predicate.key, predicate.op, predicate.value),
    )
    if predicate.op == 'isnot':
        return has_key and not has_value
    return has_value


def _like(text: str, pattern: str) -> bool:
    return like_matches(pattern, text)
