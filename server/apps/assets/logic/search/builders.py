"""Per-field predicate builders and the field router.

A builder returns None when its condition cannot produce a usable
predicate (blank value, unparseable number, unknown operator family).
Dropping such conditions is how malformed search input degrades.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Final

from server.apps.assets.logic.search.normalizer import (
    normalize_field,
    normalize_operator,
)
from server.apps.assets.logic.search.predicates import (
    TAG_MODE_ALL,
    TAG_MODE_ANY,
    And,
    Compare,
    MetadataMatch,
    Predicate,
    TagMembership,
)
from server.apps.assets.logic.search.request import Condition
from server.apps.assets.logic.search.values import (
    convert_to_bytes,
    day_bounds,
    end_of_day,
    escape_like,
    parse_datetime_value,
    parse_identifier,
    start_of_day,
)

logger = logging.getLogger(__name__)

type Builder = Callable[[Condition], Predicate | None]

FILE_NAME: Final = 'file_name'
FILE_TYPE: Final = 'file_type'
SIZE_BYTES: Final = 'size_bytes'
CREATED_AT: Final = 'created_at'
ASSET_ID: Final = 'id'


def _both(first: Predicate, second: Predicate) -> And:
    return And((first, second))


def build_string_predicate(field: str, condition: Condition) -> Predicate | None:
    """Case-insensitive text match on a nullable column.

    Args:
        field: Asset attribute name.
        condition: Condition with operator 'equals' (default), 'contains',
            'startswith' or 'endswith'.

    Returns:
        Predicate, or None for a blank value.
    """
    value = (condition.value or '').strip()
    if not value:
        return None

    escaped = escape_like(value)
    match normalize_operator(condition.operator):
        case 'contains':
            pattern = f'%{escaped}%'
        case 'startswith':
            pattern = f'{escaped}%'
        case 'endswith':
            pattern = f'%{escaped}'
        case _:
            pattern = escaped

    return _both(
        Compare(field, 'isnull', False),
        Compare(field, 'ilike', pattern),
    )


def build_list_predicate(
    field: str,
    values: Iterable[str] | None,
) -> Predicate | None:
    """Lowercased attribute is one of the given values.

    Args:
        field: Asset attribute name.
        values: Candidate values; trimmed, blanks dropped, lowercased.

    Returns:
        Predicate, or None when no candidate remains.
    """
    normalized = frozenset(
        value.strip().lower()
        for value in values or ()
        if value and value.strip()
    )
    if not normalized:
        return None

    return _both(
        Compare(field, 'isnull', False),
        Compare(field, 'lower_in', normalized),
    )


def build_tag_predicate(condition: Condition) -> Predicate | None:
    """Asset carries any (default) or all ('containsall') of the tags.

    Args:
        condition: Condition whose ``values`` hold tag identifiers.

    Returns:
        Predicate, or None when no identifier parses.
    """
    tag_ids = frozenset(
        tag_id
        for tag_id in (parse_identifier(value) for value in condition.values or ())
        if tag_id is not None
    )
    if not tag_ids:
        return None

    mode = TAG_MODE_ALL
    if normalize_operator(condition.operator) != 'containsall':
        mode = TAG_MODE_ANY
    return TagMembership(mode, tag_ids)


def build_file_size_predicate(condition: Condition) -> Predicate | None:
    """Compare the byte size against a value in the condition's unit.

    Operators: 'greaterthan' and 'lessthan' are strict, 'between' is
    inclusive in either bound order, anything else is equality.

    Args:
        condition: File size condition.

    Returns:
        Predicate, or None when a required bound does not parse.
    """
    match normalize_operator(condition.operator):
        case 'greaterthan':
            size = convert_to_bytes(condition.value, condition.unit)
            return None if size is None else Compare(SIZE_BYTES, 'gt', size)
        case 'lessthan':
            size = convert_to_bytes(condition.value, condition.unit)
            return None if size is None else Compare(SIZE_BYTES, 'lt', size)
        case 'between':
            bounds = condition.bounds()
            if bounds is None:
                return None
            low = convert_to_bytes(bounds.start, condition.unit)
            high = convert_to_bytes(bounds.end, condition.unit)
            if low is None or high is None:
                return None
            low, high = min(low, high), max(low, high)
            return _both(
                Compare(SIZE_BYTES, 'gte', low),
                Compare(SIZE_BYTES, 'lte', high),
            )
        case _:
            size = convert_to_bytes(condition.value, condition.unit)
            return None if size is None else Compare(SIZE_BYTES, 'eq', size)


def build_date_predicate(condition: Condition) -> Predicate | None:
    """Compare the creation timestamp against a parsed date.

    'after' and the lower bound of 'between' start at the beginning of
    the UTC day; 'before' and the upper bound extend to its end; 'on'
    covers the whole UTC day. A 'between' with one parseable bound
    becomes a one-sided comparison.

    Args:
        condition: Date condition.

    Returns:
        Predicate, or None when nothing parses.
    """
    match normalize_operator(condition.operator):
        case 'after':
            moment = parse_datetime_value(condition.value)
            if moment is None:
                return None
            return Compare(CREATED_AT, 'gte', start_of_day(moment))
        case 'before':
            moment = parse_datetime_value(condition.value)
            if moment is None:
                return None
            return Compare(CREATED_AT, 'lte', end_of_day(moment))
        case 'on':
            moment = parse_datetime_value(condition.value)
            if moment is None:
                return None
            first, last = day_bounds(moment)
            return _both(
                Compare(CREATED_AT, 'gte', first),
                Compare(CREATED_AT, 'lte', last),
            )
        case 'between':
            return _build_date_range(condition)
        case _:
            moment = parse_datetime_value(condition.value)
            return None if moment is None else Compare(CREATED_AT, 'eq', moment)


def _build_date_range(condition: Condition) -> Predicate | None:
    bounds = condition.bounds()
    if bounds is None:
        return None

    start = parse_datetime_value(bounds.start)
    end = parse_datetime_value(bounds.end)
    if start is not None:
        start = start_of_day(start)
    if end is not None:
        end = end_of_day(end)

    if start is not None and end is not None:
        if start > end:
            start, end = end, start
        return _both(
            Compare(CREATED_AT, 'gte', start),
            Compare(CREATED_AT, 'lte', end),
        )
    if start is not None:
        return Compare(CREATED_AT, 'gte', start)
    if end is not None:
        return Compare(CREATED_AT, 'lte', end)
    return None


def build_metadata_predicate(condition: Condition) -> Predicate | None:
    """Match a ``"key":"value"`` pair inside the metadata blob.

    Args:
        condition: Condition naming the key in ``metadata_field``.

    Returns:
        Predicate, or None without a key (or without a value, except
        for 'isuntagged').
    """
    key = (condition.metadata_field or '').strip()
    if not key:
        return None

    operator = normalize_operator(condition.operator)
    if operator == 'isuntagged':
        return MetadataMatch(key, 'untagged')

    value = (condition.value or '').strip()
    if not value:
        return None

    match operator:
        case 'is' | 'equals':
            return MetadataMatch(key, 'equals', value)
        case 'isnot':
            return MetadataMatch(key, 'isnot', value)
        case 'startswith' | 'endswith':
            return MetadataMatch(key, operator, value)
        case _:
            return MetadataMatch(key, 'contains', value)


def build_id_predicate(condition: Condition) -> Predicate | None:
    """Asset id is one of the listed ids or the single value.

    Args:
        condition: Condition with ``values`` and/or ``value``.

    Returns:
        Predicate, or None when no identifier parses.
    """
    raw_ids = [*(condition.values or ()), condition.value]
    asset_ids = frozenset(
        asset_id
        for asset_id in (parse_identifier(raw) for raw in raw_ids)
        if asset_id is not None
    )
    if not asset_ids:
        return None
    return Compare(ASSET_ID, 'in', asset_ids)


def _build_file_type_predicate(condition: Condition) -> Predicate | None:
    if condition.values:
        return build_list_predicate(FILE_TYPE, condition.values)
    return build_string_predicate(FILE_TYPE, condition)


_ROUTES: Final[dict[str, Builder]] = {
    'filename': lambda condition: build_string_predicate(FILE_NAME, condition),
    'filetype': _build_file_type_predicate,
    'tags': build_tag_predicate,
    'filesize': build_file_size_predicate,
    'datecreated': build_date_predicate,
    'createdat': build_date_predicate,
    'metadata': build_metadata_predicate,
    'id': build_id_predicate,
    'ids': build_id_predicate,
}


def build_condition_predicate(condition: Condition) -> Predicate | None:
    """Route a condition to the builder for its field.

    Args:
        condition: Search condition.

    Returns:
        Predicate, or None for an unknown field or unusable value.
    """
    field = normalize_field(condition.field)
    builder = _ROUTES.get(field)
    if builder is None:
        logger.debug('Ignoring condition on unknown field: %r', condition.field)
        return None
    return builder(condition)


def build_condition_predicates(
    conditions: Iterable[Condition],
) -> list[Predicate]:
    """Build every usable predicate, preserving condition order."""
    return [
        predicate
        for predicate in (build_condition_predicate(c) for c in conditions)
        if predicate is not None
    ]
