"""Data sources that run a compiled search.

``DjangoAssetSource`` translates predicates to ``Q`` objects and
orderings to ORM expressions. ``InMemoryAssetSource`` evaluates them
directly against ``AssetRecord`` values and serves as the reference
behavior for the ORM translation.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Final, Protocol, final

from django.db.models import Case, F, Q, QuerySet, TextField, Value, When
from django.db.models.functions import Coalesce, StrIndex, Substr

from server.apps.assets.infrastructure.metadata import metadata_value_marker
from server.apps.assets.logic.search.predicates import (
    TAG_MODE_ALL,
    And,
    Compare,
    MetadataMatch,
    Or,
    Predicate,
    TagMembership,
    evaluate,
    metadata_key_pattern,
    metadata_value_pattern,
)
from server.apps.assets.logic.search.records import AssetRecord
from server.apps.assets.logic.search.sorting import Ordering
from server.apps.assets.models import Asset, AssetTag

_LOOKUPS: Final = {
    'eq': 'exact',
    'ilike': 'ilike',
    'in': 'in',
    'lower_in': 'lower__in',
    'gt': 'gt',
    'gte': 'gte',
    'lt': 'lt',
    'lte': 'lte',
    'isnull': 'isnull',
}

_METADATA_POSITION: Final = 'metadata_sort_position'
_METADATA_TAIL: Final = 'metadata_sort_tail'
_METADATA_END: Final = 'metadata_sort_end'
_METADATA_VALUE: Final = 'metadata_sort_value'


class DataSource(Protocol):
    """Anything that can run a compiled predicate."""

    name: str

    def fetch(
        self,
        predicate: Predicate,
        ordering: Ordering,
        offset: int,
        limit: int | None,
    ) -> tuple[list[AssetRecord], int]:
        """Return one ordered page of matches and the total match count."""


@final
class InMemoryAssetSource:
    """Search over records held in memory."""

    name = 'memory'

    def __init__(self, records: Iterable[AssetRecord]) -> None:
        """Initialize the source.

        Args:
            records: Records to search.
        """
        self._records = tuple(records)

    def fetch(
        self,
        predicate: Predicate,
        ordering: Ordering,
        offset: int,
        limit: int | None,
    ) -> tuple[list[AssetRecord], int]:
        """Filter, sort and slice the records.

        Args:
            predicate: Compiled predicate including scope filters.
            ordering: Sort to apply.
            offset: Rows to skip.
            limit: Rows to return, or None for all remaining.

        Returns:
            Page of records and the number of records matching overall.
        """
        matches = [
            record for record in self._records if evaluate(predicate, record)
        ]
        matches.sort(key=ordering.sort_key, reverse=ordering.descending)
        end = None if limit is None else offset + limit
        return matches[offset:end], len(matches)


@final
class DjangoAssetSource:
    """Search over the ``Asset`` table."""

    name = 'django'

    def fetch(
        self,
        predicate: Predicate,
        ordering: Ordering,
        offset: int,
        limit: int | None,
    ) -> tuple[list[AssetRecord], int]:
        """Run the search as one count query and one page query.

        Soft-deleted rows are visible here; the predicate carries the
        deletion scope.

        Args:
            predicate: Compiled predicate including scope filters.
            ordering: Sort to apply.
            offset: Rows to skip.
            limit: Rows to return, or None for all remaining.

        Returns:
            Page of records and the number of rows matching overall.
        """
        queryset = Asset.all_objects.filter(predicate_to_q(predicate))
        total = queryset.count()

        queryset = apply_ordering(queryset, ordering).prefetch_related('tags')
        if limit is not None:
            queryset = queryset[offset:offset + limit]
        elif offset:
            queryset = queryset[offset:]

        return [AssetRecord.from_model(asset) for asset in queryset], total


def predicate_to_q(predicate: Predicate) -> Q:
    """Translate a predicate to an equivalent ``Q`` over ``Asset``.

    Args:
        predicate: Predicate tree.

    Returns:
        Filter expression. ``Or(())`` becomes an always-empty filter.
    """
    match predicate:
        case And(predicates=children):
            combined = Q()
            for child in children:
                combined &= predicate_to_q(child)
            return combined
        case Or(predicates=()):
            return Q(pk__in=[])
        case Or(predicates=children):
            combined = predicate_to_q(children[0])
            for child in children[1:]:
                combined |= predicate_to_q(child)
            return combined
        case Compare(field=field, op=op, value=value):
            if op in {'in', 'lower_in'}:
                value = sorted(value, key=str)
            return Q(**{f'{field}__{_LOOKUPS[op]}': value})
        case TagMembership():
            return _tag_membership_to_q(predicate)
        case MetadataMatch():
            return _metadata_match_to_q(predicate)
    raise TypeError(f'Unsupported predicate: {predicate!r}')


def _tagged_with(tag_ids: Sequence[Any]) -> Q:
    asset_ids = AssetTag.objects.filter(tag_id__in=tag_ids).values('asset_id')
    return Q(pk__in=asset_ids)


def _tag_membership_to_q(predicate: TagMembership) -> Q:
    tag_ids = sorted(predicate.tag_ids, key=str)
    if predicate.mode != TAG_MODE_ALL:
        return _tagged_with(tag_ids)

    combined = Q()
    for tag_id in tag_ids:
        combined &= _tagged_with([tag_id])
    return combined


def _metadata_match_to_q(predicate: MetadataMatch) -> Q:
    has_key = Q(metadata__ilike=metadata_key_pattern(predicate.key))
    if predicate.op == 'untagged':
        return Q(metadata__isnull=True) | Q(metadata='') | ~has_key

    has_value = Q(metadata__ilike=metadata_value_pattern(
        predicate.key,
        predicate.op,
        predicate.value,
    ))
    if predicate.op == 'isnot':
        return Q(metadata__isnull=False) & has_key & ~has_value
    return Q(metadata__isnull=False) & has_value


def apply_ordering(
    queryset: QuerySet[Asset],
    ordering: Ordering,
) -> QuerySet[Asset]:
    """Order a queryset the way ``Ordering.sort_key`` orders records.

    Missing values sort lowest in both directions and ``id`` breaks
    ties, so pages are stable.

    Args:
        queryset: Asset queryset.
        ordering: Resolved ordering.

    Returns:
        Ordered queryset.
    """
    if ordering.metadata_key is not None:
        queryset = _annotate_metadata_value(queryset, ordering.metadata_key)
        sort_expression = F(_METADATA_VALUE)
    else:
        sort_expression = F(ordering.field)

    if ordering.descending:
        return queryset.order_by(
            sort_expression.desc(nulls_last=True),
            F('id').desc(),
        )
    return queryset.order_by(
        sort_expression.asc(nulls_first=True),
        F('id').asc(),
    )


def _annotate_metadata_value(
    queryset: QuerySet[Asset],
    key: str,
) -> QuerySet[Asset]:
    """Annotate the raw text of one metadata value, '' when absent."""
    marker = metadata_value_marker(key)
    queryset = queryset.annotate(**{
        _METADATA_POSITION: StrIndex('metadata', Value(marker)),
    }).annotate(**{
        _METADATA_TAIL: Substr('metadata', F(_METADATA_POSITION) + len(marker)),
    }).annotate(**{
        _METADATA_END: StrIndex(_METADATA_TAIL, Value('"')),
    })

    raw_value = Case(
        When(**{_METADATA_POSITION: 0}, then=Value('')),
        When(**{_METADATA_END: 0}, then=F(_METADATA_TAIL)),
        default=Substr(_METADATA_TAIL, 1, F(_METADATA_END) - 1),
        output_field=TextField(),
    )
    return queryset.annotate(**{
        _METADATA_VALUE: Coalesce(raw_value, Value(''), output_field=TextField()),
    })
