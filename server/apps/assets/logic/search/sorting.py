"""Sort key resolution for search results."""

from dataclasses import dataclass
from typing import Any, Final

from server.apps.assets.infrastructure.metadata import extract_metadata_value
from server.apps.assets.logic.search.records import AssetRecord

DEFAULT_SORT: Final = 'date'
_METADATA_PREFIX: Final = 'metadata.'
_ASCENDING: Final = 'asc'

_SORT_FIELDS: Final = {
    'name': 'file_name',
    'size': 'size_bytes',
    'type': 'file_type',
    'deletedat': 'deleted_at',
}
_DEFAULT_FIELD: Final = 'created_at'


@dataclass(frozen=True)
class Ordering:
    """Resolved sort: one attribute or one metadata key, then id.

    ``field`` is ignored when ``metadata_key`` is set.
    """

    field: str = _DEFAULT_FIELD
    descending: bool = True
    metadata_key: str | None = None

    def sort_key(self, record: AssetRecord) -> tuple[Any, ...]:
        """Comparison key of a record, missing values sorting lowest.

        Args:
            record: Asset projection.

        Returns:
            Tuple of the sort value and the record id.
        """
        if self.metadata_key is not None:
            value = extract_metadata_value(record.metadata, self.metadata_key)
            return (value or '', record.id)

        value = getattr(record, self.field)
        if value is None:
            return ((0,), record.id)
        return ((1, value), record.id)


def resolve_ordering(sort_by: str | None, sort_dir: str | None) -> Ordering:
    """Turn client sort parameters into an ordering.

    Args:
        sort_by: 'name', 'size', 'type', 'deletedAt', 'metadata.<key>' or
            anything else for creation date.
        sort_dir: 'asc' for ascending; anything else is descending.

    Returns:
        Ordering to hand to a data source.
    """
    descending = (sort_dir or '').strip().lower() != _ASCENDING
    sort_field = (sort_by or DEFAULT_SORT).strip()

    if sort_field.lower().startswith(_METADATA_PREFIX):
        metadata_key = sort_field[len(_METADATA_PREFIX):].strip()
        if metadata_key:
            return Ordering(descending=descending, metadata_key=metadata_key)

    field = _SORT_FIELDS.get(sort_field.lower(), _DEFAULT_FIELD)
    return Ordering(field=field, descending=descending)
