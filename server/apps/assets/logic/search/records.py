"""Read-only projection of an asset, as returned by search."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from server.apps.assets.models import Asset


@dataclass(frozen=True)
class AssetRecord:
    """Everything a predicate or an ordering may look at, plus display data."""

    id: uuid.UUID
    file_name: str
    file_type: str
    size_bytes: int
    created_at: datetime
    company_id: uuid.UUID | None = None
    folder_id: uuid.UUID | None = None
    metadata: str | None = None
    mime_type: str = ''
    is_deleted: bool = False
    deleted_at: datetime | None = None
    updated_at: datetime | None = None
    tag_ids: frozenset[uuid.UUID] = field(default_factory=frozenset)

    @classmethod
    def from_model(cls, asset: 'Asset') -> 'AssetRecord':
        """Project a model instance.

        Tag ids come from ``asset.tags.all()``, so prefetch ``tags``
        when projecting many assets.

        Args:
            asset: Asset model instance.

        Returns:
            Immutable record of the asset.
        """
        return cls(
            id=asset.pk,
            file_name=asset.file_name,
            file_type=asset.file_type,
            size_bytes=asset.size_bytes,
            created_at=asset.created_at,
            company_id=asset.company_id,
            folder_id=asset.folder_id,
            metadata=asset.metadata,
            mime_type=asset.mime_type,
            is_deleted=asset.is_deleted,
            deleted_at=asset.deleted_at,
            updated_at=asset.updated_at,
            tag_ids=frozenset(tag.pk for tag in asset.tags.all()),
        )
