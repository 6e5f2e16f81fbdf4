"""Response models of the search endpoints.

Models read search results by attribute and dump to the camelCase
shape of the catalog frontend.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Final

from pydantic import (
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

_MODEL_CONFIG: Final = ConfigDict(
    frozen=True,
    from_attributes=True,
    alias_generator=AliasGenerator(serialization_alias=to_camel),
)


class AssetPayload(BaseModel):
    """One asset of a result page."""

    model_config = _MODEL_CONFIG

    id: uuid.UUID
    file_name: str
    file_type: str
    mime_type: str = ''
    size_bytes: int = Field(serialization_alias='fileSize')
    folder_id: uuid.UUID | None = None
    tag_ids: list[str] = Field(default_factory=list)
    metadata: str | None = Field(
        default=None,
        serialization_alias='userMetadata',
    )
    created_at: datetime
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @field_validator('tag_ids', mode='before')
    @classmethod
    def sort_tag_ids(cls, tag_ids: Iterable[object]) -> list[str]:
        """Render tag ids as sorted text."""
        return sorted(str(tag_id) for tag_id in tag_ids)


class SearchResponse(BaseModel):
    """A page of assets with its paging state."""

    model_config = _MODEL_CONFIG

    assets: list[AssetPayload]
    total: int
    page: int
    has_more: bool
