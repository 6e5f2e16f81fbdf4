"""Business logic for tag membership."""

import logging
import uuid
from collections.abc import Iterable

from django.db import transaction

from server.apps.assets.exceptions import TenantMismatchError
from server.apps.assets.models import Asset, AssetTag, Tag

logger = logging.getLogger(__name__)


def _tenant_tags(asset: Asset, tag_ids: Iterable[uuid.UUID]) -> list[Tag]:
    """Load tags and check they share the asset's tenant.

    Raises:
        Tag.DoesNotExist: If any tag id is unknown.
        TenantMismatchError: If a tag belongs to another tenant.
    """
    requested = set(tag_ids)
    tags = list(Tag.objects.filter(id__in=requested))
    missing = requested - {tag.pk for tag in tags}
    if missing:
        raise Tag.DoesNotExist(f'Unknown tags: {sorted(map(str, missing))}')
    for tag in tags:
        if tag.company_id != asset.company_id:
            raise TenantMismatchError(asset.company_id, tag.company_id)
    return tags


def assign_tags(asset: Asset, tag_ids: Iterable[uuid.UUID]) -> int:
    """Add tags to an asset.

    Tags the asset already holds are left alone.

    Args:
        asset: Asset to tag.
        tag_ids: Tags to add.

    Returns:
        Number of memberships created.

    Raises:
        Tag.DoesNotExist: If any tag id is unknown.
        TenantMismatchError: If a tag belongs to another tenant.
    """
    tags = _tenant_tags(asset, tag_ids)
    existing = set(
        AssetTag.objects
        .filter(asset=asset)
        .values_list('tag_id', flat=True),
    )
    new_links = [
        AssetTag(asset=asset, tag=tag)
        for tag in tags
        if tag.pk not in existing
    ]
    with transaction.atomic():
        AssetTag.objects.bulk_create(new_links)

    logger.info('Tagged asset %s with %d new tags', asset.pk, len(new_links))
    return len(new_links)


def remove_tags(asset: Asset, tag_ids: Iterable[uuid.UUID]) -> int:
    """Remove tags from an asset.

    Args:
        asset: Asset to untag.
        tag_ids: Tags to remove; ids the asset does not hold are ignored.

    Returns:
        Number of memberships deleted.
    """
    deleted, _ = AssetTag.objects.filter(
        asset=asset,
        tag_id__in=set(tag_ids),
    ).delete()

    logger.info('Removed %d tags from asset %s', deleted, asset.pk)
    return deleted
