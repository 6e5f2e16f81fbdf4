"""Business logic for trash (soft delete) operations."""

import logging
import uuid
from collections.abc import Iterable
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from server.apps.assets.logic.search.executor import SearchPage, execute_search
from server.apps.assets.logic.search.request import SearchRequest
from server.apps.assets.logic.search.sources import (
    DataSource,
    DjangoAssetSource,
)
from server.apps.assets.logic.tenancy import TenantScope, tenant_assets
from server.apps.assets.models import Asset

logger = logging.getLogger(__name__)

TRASH_DEFAULT_SORT = 'deletedAt'


def soft_delete_asset(asset_id: uuid.UUID) -> Asset:
    """Move an asset to the trash.

    The stored object stays in place until the asset is purged.

    Args:
        asset_id: ID of the asset.

    Returns:
        Updated Asset instance.

    Raises:
        Asset.DoesNotExist: If no live asset has this ID.
    """
    asset = Asset.objects.get(id=asset_id)
    asset.is_deleted = True
    asset.deleted_at = timezone.now()
    asset.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])

    logger.info('Asset moved to trash: %s (ID: %s)', asset.file_name, asset_id)
    return asset


def restore_asset(asset_id: uuid.UUID) -> Asset:
    """Bring an asset back from the trash.

    Args:
        asset_id: ID of the asset.

    Returns:
        Updated Asset instance.

    Raises:
        Asset.DoesNotExist: If the asset is not in the trash.
    """
    asset = Asset.all_objects.get(id=asset_id, is_deleted=True)
    asset.is_deleted = False
    asset.deleted_at = None
    asset.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])

    logger.info('Asset restored: %s (ID: %s)', asset.file_name, asset_id)
    return asset


def permanent_delete_asset(asset_id: uuid.UUID) -> None:
    """Permanently delete an asset from the trash.

    The stored object is removed by the ``post_delete`` signal handler.

    Args:
        asset_id: ID of the asset.

    Raises:
        Asset.DoesNotExist: If the asset is not in the trash.
    """
    asset = Asset.all_objects.get(id=asset_id, is_deleted=True)
    file_name = asset.file_name
    size_bytes = asset.size_bytes

    with transaction.atomic():
        asset.delete()

    logger.info(
        'Asset permanently deleted: %s (ID: %s, size: %d)',
        file_name,
        asset_id,
        size_bytes,
    )


def restore_assets(scope: TenantScope, asset_ids: Iterable[uuid.UUID]) -> int:
    """Bring several assets of one tenant back from the trash.

    Ids that are unknown, live or owned by another tenant are ignored.

    Args:
        scope: Tenant scope of the caller.
        asset_ids: IDs of trashed assets.

    Returns:
        Number of assets restored.
    """
    restored = tenant_assets(scope.trash()).filter(
        id__in=list(asset_ids),
    ).update(
        is_deleted=False,
        deleted_at=None,
        updated_at=timezone.now(),
    )
    logger.info(
        'Restored %d assets from trash (company: %s)',
        restored,
        scope.company_id,
    )
    return restored


def permanent_delete_assets(
    scope: TenantScope,
    asset_ids: Iterable[uuid.UUID],
) -> int:
    """Permanently delete several trashed assets of one tenant.

    Ids that are unknown, live or owned by another tenant are ignored.
    Stored objects are removed by the ``post_delete`` signal handler.

    Args:
        scope: Tenant scope of the caller.
        asset_ids: IDs of trashed assets.

    Returns:
        Number of assets deleted.
    """
    with transaction.atomic():
        _, per_model = tenant_assets(scope.trash()).filter(
            id__in=list(asset_ids),
        ).delete()
    deleted = per_model.get(Asset._meta.label, 0)  # noqa: WPS437
    logger.info(
        'Permanently deleted %d assets from trash (company: %s)',
        deleted,
        scope.company_id,
    )
    return deleted



def list_trash(  # noqa: WPS211
    scope: TenantScope,
    page: int = 1,
    page_size: int | None = None,
    sort_by: str | None = None,
    sort_dir: str | None = None,
    *,
    source: DataSource | None = None,
) -> SearchPage:
    """List the tenant's trash through the search executor.

    Args:
        scope: Tenant scope; its ``deleted`` flag is forced on.
        page: 1-based page number.
        page_size: Page size, or None for everything.
        sort_by: Sort key; defaults to deletion time.
        sort_dir: 'asc' or 'desc' (default).
        source: Data source; defaults to the database.

    Returns:
        One page of trashed assets.
    """
    request = SearchRequest(
        sort_by=sort_by or TRASH_DEFAULT_SORT,
        sort_dir=sort_dir,
        page=page,
        page_size=page_size,
    )
    return execute_search(
        request,
        scope.trash(),
        source or DjangoAssetSource(),
    )


def expired_trash(retention_days: int, batch_size: int) -> list[Asset]:
    """Trashed assets deleted more than ``retention_days`` ago.

    Args:
        retention_days: Days an asset stays in the trash.
        batch_size: Maximum number of assets returned.

    Returns:
        Oldest deletions first.
    """
    cutoff = timezone.now() - timedelta(days=retention_days)
    return list(
        Asset.all_objects.filter(
            is_deleted=True,
            deleted_at__lte=cutoff,
        ).order_by('deleted_at')[:batch_size],
    )


def purge_expired_assets(retention_days: int, batch_size: int) -> int:
    """Permanently delete assets whose trash retention ran out.

    A failure on one asset is logged and does not stop the others.

    Args:
        retention_days: Days an asset stays in the trash.
        batch_size: Maximum number of assets processed.

    Returns:
        Number of assets purged.
    """
    purged = 0
    for asset in expired_trash(retention_days, batch_size):
        try:
            permanent_delete_asset(asset.pk)
        except Exception:
            logger.exception('Failed to purge asset from trash: %s', asset.pk)
            continue
        purged += 1

    logger.info(
        'Purged %d assets older than %d days from trash',
        purged,
        retention_days,
    )
    return purged
