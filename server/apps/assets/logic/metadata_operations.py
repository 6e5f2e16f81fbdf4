"""Business logic for asset metadata."""

import logging
import uuid
from collections.abc import Iterable

from django.core.exceptions import ValidationError
from django.db import transaction

from server.apps.assets.logic.tenancy import TenantScope, tenant_assets

logger = logging.getLogger(__name__)


def update_metadata_batch(
    scope: TenantScope,
    asset_ids: Iterable[uuid.UUID],
    key: str,
    value: str | None,
) -> int:
    """Set one metadata key on many assets.

    Assets outside the scope or in the trash are skipped silently.

    Args:
        scope: Tenant scope of the caller.
        asset_ids: Assets to update.
        key: Metadata key.
        value: New value; blank removes the key.

    Returns:
        Number of assets updated.

    Raises:
        ValidationError: If the key is blank.
    """
    key = key.strip()
    if not key:
        raise ValidationError('Metadata key must not be blank')
    value = (value or '').strip()

    updated = 0
    with transaction.atomic():
        assets = tenant_assets(scope).filter(
            id__in=list(asset_ids),
            is_deleted=False,
        )
        for asset in assets.select_for_update():
            values = asset.get_metadata()
            if value:
                values[key] = value
            elif values.pop(key, None) is None:
                continue
            asset.set_metadata(values)
            asset.save(update_fields=['metadata', 'updated_at'])
            updated += 1

    logger.info(
        'Metadata key %r %s on %d assets (company: %s)',
        key,
        'set' if value else 'removed',
        updated,
        scope.company_id,
    )
    return updated
