"""Business logic for registering, moving and deduplicating assets."""

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, BinaryIO

from django.core.exceptions import ValidationError
from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from django.db import transaction

from server.apps.assets.infrastructure.metadata import (
    calculate_checksum,
    classify_file_type,
    detect_mime_type,
    serialize_metadata,
)
from server.apps.assets.exceptions import TenantMismatchError
from server.apps.assets.logic.tenancy import (
    TenantScope,
    company_id_for_user,
    tenant_assets,
)
from server.apps.assets.models import Asset, Folder

if TYPE_CHECKING:
    from server.apps.assets.infrastructure.storage import AssetStorage

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def _get_storage() -> 'AssetStorage':
    """Get the configured default storage backend."""
    return default_storage  # type: ignore[return-value]


def _storage_path(asset_id: uuid.UUID, file_name: str) -> str:
    return f'{asset_id}/{file_name}'


def register_asset(  # noqa: WPS211
    user: _User,
    file_name: str,
    size_bytes: int,
    *,
    folder: Folder | None = None,
    mime_type: str | None = None,
    metadata: Mapping[str, str] | None = None,
    file: BinaryIO | DjangoFile | None = None,
) -> Asset:
    """Create a catalog row in the user's tenant.

    When ``file`` is given it is uploaded first and removed again if the
    row cannot be created.

    Args:
        user: Owner of the asset.
        file_name: Display name, also used to derive MIME and file type.
        size_bytes: Size of the file in bytes.
        folder: Optional folder of the same tenant.
        mime_type: MIME type; detected from ``file_name`` when omitted.
        metadata: Initial metadata mapping.
        file: Optional file content to store.

    Returns:
        Created Asset instance.

    Raises:
        ValidationError: If the name is blank, the size is negative or
            the folder belongs to another tenant.
    """
    file_name = file_name.strip()
    if not file_name:
        raise ValidationError('File name must not be blank')
    if size_bytes < 0:
        raise ValidationError(f'File size must not be negative: {size_bytes}')

    company_id = company_id_for_user(user)
    if folder is not None and folder.company_id != company_id:
        raise ValidationError(
            f'Folder {folder.pk} belongs to another tenant',
        )

    mime_type = mime_type or detect_mime_type(file_name)
    asset_id = uuid.uuid4()

    saved_name = ''
    checksum = ''
    storage = _get_storage()
    if file is not None:
        checksum = calculate_checksum(file)
        saved_name = storage.save(_storage_path(asset_id, file_name), file)

    try:
        with transaction.atomic():
            asset = Asset.objects.create(
                id=asset_id,
                user=user,
                company_id=company_id,
                folder=folder,
                file=saved_name,
                file_name=file_name,
                file_type=classify_file_type(mime_type, file_name),
                mime_type=mime_type,
                size_bytes=size_bytes,
                checksum_sha256=checksum,
                metadata=serialize_metadata(metadata or {}),
            )
    except Exception:
        logger.exception('Failed to register asset: %s', file_name)
        if saved_name:
            storage.rollback_upload(saved_name)
        raise

    logger.info(
        'Asset registered: %s (ID: %s, type: %s, size: %d)',
        file_name,
        asset.pk,
        asset.file_type,
        size_bytes,
    )
    return asset


def find_duplicates(
    scope: TenantScope,
    checksums: Iterable[str],
) -> dict[str, Asset]:
    """Live assets of a tenant that already hold the given content.

    Checksums are compared lowercased; blank entries are ignored. When
    several assets share a checksum the oldest one is reported.

    Args:
        scope: Tenant scope of the caller; its trash flag is ignored.
        checksums: Hex SHA-256 digests of candidate uploads.

    Returns:
        Mapping of checksum to the existing asset with that content.
    """
    wanted = {
        checksum.strip().lower()
        for checksum in checksums
        if checksum and checksum.strip()
    }
    if not wanted:
        return {}

    duplicates: dict[str, Asset] = {}
    candidates = tenant_assets(TenantScope(scope.company_id)).filter(
        checksum_sha256__in=wanted,
    ).order_by('created_at')
    for asset in candidates:
        duplicates.setdefault(asset.checksum_sha256, asset)

    logger.info(
        'Duplicate check: %d of %d checksums already stored (company: %s)',
        len(duplicates),
        len(wanted),
        scope.company_id,
    )
    return duplicates


def move_asset(
    scope: TenantScope,
    asset_id: uuid.UUID,
    folder_id: uuid.UUID | None,
) -> Asset:
    """Move a live asset into another folder of its tenant.

    Args:
        scope: Tenant scope of the caller.
        asset_id: ID of the asset.
        folder_id: Target folder, or None for the top level.

    Returns:
        Updated Asset instance.

    Raises:
        Asset.DoesNotExist: If the tenant has no live asset with this ID.
        Folder.DoesNotExist: If the folder is unknown.
        TenantMismatchError: If the folder belongs to another tenant.
    """
    asset = tenant_assets(TenantScope(scope.company_id)).get(id=asset_id)

    folder = None
    if folder_id is not None:
        folder = Folder.objects.get(pk=folder_id)
        if folder.company_id != scope.company_id:
            raise TenantMismatchError(scope.company_id, folder.company_id)

    asset.folder = folder
    asset.save(update_fields=['folder', 'updated_at'])

    logger.info(
        'Asset moved: %s (ID: %s, folder: %s)',
        asset.file_name,
        asset_id,
        folder_id,
    )
    return asset
