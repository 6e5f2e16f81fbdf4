"""Signal handlers for assets app."""

import logging

from django.core.files.storage import default_storage
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.assets.infrastructure.storage import AssetStorage
from server.apps.assets.models import Asset

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Asset)
def delete_asset_object(
    sender: type[Asset],
    instance: Asset,
    **kwargs: object,
) -> None:
    """Remove the stored object once its asset row is deleted.

    ``AssetStorage`` purges best-effort; other backends get a plain
    delete of an existing object.

    Args:
        sender: The Asset model class.
        instance: The Asset instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.file:
        return

    storage_name = instance.file.name
    logger.info(
        'Removing stored object after asset delete: %s (ID: %s)',
        storage_name,
        instance.pk,
    )
    # LazyObject forwards __class__, so isinstance sees the wrapped backend
    if isinstance(default_storage, AssetStorage):
        default_storage.purge(storage_name)
    elif default_storage.exists(storage_name):
        default_storage.delete(storage_name)
