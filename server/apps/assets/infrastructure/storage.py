"""Storage backend for asset files."""

import logging
from typing import Any, final, override

from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class AssetStorage(S3Storage):
    """S3 storage for asset files.

    Extends django-storages S3Storage with logged writes and deletes,
    and best-effort cleanup for uploads whose catalog row never made it
    or no longer exists.
    """

    @override
    def save(
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Upload an asset object with logging.

        Args:
            name: Requested storage path.
            content: File-like object.
            max_length: Optional maximum length of the stored name.

        Returns:
            Storage path actually used.

        Raises:
            Exception: If the S3 upload fails.
        """
        try:
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to upload asset object: %s', name)
            raise
        logger.info('Uploaded asset object: %s', saved_name)
        return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete an object from S3 with logging.

        Args:
            name: Storage path of the object.

        Raises:
            Exception: If the S3 delete fails.
        """
        try:
            logger.info('Deleting asset object from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete asset object: %s', name)
            raise

    def purge(self, name: str) -> bool:
        """Remove an object whose catalog row no longer exists.

        Failures are logged, not raised: the row is already gone and
        a leftover object only costs space.

        Args:
            name: Storage path of the object.

        Returns:
            True if the object existed and was removed.
        """
        try:
            if not self.exists(name):
                logger.warning('Asset object already missing: %s', name)
                return False
            self.delete(name)
        except Exception:
            logger.exception('Orphaned asset object left in storage: %s', name)
            return False
        return True

    def rollback_upload(self, name: str) -> None:
        """Remove an upload whose catalog row could not be created.

        Args:
            name: Storage path of the uploaded object.
        """
        logger.warning('Rolling back asset upload: %s', name)
        self.purge(name)
