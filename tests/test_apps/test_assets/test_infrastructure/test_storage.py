"""Tests for the S3 asset storage backend."""

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from server.apps.assets.infrastructure.storage import AssetStorage

BUCKET_NAME = 'asset-catalog'


def test_default_storage_is_asset_storage():
    """Test the settings wire AssetStorage as default storage."""
    assert isinstance(default_storage, AssetStorage)


@pytest.mark.usefixtures('mock_s3')
class TestAssetStorage:
    """Tests for AssetStorage upload and cleanup helpers."""

    def test_save_uploads_object(self, mock_s3):
        """Test save stores the object under the requested name."""
        saved = default_storage.save('a1/poster.png', ContentFile(b'png'))

        assert saved == 'a1/poster.png'
        body = mock_s3.Object(BUCKET_NAME, saved).get()['Body']
        assert body.read() == b'png'

    def test_purge_existing_object(self, mock_s3):
        """Test purge removes an object and reports it."""
        mock_s3.Bucket(BUCKET_NAME).put_object(Key='a2/clip.mp4', Body=b'x')

        assert default_storage.purge('a2/clip.mp4') is True
        assert list(mock_s3.Bucket(BUCKET_NAME).objects.all()) == []

    def test_purge_missing_object(self):
        """Test purge of a missing object is a logged no-op."""
        assert default_storage.purge('a3/missing.jpg') is False

    def test_rollback_upload(self, mock_s3):
        """Test rollback removes a just-uploaded object."""
        saved = default_storage.save('a4/notes.txt', ContentFile(b'notes'))

        default_storage.rollback_upload(saved)

        assert list(mock_s3.Bucket(BUCKET_NAME).objects.all()) == []
