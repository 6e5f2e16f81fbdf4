"""Tests for asset catalog business logic."""

import hashlib
import uuid
from datetime import UTC, datetime

import pytest
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile

from server.apps.assets.exceptions import TenantMismatchError
from server.apps.assets.logic.asset_operations import (
    find_duplicates,
    move_asset,
    register_asset,
)
from server.apps.assets.logic.tenancy import TenantScope
from server.apps.assets.models import Asset, Folder

BUCKET_NAME = 'asset-catalog'


@pytest.mark.django_db
class TestRegisterAsset:
    """Tests for register_asset function."""

    def test_register_catalog_only(self, user):
        """Test a row without content derives type from the name."""
        asset = register_asset(
            user,
            '  Holiday.JPG ',
            2048,
            metadata={'camera': 'X100'},
        )

        assert asset.file_name == 'Holiday.JPG'
        assert asset.file_type == 'image'
        assert asset.mime_type == 'image/jpeg'
        assert asset.company_id is None
        assert asset.metadata == '{"camera":"X100"}'
        assert not asset.file
        assert asset.checksum_sha256 == ''

    def test_register_with_content(self, user, mock_s3, sample_file_content):
        """Test content is uploaded under the asset id with a checksum."""
        asset = register_asset(
            user,
            'notes.txt',
            sample_file_content.size,
            file=sample_file_content,
        )

        assert asset.file.name == f'{asset.pk}/notes.txt'
        assert asset.checksum_sha256 == hashlib.sha256(
            b'test file content',
        ).hexdigest()
        body = mock_s3.Object(BUCKET_NAME, asset.file.name).get()['Body']
        assert body.read() == b'test file content'

    def test_register_in_company(self, company, company_user):
        """Test assets land in the user's company."""
        folder = Folder.objects.create(
            user=company_user,
            company=company,
            name='Campaigns',
        )

        asset = register_asset(company_user, 'brief.pdf', 10, folder=folder)

        assert asset.company_id == company.pk
        assert asset.folder_id == folder.pk
        assert asset.file_type == 'document'

    def test_explicit_mime_type(self, user):
        """Test an explicit MIME type wins over detection."""
        asset = register_asset(user, 'clip', 10, mime_type='video/mp4')

        assert asset.mime_type == 'video/mp4'
        assert asset.file_type == 'video'

    @pytest.mark.parametrize(('file_name', 'size_bytes'), [
        ('   ', 10),
        ('photo.jpg', -1),
    ])
    def test_invalid_input(self, user, file_name, size_bytes):
        """Test blank names and negative sizes are rejected."""
        with pytest.raises(ValidationError):
            register_asset(user, file_name, size_bytes)

        assert not Asset.all_objects.exists()

    def test_folder_of_other_tenant(self, user, company, company_user):
        """Test a folder from another tenant is rejected."""
        folder = Folder.objects.create(
            user=company_user,
            company=company,
            name='Acme only',
        )

        with pytest.raises(ValidationError, match='another tenant'):
            register_asset(user, 'photo.jpg', 10, folder=folder)

    def test_failed_row_rolls_back_upload(
        self,
        user,
        mock_s3,
        sample_file_content,
        monkeypatch,
    ):
        """Test the uploaded object is removed when the row fails."""
        def broken_serializer(values):
            raise RuntimeError('serializer down')

        monkeypatch.setattr(
            'server.apps.assets.logic.asset_operations.serialize_metadata',
            broken_serializer,
        )

        with pytest.raises(RuntimeError, match='serializer down'):
            register_asset(user, 'notes.txt', 17, file=sample_file_content)

        assert not Asset.all_objects.exists()
        assert list(mock_s3.Bucket(BUCKET_NAME).objects.all()) == []


@pytest.mark.django_db
class TestFindDuplicates:
    """Tests for find_duplicates function."""

    def test_reports_oldest_live_match(self, make_asset):
        """Test each known checksum maps to its oldest live asset."""
        digest = 'ab' * 32
        oldest = make_asset(
            checksum_sha256=digest,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        make_asset(
            checksum_sha256=digest,
            created_at=datetime(2024, 2, 1, tzinfo=UTC),
        )

        duplicates = find_duplicates(
            TenantScope(),
            [digest.upper(), 'cd' * 32, '  '],
        )

        assert duplicates == {digest: oldest}

    def test_ignores_trash_and_other_tenants(
        self,
        make_asset,
        company,
        company_user,
    ):
        """Test trashed rows and foreign tenants are not duplicates."""
        digest = 'ef' * 32
        make_asset(
            checksum_sha256=digest,
            is_deleted=True,
            deleted_at=datetime(2024, 3, 1, tzinfo=UTC),
        )
        acme = make_asset(
            user=company_user,
            company=company,
            checksum_sha256=digest,
        )

        assert find_duplicates(TenantScope(deleted=True), [digest]) == {}
        assert find_duplicates(TenantScope(company.pk), [digest]) == {
            digest: acme,
        }

    def test_no_checksums(self):
        """Test an empty request answers without matches."""
        assert find_duplicates(TenantScope(), []) == {}


@pytest.mark.django_db
class TestMoveAsset:
    """Tests for move_asset function."""

    def test_move_into_folder_and_back(self, make_asset, user):
        """Test an asset moves into a folder and back to the top level."""
        asset = make_asset()
        folder = Folder.objects.create(user=user, name='Archive')

        moved = move_asset(TenantScope(), asset.pk, folder.pk)

        assert moved.folder_id == folder.pk
        asset.refresh_from_db()
        assert asset.folder_id == folder.pk

        move_asset(TenantScope(), asset.pk, None)
        asset.refresh_from_db()
        assert asset.folder_id is None

    def test_folder_of_other_tenant(self, make_asset, company, company_user):
        """Test a folder of another tenant is refused."""
        asset = make_asset()
        folder = Folder.objects.create(
            user=company_user,
            company=company,
            name='Acme only',
        )

        with pytest.raises(TenantMismatchError):
            move_asset(TenantScope(), asset.pk, folder.pk)

        asset.refresh_from_db()
        assert asset.folder_id is None

    def test_asset_of_other_tenant(self, make_asset, company, company_user):
        """Test a caller cannot move another tenant's asset."""
        acme = make_asset(user=company_user, company=company)

        with pytest.raises(Asset.DoesNotExist):
            move_asset(TenantScope(), acme.pk, None)

    def test_unknown_folder(self, make_asset):
        """Test an unknown folder id raises DoesNotExist."""
        asset = make_asset()

        with pytest.raises(Folder.DoesNotExist):
            move_asset(TenantScope(), asset.pk, uuid.uuid4())
