"""Tests for metadata business logic."""

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from server.apps.assets.logic.metadata_operations import update_metadata_batch
from server.apps.assets.logic.tenancy import TenantScope


@pytest.mark.django_db
class TestUpdateMetadataBatch:
    """Tests for update_metadata_batch function."""

    def test_sets_key_on_every_asset(self, make_asset):
        """Test the key is added next to existing keys."""
        first = make_asset(metadata='{"camera":"X100"}')
        second = make_asset()

        updated = update_metadata_batch(
            TenantScope(),
            [first.pk, second.pk],
            ' project ',
            ' Spring ',
        )

        assert updated == 2
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.get_metadata() == {'camera': 'X100', 'project': 'Spring'}
        assert second.metadata == '{"project":"Spring"}'

    def test_blank_value_removes_key(self, make_asset):
        """Test a blank value removes the key and skips assets without it."""
        tagged = make_asset(metadata='{"project":"Spring"}')
        untagged = make_asset()

        updated = update_metadata_batch(
            TenantScope(),
            [tagged.pk, untagged.pk],
            'project',
            '   ',
        )

        assert updated == 1
        tagged.refresh_from_db()
        assert tagged.metadata is None

    def test_skips_other_tenants_and_trash(self, make_asset, company, company_user):
        """Test rows outside the scope are never touched."""
        foreign = make_asset(user=company_user, company=company)
        trashed = make_asset(is_deleted=True, deleted_at=timezone.now())

        updated = update_metadata_batch(
            TenantScope(),
            [foreign.pk, trashed.pk],
            'project',
            'Spring',
        )

        assert updated == 0
        foreign.refresh_from_db()
        trashed.refresh_from_db()
        assert foreign.metadata is None
        assert trashed.metadata is None

    def test_blank_key(self, make_asset):
        """Test a blank key is rejected."""
        asset = make_asset()

        with pytest.raises(ValidationError):
            update_metadata_batch(TenantScope(), [asset.pk], ' ', 'value')
