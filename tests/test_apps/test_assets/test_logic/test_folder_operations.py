"""Tests for folder tree business logic."""

import uuid

import pytest

from server.apps.assets.logic.folder_operations import get_descendant_folder_ids
from server.apps.assets.models import Folder


@pytest.mark.django_db
class TestGetDescendantFolderIds:
    """Tests for get_descendant_folder_ids function."""

    def test_collects_whole_subtree(self, user):
        """Test every level below the folder is included."""
        root = Folder.objects.create(user=user, name='root')
        child = Folder.objects.create(user=user, name='child', parent=root)
        grandchild = Folder.objects.create(
            user=user,
            name='grandchild',
            parent=child,
        )
        Folder.objects.create(user=user, name='elsewhere')

        assert get_descendant_folder_ids(root.pk) == {
            root.pk,
            child.pk,
            grandchild.pk,
        }
        assert get_descendant_folder_ids(grandchild.pk) == {grandchild.pk}

    def test_cycle_terminates(self, user):
        """Test a corrupted tree with a cycle is walked once."""
        first = Folder.objects.create(user=user, name='first')
        second = Folder.objects.create(user=user, name='second', parent=first)
        first.parent = second
        first.save()

        assert get_descendant_folder_ids(first.pk) == {first.pk, second.pk}

    def test_unknown_folder(self, db):
        """Test an unknown folder resolves to itself."""
        folder_id = uuid.uuid4()

        assert get_descendant_folder_ids(folder_id) == {folder_id}
