"""Database models for assets app."""

import uuid
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

from server.apps.assets.infrastructure.metadata import (
    deserialize_metadata,
    serialize_metadata,
)

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_FILE_NAME_MAX_LENGTH: Final = 500
_FILE_TYPE_MAX_LENGTH: Final = 20
_MIME_TYPE_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_TAG_NAME_MAX_LENGTH: Final = 100
_TAG_COLOR_MAX_LENGTH: Final = 7  # Hex color: #RRGGBB


class FileType(models.TextChoices):
    """Coarse file category shown in the catalog."""

    IMAGE = 'image', 'Image'
    VIDEO = 'video', 'Video'
    AUDIO = 'audio', 'Audio'
    DOCUMENT = 'document', 'Document'
    ARCHIVE = 'archive', 'Archive'
    OTHER = 'other', 'Other'


@final
class Company(models.Model):
    """Tenant owning a shared slice of the catalog."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=_NAME_MAX_LENGTH, unique=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Company'  # type: ignore[mutable-override]
        verbose_name_plural = 'Companies'  # type: ignore[mutable-override]
        ordering = ['name']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name


@final
class CompanyMembership(models.Model):
    """Links a user to their company.

    Users without a membership belong to the root tenant, which owns
    every catalog row with no company.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='company_membership',
        primary_key=True,
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='memberships',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Company Membership'  # type: ignore[mutable-override]
        verbose_name_plural = 'Company Memberships'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user}@{self.company}'


@final
class Folder(models.Model):
    """Folder in the tenant's folder tree."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='children',
        null=True,
        blank=True,
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='folders',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering = ['name']

        indexes = [
            # Descendant lookups walk the tree level by level
            models.Index(
                fields=['parent'],
                name='folders_parent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name


@final
class Tag(models.Model):
    """Named, colored tag for organizing assets.

    Tags belong to the tenant of the user who created them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tags',
        db_index=True,
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='tags',
        null=True,
        blank=True,
    )

    name = models.CharField(
        max_length=_TAG_NAME_MAX_LENGTH,
    )

    color = models.CharField(
        max_length=_TAG_COLOR_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Hex color code for UI display (e.g., #FF5733)',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Tag'  # type: ignore[mutable-override]
        verbose_name_plural = 'Tags'  # type: ignore[mutable-override]
        ordering = ['name']

        constraints = [
            # Ensure tag names are unique per user
            models.UniqueConstraint(
                fields=['user', 'name'],
                name='tags_user_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name


class ActiveAssetManager(models.Manager['Asset']):
    """Manager hiding soft-deleted assets."""

    @override
    def get_queryset(self) -> models.QuerySet['Asset']:
        """Exclude assets that are in the trash."""
        return super().get_queryset().filter(is_deleted=False)


@final
class Asset(models.Model):
    """Catalog entry for one stored file.

    The ``metadata`` column is an opaque blob of compact JSON written by
    ``serialize_metadata``. Search matches it with substring patterns,
    so it must never be written by any other serializer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='assets',
        db_index=True,
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='assets',
        null=True,
        blank=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.SET_NULL,
        related_name='assets',
        null=True,
        blank=True,
    )

    # Stored object, empty for catalog-only rows
    file = models.FileField(
        upload_to='',
        blank=True,
        max_length=_FILE_NAME_MAX_LENGTH,
    )

    file_name = models.CharField(max_length=_FILE_NAME_MAX_LENGTH)

    file_type = models.CharField(
        max_length=_FILE_TYPE_MAX_LENGTH,
        choices=FileType.choices,
        default=FileType.OTHER,
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        blank=True,
        default='',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        blank=True,
        default='',
        db_index=True,
    )

    metadata = models.TextField(
        null=True,
        blank=True,
        help_text='Compact JSON object of string keys and values',
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Trash
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    tags = models.ManyToManyField(
        Tag,
        through='AssetTag',
        related_name='assets',
        blank=True,
    )

    objects: ClassVar[ActiveAssetManager] = ActiveAssetManager()
    all_objects: ClassVar[models.Manager['Asset']] = models.Manager()

    class Meta:
        """Model metadata."""

        verbose_name = 'Asset'  # type: ignore[mutable-override]
        verbose_name_plural = 'Assets'  # type: ignore[mutable-override]
        ordering = ['-created_at']
        base_manager_name = 'all_objects'

        indexes = [
            # Every search starts from the tenant + trash filters
            models.Index(
                fields=['company', 'is_deleted'],
                name='assets_scope_idx',
            ),
            models.Index(
                fields=['is_deleted', 'deleted_at'],
                name='assets_trash_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='assets_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.file_name

    def get_metadata(self) -> dict[str, str]:
        """Decode the metadata blob.

        Returns:
            Metadata mapping, empty when the blob is missing or malformed.
        """
        return deserialize_metadata(self.metadata)

    def set_metadata(self, values: dict[str, str]) -> None:
        """Replace the metadata blob (caller saves).

        Args:
            values: New metadata mapping.
        """
        self.metadata = serialize_metadata(values)


@final
class AssetTag(models.Model):
    """Membership of an asset in a tag."""

    asset = models.ForeignKey(
        Asset,
        on_delete=models.CASCADE,
        related_name='asset_tags',
    )

    tag = models.ForeignKey(
        Tag,
        on_delete=models.CASCADE,
        related_name='asset_tags',
    )

    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Asset Tag'  # type: ignore[mutable-override]
        verbose_name_plural = 'Asset Tags'  # type: ignore[mutable-override]

        constraints = [
            models.UniqueConstraint(
                fields=['asset', 'tag'],
                name='asset_tags_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.asset_id}:{self.tag_id}'
