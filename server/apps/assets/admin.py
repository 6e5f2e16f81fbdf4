"""Django admin configuration for assets app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.assets.models import (
    Asset,
    AssetTag,
    Company,
    CompanyMembership,
    Folder,
    Tag,
)


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


class AssetTagInline(admin.TabularInline):
    """Tag memberships shown on the asset page."""

    model = AssetTag
    extra = 0
    autocomplete_fields = ['tag']
    readonly_fields = ['assigned_at']


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin[Asset]):
    """Admin interface for Asset model, trash included."""

    list_display = [
        'file_name',
        'file_type',
        'company',
        'folder',
        'size_display',
        'created_at',
        'is_deleted',
    ]

    list_filter = [
        'file_type',
        'is_deleted',
        'company',
        'created_at',
    ]

    search_fields = [
        'file_name',
        'checksum_sha256',
        'metadata',
    ]

    readonly_fields = [
        'file',
        'size_bytes',
        'mime_type',
        'checksum_sha256',
        'created_at',
        'updated_at',
        'deleted_at',
    ]

    inlines = [AssetTagInline]

    fieldsets = (
        ('Asset', {
            'fields': ('file_name', 'file', 'user', 'company', 'folder'),
        }),
        ('File Information', {
            'fields': (
                'file_type',
                'mime_type',
                'size_bytes',
                'checksum_sha256',
            ),
        }),
        ('Metadata', {
            'fields': ('metadata',),
        }),
        ('Trash', {
            'fields': ('is_deleted', 'deleted_at'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: Asset) -> str:
        """Display asset size in human-readable format.

        Args:
            obj: Asset instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Asset]:
        """Include trashed assets and join owners.

        Args:
            request: HTTP request.

        Returns:
            QuerySet over every asset.
        """
        return Asset.all_objects.select_related('user', 'company', 'folder')


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin[Tag]):
    """Admin interface for Tag model."""

    list_display = [
        'name',
        'company',
        'user',
        'color_display',
        'asset_count',
        'created_at',
    ]

    list_filter = ['company']

    search_fields = ['name']

    readonly_fields = ['created_at']

    def color_display(self, obj: Tag) -> str:
        """Display color swatch with hex code.

        Args:
            obj: Tag instance.

        Returns:
            HTML formatted color swatch and code.
        """
        if obj.color:
            return format_html(
                '<span style="background-color: {color}; '
                'padding: 2px 10px; border: 1px solid #ccc;">'
                '&nbsp;</span> {color}',
                color=obj.color,
            )
        return '-'
    color_display.short_description = 'Color'  # type: ignore[attr-defined]

    def asset_count(self, obj: Tag) -> int:
        """Number of assets carrying this tag."""
        return obj.asset_tags.count()
    asset_count.short_description = 'Assets'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Tag]:
        """Join owners."""
        return super().get_queryset(request).select_related('user', 'company')


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model."""

    list_display = ['name', 'parent', 'company', 'user', 'created_at']
    list_filter = ['company']
    search_fields = ['name']
    autocomplete_fields = ['parent']


class CompanyMembershipInline(admin.TabularInline):
    """Users belonging to a company."""

    model = CompanyMembership
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin[Company]):
    """Admin interface for Company model."""

    list_display = ['name', 'created_at']
    search_fields = ['name']
    inlines = [CompanyMembershipInline]
