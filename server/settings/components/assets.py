"""Asset catalog settings."""

from server.settings.components import config

# Return nothing instead of everything when every AND condition is unusable
ASSET_SEARCH_STRICT_AND = config(
    'ASSET_SEARCH_STRICT_AND',
    cast=bool,
    default=False,
)

# Upper bound for a requested page size; unset means no bound
ASSET_SEARCH_MAX_PAGE_SIZE = config(
    'ASSET_SEARCH_MAX_PAGE_SIZE',
    cast=lambda size: int(size) if size else None,
    default='',
)

# Soft-deleted assets older than this are purged by cleanup_trash
ASSET_TRASH_RETENTION_DAYS = config(
    'ASSET_TRASH_RETENTION_DAYS',
    cast=int,
    default=30,
)
