"""Management command to clean up old assets from trash."""

from typing import Any, Final

from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.assets.logic.trash_operations import (
    expired_trash,
    purge_expired_assets,
)

_DEFAULT_RETENTION_DAYS: Final = 30
_DEFAULT_BATCH_SIZE: Final = 1000


class Command(BaseCommand):
    """Permanently delete assets whose trash retention has run out."""

    help = 'Clean up assets kept in trash longer than ASSET_TRASH_RETENTION_DAYS'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max assets to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        retention_days = getattr(
            settings,
            'ASSET_TRASH_RETENTION_DAYS',
            _DEFAULT_RETENTION_DAYS,
        )

        self.stdout.write(
            f'Looking for assets deleted more than {retention_days} days ago',
        )

        if not dry_run:
            purged = purge_expired_assets(retention_days, batch_size)
            self.stdout.write(
                self.style.SUCCESS(f'Purged {purged} assets from trash'),
            )
            return

        expired = expired_trash(retention_days, batch_size)
        for asset in expired:
            self.stdout.write(
                f'Would delete: {asset.file_name} '
                f'(ID: {asset.pk}, deleted: {asset.deleted_at})',
            )
        self.stdout.write(
            self.style.SUCCESS(f'Would purge {len(expired)} assets from trash'),
        )
