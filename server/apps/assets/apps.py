"""Django app configuration for assets app."""

from typing import override

from django.apps import AppConfig


class AssetsConfig(AppConfig):
    """Configuration for assets app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.assets'
    verbose_name = 'Assets'

    @override
    def ready(self) -> None:
        """Register signal handlers and search lookups."""
        from server.apps.assets import lookups, signals  # noqa: F401
