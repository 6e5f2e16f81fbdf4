"""Business logic layer for assets app.

This package contains all business logic of the catalog:
- Asset registration, metadata and tag maintenance
- Trash (soft delete, restore, purge)
- Folder tree and tenant scope resolution
- Advanced search (``search`` subpackage)

Keep business logic here, separate from models (data layer),
infrastructure (external systems) and views (HTTP).
"""
