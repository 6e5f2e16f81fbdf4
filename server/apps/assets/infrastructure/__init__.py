"""Infrastructure layer for assets app.

This package contains integrations with external systems:
- S3-compatible storage backend for asset files
- Metadata helpers (MIME type, file category, metadata blob codec)

Keep infrastructure concerns separate from business logic.
"""
