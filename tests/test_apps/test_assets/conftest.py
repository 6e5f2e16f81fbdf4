"""Shared fixtures for assets app tests."""

import uuid
from datetime import UTC, datetime

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.assets.logic.search.records import AssetRecord
from server.apps.assets.models import Asset, Company, CompanyMembership

User = get_user_model()

BUCKET_NAME = 'asset-catalog'


@pytest.fixture
def user(db):
    """Create test user in the root tenant.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def company(db):
    """Create a tenant company.

    Returns:
        Company instance.
    """
    return Company.objects.create(name='Acme Studio')


@pytest.fixture
def company_user(company):
    """Create a user belonging to ``company``.

    Returns:
        User instance with a company membership.
    """
    member = User.objects.create_user(
        username='acmeuser',
        password='testpass123',
        email='acme@example.com',
    )
    CompanyMembership.objects.create(user=member, company=company)
    return member


@pytest.fixture
def mock_s3(monkeypatch):
    """Mock S3 service with asset-catalog bucket.

    Yields:
        boto3 S3 resource with asset-catalog bucket created.
    """
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')

    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=BUCKET_NAME)
        yield conn


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')


@pytest.fixture
def make_asset(user):
    """Factory for catalog rows without stored objects.

    Returns:
        Callable creating an Asset; keyword arguments override defaults.
    """
    def factory(**overrides):
        values = {
            'user': user,
            'file_name': 'photo.jpg',
            'file_type': 'image',
            'mime_type': 'image/jpeg',
            'size_bytes': 1024,
        }
        values.update(overrides)
        return Asset.all_objects.create(**values)

    return factory


@pytest.fixture
def make_record():
    """Factory for in-memory asset records.

    Returns:
        Callable creating an AssetRecord; keyword arguments override
        defaults.
    """
    def factory(**overrides):
        values = {
            'id': uuid.uuid4(),
            'file_name': 'photo.jpg',
            'file_type': 'image',
            'size_bytes': 1024,
            'created_at': datetime(2024, 1, 10, 12, 0, tzinfo=UTC),
            'mime_type': 'image/jpeg',
        }
        values.update(overrides)
        return AssetRecord(**values)

    return factory
