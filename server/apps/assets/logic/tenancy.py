"""Tenant scope of catalog reads and writes."""

import uuid
from dataclasses import dataclass, replace
from typing import Any

from django.db.models import QuerySet

from server.apps.assets.models import Asset, CompanyMembership

# User type for Django's dynamic user model
_User = Any


@dataclass(frozen=True)
class TenantScope:
    """Which rows a caller may see.

    ``company_id`` None is the root tenant, which owns rows without a
    company. ``deleted`` selects the trash instead of live assets.
    """

    company_id: uuid.UUID | None = None
    deleted: bool = False

    @property
    def is_root(self) -> bool:
        """Whether this is the root tenant."""
        return self.company_id is None

    def trash(self) -> 'TenantScope':
        """Same tenant, deleted assets."""
        return replace(self, deleted=True)


def company_id_for_user(user: _User) -> uuid.UUID | None:
    """Company of a user, or None for the root tenant.

    Args:
        user: Authenticated user.

    Returns:
        Company id from the user's membership.
    """
    return (
        CompanyMembership.objects
        .filter(user=user)
        .values_list('company_id', flat=True)
        .first()
    )


def scope_for_user(user: _User, *, deleted: bool = False) -> TenantScope:
    """Build the scope of everything a user may search.

    Args:
        user: Authenticated user.
        deleted: Scope the trash instead of live assets.

    Returns:
        Tenant scope of the user's company.
    """
    return TenantScope(company_id=company_id_for_user(user), deleted=deleted)


def tenant_assets(scope: TenantScope) -> QuerySet[Asset]:
    """Assets of the scope's tenant in the scope's deletion state.

    Args:
        scope: Tenant scope.

    Returns:
        Queryset over ``Asset.all_objects``.
    """
    assets = Asset.all_objects.filter(is_deleted=scope.deleted)
    if scope.is_root:
        return assets.filter(company__isnull=True)
    return assets.filter(company_id=scope.company_id)
