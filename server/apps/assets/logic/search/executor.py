"""Run a search request against a data source."""

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from django.conf import settings

from server.apps.assets.exceptions import SearchExecutionError
from server.apps.assets.logic.folder_operations import get_descendant_folder_ids
from server.apps.assets.logic.search.builders import build_condition_predicates
from server.apps.assets.logic.search.combinator import combine
from server.apps.assets.logic.search.predicates import (
    MATCH_NONE,
    And,
    Compare,
    Predicate,
)
from server.apps.assets.logic.search.records import AssetRecord
from server.apps.assets.logic.search.request import SearchRequest
from server.apps.assets.logic.search.schemas import SearchResponse
from server.apps.assets.logic.search.sorting import resolve_ordering
from server.apps.assets.logic.search.sources import DataSource
from server.apps.assets.logic.tenancy import TenantScope

logger = logging.getLogger(__name__)

type FolderResolver = Callable[[uuid.UUID], Iterable[uuid.UUID]]


@dataclass(frozen=True)
class SearchPage:
    """One page of search results."""

    assets: tuple[AssetRecord, ...]
    total: int
    page: int
    has_more: bool

    def as_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase response shape."""
        return SearchResponse.model_validate(self).model_dump(
            by_alias=True,
            mode='json',
        )


def scope_predicate(scope: TenantScope) -> Predicate:
    """Mandatory tenant and deletion filter of a scope."""
    if scope.is_root:
        tenant = Compare('company_id', 'isnull', True)
    else:
        tenant = Compare('company_id', 'eq', scope.company_id)
    return And((tenant, Compare('is_deleted', 'eq', scope.deleted)))


def compile_request(
    request: SearchRequest,
    *,
    strict_and: bool | None = None,
) -> Predicate:
    """Compile the user conditions of a request into one predicate.

    Args:
        request: Search request.
        strict_and: Return nothing instead of everything when an AND
            search had conditions but none of them was usable. Defaults
            to the ``ASSET_SEARCH_STRICT_AND`` setting.

    Returns:
        Combined predicate, without scope filters.
    """
    predicates = build_condition_predicates(request.conditions)
    logger.debug(
        'Built %d of %d search predicates',
        len(predicates),
        len(request.conditions),
    )

    if request.conditions and not predicates and not request.uses_or:
        if strict_and is None:
            strict_and = getattr(settings, 'ASSET_SEARCH_STRICT_AND', False)
        logger.warning(
            'None of %d AND search conditions was usable, %s',
            len(request.conditions),
            'matching nothing' if strict_and else 'matching every asset',
        )
        if strict_and:
            return MATCH_NONE

    return combine(predicates, use_or=request.uses_or)


def _resolve_page_size(page_size: int | None) -> int | None:
    if page_size is None or page_size <= 0:
        return None
    max_page_size = getattr(settings, 'ASSET_SEARCH_MAX_PAGE_SIZE', None)
    if max_page_size is None or max_page_size <= 0:
        return page_size
    return min(page_size, max_page_size)


def execute_search(
    request: SearchRequest,
    scope: TenantScope,
    source: DataSource,
    *,
    folder_resolver: FolderResolver | None = None,
    strict_and: bool | None = None,
) -> SearchPage:
    """Execute a search within a tenant scope.

    Scope filters (tenant, deletion state, folder subtree) always apply,
    whatever the conditions say.

    Args:
        request: Search request.
        scope: Tenant scope of the caller.
        source: Data source to query.
        folder_resolver: Maps a folder id to itself plus descendants.
            Defaults to walking the ``Folder`` table.
        strict_and: See ``compile_request``.

    Returns:
        Requested page, total match count and whether more pages exist.

    Raises:
        SearchExecutionError: If the data source fails.
    """
    logger.info(
        'Asset search: logic=%s conditions=%d folder=%s sort=%s/%s '
        'page=%d page_size=%s company=%s deleted=%s',
        'OR' if request.uses_or else 'AND',
        len(request.conditions),
        request.folder_id,
        request.sort_by,
        request.sort_dir,
        request.page,
        request.page_size,
        scope.company_id,
        scope.deleted,
    )

    filters: list[Predicate] = [scope_predicate(scope)]
    if request.folder_id is not None:
        resolver = folder_resolver or get_descendant_folder_ids
        folder_ids = frozenset(resolver(request.folder_id))
        filters.append(Compare('folder_id', 'in', folder_ids))
    filters.append(compile_request(request, strict_and=strict_and))

    ordering = resolve_ordering(request.sort_by, request.sort_dir)
    page = max(request.page, 1)
    page_size = _resolve_page_size(request.page_size)
    offset = (page - 1) * page_size if page_size is not None else 0

    try:
        rows, total = source.fetch(And(tuple(filters)), ordering, offset, page_size)
    except Exception as exc:
        logger.exception('Asset search failed in data source %s', source.name)
        raise SearchExecutionError(source.name) from exc

    has_more = page_size is not None and page * page_size < total
    return SearchPage(
        assets=tuple(rows),
        total=total,
        page=page,
        has_more=has_more,
    )
