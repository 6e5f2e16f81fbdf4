"""JSON endpoints of the asset catalog."""

import json
import logging
from http import HTTPStatus

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from server.apps.assets.exceptions import (
    InvalidSearchRequestError,
    SearchExecutionError,
)
from server.apps.assets.logic.search.executor import execute_search
from server.apps.assets.logic.search.request import SearchRequest
from server.apps.assets.logic.search.sources import DjangoAssetSource
from server.apps.assets.logic.tenancy import scope_for_user
from server.apps.assets.logic.trash_operations import list_trash

logger = logging.getLogger(__name__)


def _error(detail: str, status: HTTPStatus) -> JsonResponse:
    return JsonResponse({'detail': detail}, status=status)


def _unauthenticated() -> JsonResponse:
    return _error('Authentication required', HTTPStatus.UNAUTHORIZED)


def _query_int(request: HttpRequest, name: str) -> int | None:
    raw = request.GET.get(name, '').strip()
    try:
        return int(raw)
    except ValueError:
        return None


@require_POST
def advanced_search(request: HttpRequest) -> JsonResponse:
    """Search the caller's live assets.

    Args:
        request: POST with a JSON search body.

    Returns:
        Page of matching assets, 400 for a malformed body, 503 if the
        database query fails.
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    try:
        payload = json.loads(request.body or b'{}')
        search_request = SearchRequest.from_payload(payload)
    except (ValueError, InvalidSearchRequestError) as exc:
        logger.info('Rejected search request: %s', exc)
        return _error(str(exc), HTTPStatus.BAD_REQUEST)

    try:
        page = execute_search(
            search_request,
            scope_for_user(request.user),
            DjangoAssetSource(),
        )
    except SearchExecutionError as exc:
        return _error(str(exc), HTTPStatus.SERVICE_UNAVAILABLE)

    return JsonResponse(page.as_payload())


@require_GET
def recycle_bin(request: HttpRequest) -> JsonResponse:
    """List the caller's trashed assets.

    Query parameters: ``page``, ``pageSize``, ``sortBy``, ``sortDir``.

    Args:
        request: GET request.

    Returns:
        Page of trashed assets, 503 if the database query fails.
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    try:
        page = list_trash(
            scope_for_user(request.user),
            page=_query_int(request, 'page') or 1,
            page_size=_query_int(request, 'pageSize'),
            sort_by=request.GET.get('sortBy') or None,
            sort_dir=request.GET.get('sortDir') or None,
        )
    except SearchExecutionError as exc:
        return _error(str(exc), HTTPStatus.SERVICE_UNAVAILABLE)

    return JsonResponse(page.as_payload())
