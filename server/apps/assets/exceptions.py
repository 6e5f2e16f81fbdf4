"""Exceptions for assets app."""


class InvalidSearchRequestError(Exception):
    """Raised when a search request is not shaped like a search request.

    Individual conditions never raise; an unusable condition is dropped.
    This error covers the envelope: a body that is not an object,
    conditions that are not a list, or an unparseable folder id.
    """


class SearchExecutionError(Exception):
    """Raised when the data source fails while running a search."""

    def __init__(self, source_name: str) -> None:
        """Initialize SearchExecutionError.

        Args:
            source_name: Name of the data source that failed.
        """
        self.source_name = source_name
        super().__init__(f'Asset search failed in data source {source_name}')


class TenantMismatchError(Exception):
    """Raised when an operation mixes rows of different tenants."""

    def __init__(self, expected: object, actual: object) -> None:
        """Initialize TenantMismatchError.

        Args:
            expected: Company id of the acting tenant.
            actual: Company id found on the row.
        """
        self.expected = expected
        self.actual = actual
        super().__init__(
            f'Tenant mismatch: expected company {expected}, got {actual}',
        )
