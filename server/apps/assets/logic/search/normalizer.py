"""Canonical spelling of condition field and operator names."""

from typing import Final

_DEFAULT_OPERATOR: Final = 'equals'

# Characters clients use to separate words: "File Name", "file_name", "file-name"
_SEPARATORS: Final = str.maketrans('', '', ' _-.\t')


def normalize_field(field: str | None) -> str:
    """Turn a client field name into its lookup token.

    Args:
        field: Raw field name, e.g. 'File Name' or 'date_created'.

    Returns:
        Lowercase token without whitespace or separators, e.g. 'filename'.
    """
    return (field or '').strip().translate(_SEPARATORS).lower()


def normalize_operator(operator: str | None) -> str:
    """Turn a client operator name into its lookup token.

    A missing or blank operator means 'equals'.

    Args:
        operator: Raw operator name, e.g. 'Starts With'.

    Returns:
        Lowercase token, e.g. 'startswith'.
    """
    token = (operator or '').strip().translate(_SEPARATORS).lower()
    return token or _DEFAULT_OPERATOR
