"""Search request models and their wire-format parser.

The wire format is the camelCase JSON sent by the catalog frontend::

    {
        "logic": "AND",
        "conditions": [
            {"field": "fileSize", "operator": "between",
             "range": {"from": "1", "to": "5"}, "unit": "mb"}
        ],
        "sortBy": "metadata.camera",
        "sortDir": "asc",
        "page": 1,
        "pageSize": 50,
        "folderId": "0d8f..."
    }

Validation is lenient below the envelope: scalars become text, values
of the wrong shape become None and condition entries that are not
objects are skipped. Only a malformed envelope is rejected.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Annotated, Any, Final

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from server.apps.assets.exceptions import InvalidSearchRequestError
from server.apps.assets.logic.search.values import parse_identifier

logger = logging.getLogger(__name__)

LOGIC_AND: Final = 'AND'
LOGIC_OR: Final = 'OR'

_DEFAULT_FIELD: Final = 'FileName'
_DEFAULT_OPERATOR: Final = 'Equals'


def _as_text(value: object) -> str | None:
    if value is None or isinstance(value, Mapping | list | tuple):
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_texts(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, list | tuple):
        return None
    return tuple(
        text
        for text in (_as_text(item) for item in value)
        if text is not None
    )


def _as_range(value: object) -> object:
    if isinstance(value, Mapping | RangeValue):
        return value
    return None


def _as_conditions(value: object) -> tuple[object, ...]:
    if not value:
        return ()
    if not isinstance(value, list | tuple):
        raise ValueError('"conditions" must be a list')

    conditions = []
    for raw_condition in value:
        if not isinstance(raw_condition, Mapping | Condition):
            logger.debug('Skipping non-object condition: %r', raw_condition)
            continue
        conditions.append(raw_condition)
    return tuple(conditions)


def _as_folder_id(value: object) -> uuid.UUID | None:
    if value is None or value == '':
        return None
    folder_id = parse_identifier(value)
    if folder_id is None:
        raise ValueError(f'"folderId" is not a valid identifier: {value!r}')
    return folder_id


_Text = Annotated[str | None, BeforeValidator(_as_text)]
_Int = Annotated[int | None, BeforeValidator(_as_int)]

_MODEL_CONFIG: Final = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class RangeValue(BaseModel):
    """Explicit {from, to} pair of a range condition."""

    model_config = _MODEL_CONFIG

    start: _Text = Field(default=None, alias='from')
    end: _Text = Field(default=None, alias='to')


class Condition(BaseModel):
    """One field/operator/value rule of a search."""

    model_config = _MODEL_CONFIG

    field: Annotated[
        str,
        BeforeValidator(lambda raw: _as_text(raw) or _DEFAULT_FIELD),
    ] = _DEFAULT_FIELD
    operator: Annotated[
        str,
        BeforeValidator(lambda raw: _as_text(raw) or _DEFAULT_OPERATOR),
    ] = _DEFAULT_OPERATOR
    value: _Text = None
    secondary_value: _Text = None
    values: Annotated[
        tuple[str, ...] | None,
        BeforeValidator(_as_texts),
    ] = None
    range: Annotated[RangeValue | None, BeforeValidator(_as_range)] = None
    metadata_field: _Text = None
    metadata_label: _Text = None
    unit: _Text = None

    def bounds(self) -> RangeValue | None:
        """Resolve the range bounds of a two-value operator.

        Preference order: explicit range, first two list values,
        value and secondary value.

        Returns:
            Range, or None if the condition carries no bounds.
        """
        if self.range is not None:
            return self.range
        if self.values is not None and len(self.values) >= 2:
            return RangeValue(start=self.values[0], end=self.values[1])
        if _has_text(self.value) or _has_text(self.secondary_value):
            return RangeValue(start=self.value, end=self.secondary_value)
        return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'Condition':
        """Build a condition from its camelCase JSON object.

        Args:
            payload: Decoded JSON object.

        Returns:
            Condition with scalar values coerced to text.

        Raises:
            InvalidSearchRequestError: If the object does not validate.
        """
        return _validate(cls, payload)


class SearchRequest(BaseModel):
    """Structured asset search."""

    model_config = _MODEL_CONFIG

    logic: Annotated[
        str,
        BeforeValidator(lambda raw: _as_text(raw) or LOGIC_AND),
    ] = LOGIC_AND
    conditions: Annotated[
        tuple[Condition, ...],
        BeforeValidator(_as_conditions),
    ] = ()
    sort_by: _Text = None
    sort_dir: _Text = None
    page: Annotated[int, BeforeValidator(lambda raw: _as_int(raw) or 1)] = 1
    page_size: _Int = None
    folder_id: Annotated[
        uuid.UUID | None,
        BeforeValidator(_as_folder_id),
    ] = None

    @property
    def uses_or(self) -> bool:
        """Whether conditions combine with OR (anything else is AND)."""
        return self.logic.strip().upper() == LOGIC_OR

    @classmethod
    def from_payload(cls, payload: object) -> 'SearchRequest':
        """Build a request from the decoded JSON body.

        Args:
            payload: Decoded JSON body.

        Returns:
            SearchRequest with defaults for missing members.

        Raises:
            InvalidSearchRequestError: If the envelope is malformed.
        """
        if not isinstance(payload, Mapping):
            raise InvalidSearchRequestError('Search body must be a JSON object')
        return _validate(cls, payload)


def _validate[ModelT: BaseModel](
    model: type[ModelT],
    payload: object,
) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidSearchRequestError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = '.'.join(str(part) for part in error['loc'])
        message = error['msg'].removeprefix('Value error, ')
        problems.append(f'{location}: {message}' if location else message)
    return '; '.join(problems)


def _has_text(value: str | None) -> bool:
    return value is not None and bool(value.strip())
