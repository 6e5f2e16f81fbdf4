"""Tests for per-field predicate builders and the field router."""

import uuid
from datetime import UTC, datetime

import pytest

from server.apps.assets.logic.search.builders import (
    build_condition_predicate,
    build_condition_predicates,
    build_date_predicate,
    build_file_size_predicate,
    build_id_predicate,
    build_list_predicate,
    build_metadata_predicate,
    build_string_predicate,
    build_tag_predicate,
)
from server.apps.assets.logic.search.predicates import (
    And,
    Compare,
    MetadataMatch,
    TagMembership,
)
from server.apps.assets.logic.search.request import Condition, RangeValue

END_OF_JAN_15 = datetime(2024, 1, 15, 23, 59, 59, 999999, tzinfo=UTC)


class TestStringBuilder:
    """Tests for build_string_predicate."""

    @pytest.mark.parametrize(('operator', 'pattern'), [
        ('equals', 'report'),
        (None, 'report'),
        ('contains', '%report%'),
        ('Starts With', 'report%'),
        ('endsWith', '%report'),
        ('whatever', 'report'),
    ])
    def test_patterns(self, operator, pattern):
        """Test each operator anchors the pattern and requires a value."""
        condition = Condition(operator=operator, value=' report ')

        assert build_string_predicate('file_name', condition) == And((
            Compare('file_name', 'isnull', False),
            Compare('file_name', 'ilike', pattern),
        ))

    def test_value_is_escaped(self):
        """Test wildcard characters in the value are escaped."""
        condition = Condition(operator='contains', value='50%_off')

        predicate = build_string_predicate('file_name', condition)

        assert predicate.predicates[1].value == r'%50\%\_off%'

    @pytest.mark.parametrize('value', [None, '', '   '])
    def test_blank_value(self, value):
        """Test blank values build nothing."""
        condition = Condition(operator='contains', value=value)

        assert build_string_predicate('file_name', condition) is None


class TestListBuilder:
    """Tests for build_list_predicate."""

    def test_normalizes_values(self):
        """Test values are trimmed, lowercased and deduplicated."""
        predicate = build_list_predicate(
            'file_type',
            [' Image', 'image', 'VIDEO', '', '  '],
        )

        assert predicate == And((
            Compare('file_type', 'isnull', False),
            Compare('file_type', 'lower_in', frozenset({'image', 'video'})),
        ))

    @pytest.mark.parametrize('values', [None, [], ['', ' ']])
    def test_empty(self, values):
        """Test an empty normalized set builds nothing."""
        assert build_list_predicate('file_type', values) is None


class TestTagBuilder:
    """Tests for build_tag_predicate."""

    def test_any_by_default(self):
        """Test operators other than containsAll mean any."""
        tag_id = uuid.uuid4()
        condition = Condition(
            field='tags',
            operator='containsAny',
            values=(str(tag_id), str(tag_id), 'garbage'),
        )

        assert build_tag_predicate(condition) == TagMembership(
            'any',
            frozenset({tag_id}),
        )

    def test_contains_all(self):
        """Test containsAll requires every tag."""
        tag_ids = {uuid.uuid4(), uuid.uuid4()}
        condition = Condition(
            field='tags',
            operator='Contains All',
            values=tuple(str(tag_id) for tag_id in tag_ids),
        )

        assert build_tag_predicate(condition) == TagMembership(
            'all',
            frozenset(tag_ids),
        )

    def test_single_value_is_ignored(self):
        """Test tags are read from the value list only."""
        condition = Condition(field='tags', value=str(uuid.uuid4()))

        assert build_tag_predicate(condition) is None

    def test_no_parseable_ids(self):
        """Test unparseable tag ids build nothing."""
        condition = Condition(field='tags', values=('x', 'y'))

        assert build_tag_predicate(condition) is None


class TestFileSizeBuilder:
    """Tests for build_file_size_predicate."""

    def test_greater_than_is_strict(self):
        """Test greaterThan compares strictly in bytes."""
        condition = Condition(operator='greaterThan', value='1', unit='kb')

        assert build_file_size_predicate(condition) == Compare(
            'size_bytes', 'gt', 1024,
        )

    def test_less_than_is_strict(self):
        """Test lessThan compares strictly in bytes."""
        condition = Condition(operator='lessThan', value='2', unit='MB')

        assert build_file_size_predicate(condition) == Compare(
            'size_bytes', 'lt', 2 * 1024 ** 2,
        )

    def test_equals_by_default(self):
        """Test unknown operators compare for equality."""
        condition = Condition(operator='about', value='10')

        assert build_file_size_predicate(condition) == Compare(
            'size_bytes', 'eq', 10,
        )

    def test_between_reorders_bounds(self):
        """Test between swaps reversed bounds into min/max."""
        forward = Condition(
            operator='between',
            range=RangeValue(start='1', end='5'),
            unit='kb',
        )
        backward = Condition(
            operator='between',
            range=RangeValue(start='5', end='1'),
            unit='kb',
        )

        expected = And((
            Compare('size_bytes', 'gte', 1024),
            Compare('size_bytes', 'lte', 5120),
        ))
        assert build_file_size_predicate(forward) == expected
        assert build_file_size_predicate(backward) == expected

    def test_between_needs_both_bounds(self):
        """Test between with one unparseable bound builds nothing."""
        condition = Condition(
            operator='between',
            value='1',
            secondary_value='lots',
        )

        assert build_file_size_predicate(condition) is None

    @pytest.mark.parametrize('value', ['-5', 'big', None])
    def test_unusable_value(self, value):
        """Test negative or malformed sizes build nothing."""
        condition = Condition(operator='greaterThan', value=value)

        assert build_file_size_predicate(condition) is None


class TestDateBuilder:
    """Tests for build_date_predicate."""

    def test_after_uses_start_of_day(self):
        """Test after compares with the parsed midnight inclusively."""
        condition = Condition(operator='after', value='2024-01-15')

        assert build_date_predicate(condition) == Compare(
            'created_at', 'gte', datetime(2024, 1, 15, tzinfo=UTC),
        )

    def test_after_floors_time_of_day(self):
        """Test after with a time still starts at midnight of that day."""
        condition = Condition(operator='after', value='2024-01-15T10:00:00Z')

        assert build_date_predicate(condition) == Compare(
            'created_at', 'gte', datetime(2024, 1, 15, tzinfo=UTC),
        )

    def test_between_floors_lower_bound(self):
        """Test a between lower bound with a time starts at midnight."""
        condition = Condition(
            operator='between',
            range=RangeValue(start='2024-01-15T10:00:00Z', end='2024-01-20'),
        )

        assert build_date_predicate(condition) == And((
            Compare('created_at', 'gte', datetime(2024, 1, 15, tzinfo=UTC)),
            Compare(
                'created_at',
                'lte',
                datetime(2024, 1, 20, 23, 59, 59, 999999, tzinfo=UTC),
            ),
        ))

    def test_before_uses_end_of_day(self):
        """Test before extends to the last instant of the day."""
        condition = Condition(operator='before', value='2024-01-15')

        assert build_date_predicate(condition) == Compare(
            'created_at', 'lte', END_OF_JAN_15,
        )

    def test_on_covers_the_day(self):
        """Test on spans the whole UTC day."""
        condition = Condition(operator='on', value='2024-01-15T18:30:00Z')

        assert build_date_predicate(condition) == And((
            Compare('created_at', 'gte', datetime(2024, 1, 15, tzinfo=UTC)),
            Compare('created_at', 'lte', END_OF_JAN_15),
        ))

    def test_between_from_values_list(self):
        """Test between reads bounds from a two-element list."""
        condition = Condition(
            operator='between',
            values=('2024-01-10', '2024-01-15'),
        )

        assert build_date_predicate(condition) == And((
            Compare('created_at', 'gte', datetime(2024, 1, 10, tzinfo=UTC)),
            Compare('created_at', 'lte', END_OF_JAN_15),
        ))

    def test_between_reversed(self):
        """Test reversed between bounds are swapped."""
        condition = Condition(
            operator='between',
            value='2024-01-20',
            secondary_value='2024-01-15',
        )

        assert build_date_predicate(condition) == And((
            Compare('created_at', 'gte', END_OF_JAN_15),
            Compare('created_at', 'lte', datetime(2024, 1, 20, tzinfo=UTC)),
        ))

    def test_between_one_sided(self):
        """Test between with one parseable bound compares one side."""
        only_from = Condition(
            operator='between',
            range=RangeValue(start='2024-01-10', end='soon'),
        )
        only_to = Condition(
            operator='between',
            range=RangeValue(start=None, end='2024-01-15'),
        )

        assert build_date_predicate(only_from) == Compare(
            'created_at', 'gte', datetime(2024, 1, 10, tzinfo=UTC),
        )
        assert build_date_predicate(only_to) == Compare(
            'created_at', 'lte', END_OF_JAN_15,
        )

    def test_between_unparseable(self):
        """Test between without any parseable bound builds nothing."""
        condition = Condition(
            operator='between',
            range=RangeValue(start='x', end='y'),
        )

        assert build_date_predicate(condition) is None

    def test_default_is_exact(self):
        """Test unknown operators compare the exact instant."""
        condition = Condition(value='2024-01-15T10:00:00Z')

        assert build_date_predicate(condition) == Compare(
            'created_at', 'eq', datetime(2024, 1, 15, 10, tzinfo=UTC),
        )


class TestMetadataBuilder:
    """Tests for build_metadata_predicate."""

    @pytest.mark.parametrize(('operator', 'expected_op'), [
        ('is', 'equals'),
        ('equals', 'equals'),
        ('Is Not', 'isnot'),
        ('startsWith', 'startswith'),
        ('endsWith', 'endswith'),
        ('contains', 'contains'),
        ('fuzzy', 'contains'),
    ])
    def test_operators(self, operator, expected_op):
        """Test operator tokens map to metadata match kinds."""
        condition = Condition(
            field='metadata',
            operator=operator,
            metadata_field=' camera ',
            value=' X100 ',
        )

        assert build_metadata_predicate(condition) == MetadataMatch(
            'camera', expected_op, 'X100',
        )

    def test_untagged_needs_only_key(self):
        """Test isUntagged is valid without a value."""
        condition = Condition(operator='isUntagged', metadata_field='camera')

        assert build_metadata_predicate(condition) == MetadataMatch(
            'camera', 'untagged',
        )

    def test_missing_key(self):
        """Test conditions without a key build nothing."""
        condition = Condition(operator='isUntagged', value='x')

        assert build_metadata_predicate(condition) is None

    def test_missing_value(self):
        """Test value operators without a value build nothing."""
        condition = Condition(operator='equals', metadata_field='camera')

        assert build_metadata_predicate(condition) is None


class TestIdBuilder:
    """Tests for build_id_predicate."""

    def test_collects_values_and_value(self):
        """Test ids come from both the list and the single value."""
        first, second = uuid.uuid4(), uuid.uuid4()
        condition = Condition(
            field='ids',
            values=(str(first), 'nope'),
            value=str(second),
        )

        assert build_id_predicate(condition) == Compare(
            'id', 'in', frozenset({first, second}),
        )

    def test_nothing_parseable(self):
        """Test no parseable id builds nothing."""
        assert build_id_predicate(Condition(values=('a',), value='b')) is None


class TestFieldRouter:
    """Tests for build_condition_predicate routing."""

    def test_file_name(self):
        """Test file name routes to the string builder."""
        predicate = build_condition_predicate(
            Condition(field='File Name', value='a'),
        )

        assert predicate.predicates[1] == Compare('file_name', 'ilike', 'a')

    def test_file_type_with_values(self):
        """Test file type with a value list routes to list membership."""
        predicate = build_condition_predicate(
            Condition(field='fileType', values=('Image',), value='video'),
        )

        assert predicate.predicates[1] == Compare(
            'file_type', 'lower_in', frozenset({'image'}),
        )

    def test_file_type_without_values(self):
        """Test file type without values routes to the string builder."""
        predicate = build_condition_predicate(
            Condition(field='file_type', operator='startsWith', value='im'),
        )

        assert predicate.predicates[1] == Compare('file_type', 'ilike', 'im%')

    @pytest.mark.parametrize('field', ['dateCreated', 'createdAt', 'date_created'])
    def test_date_aliases(self, field):
        """Test both creation date spellings route to the date builder."""
        predicate = build_condition_predicate(
            Condition(field=field, operator='after', value='2024-01-01'),
        )

        assert predicate == Compare(
            'created_at', 'gte', datetime(2024, 1, 1, tzinfo=UTC),
        )

    def test_unknown_field(self):
        """Test unknown fields build nothing."""
        assert build_condition_predicate(
            Condition(field='colour', value='red'),
        ) is None

    def test_build_many_drops_unusable(self):
        """Test unusable conditions are dropped and order is kept."""
        predicates = build_condition_predicates([
            Condition(field='fileSize', operator='greaterThan', value='1'),
            Condition(field='colour', value='red'),
            Condition(field='fileName', value=''),
            Condition(field='fileSize', operator='lessThan', value='9'),
        ])

        assert predicates == [
            Compare('size_bytes', 'gt', 1),
            Compare('size_bytes', 'lt', 9),
        ]
