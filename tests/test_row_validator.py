"""
Tests for row-level validation rules.

Tests cover required fields, amount and date parsing, the month window,
the verified flag and row numbering.
"""

from datetime import date, datetime

import pytest

from services.row_validator import (
    AMOUNT_NOT_POSITIVE, AMOUNT_REQUIRED, DATE_OUTSIDE_MONTH, DATE_REQUIRED,
    NAME_REQUIRED, Row, is_within_month, parse_date, row_number, validate_row
)


def as_cells(row):
    """Cell values a spreadsheet would hold for a normalized row."""
    return {
        'name': row.name,
        'amount': row.amount,
        'date': row.date.isoformat(),
        'verified': 'yes' if row.verified else 'no'
    }


def make_raw(**overrides):
    raw = {'name': 'Office rent', 'amount': 2500, 'date': datetime(2026, 10, 5), 'verified': 'yes'}
    raw.update(overrides)
    return {k: v for k, v in raw.items() if v is not None}


class TestValidRows:
    """Test normalization of rows that pass every rule."""

    def test_valid_row_is_normalized(self, reference):
        """Amount becomes a float and date a calendar date."""
        result = validate_row(make_raw(), reference)

        assert result.is_valid
        assert result.messages == []
        assert result.row == Row(name='Office rent', amount=2500.0, date=date(2026, 10, 5), verified=True)
        assert isinstance(result.row.amount, float)

    def test_name_is_stripped(self, reference):
        result = validate_row(make_raw(name='  Rent  '), reference)
        assert result.row.name == 'Rent'

    def test_numeric_string_amount(self, reference):
        result = validate_row(make_raw(amount=' 12.50 '), reference)
        assert result.row.amount == 12.5

    def test_date_inside_month_is_preserved(self, reference):
        for day in (1, 19, 31):
            result = validate_row(make_raw(date=date(2026, 10, day)), reference)
            assert result.row.date == date(2026, 10, day)

    def test_revalidating_normalized_row_is_clean(self, reference):
        """Validation of an already-normalized row yields no errors."""
        row = validate_row(make_raw(), reference).row

        again = validate_row(as_cells(row), reference)

        assert again.messages == []
        assert again.row == row


class TestRequiredFields:
    """Test messages for missing fields."""

    @pytest.mark.parametrize('field, message', [
        ('name', NAME_REQUIRED),
        ('amount', AMOUNT_REQUIRED),
        ('date', DATE_REQUIRED),
    ])
    def test_missing_field(self, reference, field, message):
        raw = make_raw()
        del raw[field]

        result = validate_row(raw, reference)

        assert not result.is_valid
        assert result.row is None
        assert result.messages == [message]

    def test_blank_strings_count_as_missing(self, reference):
        result = validate_row(make_raw(name='   ', amount='', date=' '), reference)
        assert result.messages == [NAME_REQUIRED, AMOUNT_REQUIRED, DATE_REQUIRED]

    def test_errors_accumulate_in_field_order(self, reference):
        """All failing fields are reported, not only the first."""
        result = validate_row({}, reference)
        assert result.messages == [NAME_REQUIRED, AMOUNT_REQUIRED, DATE_REQUIRED]


class TestAmount:
    """Test amount parsing and positivity."""

    @pytest.mark.parametrize('amount', [0, -5, -0.01, '0', '-3', 'abc', '1,000', 'nan', 'inf', True])
    def test_rejects_non_positive_or_non_numeric(self, reference, amount):
        result = validate_row(make_raw(amount=amount), reference)
        assert result.messages == [AMOUNT_NOT_POSITIVE]

    def test_accepts_small_positive(self, reference):
        assert validate_row(make_raw(amount=0.01), reference).is_valid


class TestDate:
    """Test date coercion and the month window."""

    @pytest.mark.parametrize('value', [
        datetime(2026, 9, 30),
        datetime(2026, 11, 1),
        date(2025, 10, 19),
        '2026-09-15',
        'not a date',
    ])
    def test_outside_month(self, reference, value):
        result = validate_row(make_raw(date=value), reference)
        assert result.messages == [DATE_OUTSIDE_MONTH]

    @pytest.mark.parametrize('value', ['2026-10-07', '2026-10-07T15:30:00', '07-10-2026'])
    def test_text_dates(self, reference, value):
        assert validate_row(make_raw(date=value), reference).row.date == date(2026, 10, 7)

    def test_utc_timestamp_text(self):
        assert parse_date('2026-10-04T18:30:00.000Z') == date(2026, 10, 4)

    def test_excel_serial_date(self, reference):
        serial = (date(2026, 10, 7) - date(1899, 12, 30)).days
        assert validate_row(make_raw(date=serial), reference).row.date == date(2026, 10, 7)

    def test_parse_date_rejects_booleans(self):
        assert parse_date(True) is None

    def test_is_within_month(self):
        assert is_within_month(date(2026, 10, 1), datetime(2026, 10, 31, 23, 59))
        assert not is_within_month(date(2025, 10, 1), datetime(2026, 10, 1))
        assert not is_within_month(date(2026, 11, 1), date(2026, 10, 31))


class TestVerified:
    """Test derivation of the verified flag."""

    @pytest.mark.parametrize('value', ['yes', 'YES', 'Yes', 'yEs'])
    def test_yes_in_any_case(self, reference, value):
        assert validate_row(make_raw(verified=value), reference).row.verified is True

    @pytest.mark.parametrize('value', ['no', ' yes', 'yes ', 'y', 'true', True, 1, None])
    def test_anything_else_is_false(self, reference, value):
        assert validate_row(make_raw(verified=value), reference).row.verified is False

    def test_verified_never_produces_errors(self, reference):
        assert validate_row(make_raw(verified=42), reference).messages == []


class TestRowNumber:
    """Test display row numbering."""

    def test_offset_by_header_and_one_based(self):
        assert row_number(0) == 2
        assert row_number(5) == 7
