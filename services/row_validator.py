"""
Row Validator - Field-level validation of spreadsheet rows.

This module contains the pure validation rules applied to every data row
of an uploaded workbook. The reference instant is always passed in, so the
same rules can be evaluated against the client's clock at parse time and
against the server's clock at import time.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Union

from openpyxl.utils.datetime import from_excel

# Error messages
NAME_REQUIRED = 'Name is required'
AMOUNT_REQUIRED = 'Amount is required'
AMOUNT_NOT_POSITIVE = 'Amount must be a positive number'
DATE_REQUIRED = 'Date is required'
DATE_OUTSIDE_MONTH = 'Date must be within the current month'

# Header row plus 1-based display
ROW_NUMBER_OFFSET = 2

DATE_TEXT_FORMATS = ('%d-%m-%Y',)


@dataclass(frozen=True)
class Row:
    """A validated and normalized spreadsheet row."""
    name: str
    amount: float
    date: date
    verified: bool = False


@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level problem found in a sheet row."""
    sheet_label: str
    row_number: int
    message: str


@dataclass
class RowValidationResult:
    """Outcome of validating one raw row: a normalized row or messages."""
    row: Optional[Row] = None
    messages: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.row is not None


def row_number(index: int) -> int:
    """Display row number for the 0-based data row ``index``."""
    return index + ROW_NUMBER_OFFSET


def is_within_month(value: date, reference: Union[date, datetime]) -> bool:
    """Check that ``value`` falls in the calendar month and year of ``reference``."""
    return value.year == reference.year and value.month == reference.month


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse an amount cell to a finite float.

    Returns None when the value is not a number (booleans included).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(amount):
        return None
    return amount


def parse_date(value: Any) -> Optional[date]:
    """
    Coerce a date cell to a calendar date.

    Accepts datetime/date objects, Excel serial numbers and ISO-8601 or
    DD-MM-YYYY strings. Returns None when the value cannot be coerced.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            converted = from_excel(value)
        except (ValueError, OverflowError):
            return None
        if isinstance(converted, datetime):
            return converted.date()
        if isinstance(converted, date):
            return converted
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass
        for fmt in DATE_TEXT_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    return None


def parse_verified(value: Any) -> bool:
    """Only the text ``yes`` (any case) marks a row as verified."""
    return isinstance(value, str) and value.lower() == 'yes'


def validate_row(raw_row: Mapping[str, Any], reference: Union[date, datetime]) -> RowValidationResult:
    """
    Validate one raw row against the field rules.

    Rules are accumulated, not short-circuited, with at most one message
    per field in the order name, amount, date.

    Args:
        raw_row: Mapping of lower-cased header name to cell value
        reference: Instant whose month/year bounds the accepted dates

    Returns:
        RowValidationResult holding either the normalized Row or the messages
    """
    messages: List[str] = []

    raw_name = raw_row.get('name')
    if _is_blank(raw_name):
        messages.append(NAME_REQUIRED)

    raw_amount = raw_row.get('amount')
    amount = None
    if _is_blank(raw_amount):
        messages.append(AMOUNT_REQUIRED)
    else:
        amount = parse_amount(raw_amount)
        if amount is None or amount <= 0:
            messages.append(AMOUNT_NOT_POSITIVE)

    raw_date = raw_row.get('date')
    row_date = None
    if _is_blank(raw_date):
        messages.append(DATE_REQUIRED)
    else:
        row_date = parse_date(raw_date)
        if row_date is None or not is_within_month(row_date, reference):
            messages.append(DATE_OUTSIDE_MONTH)

    if messages:
        return RowValidationResult(messages=messages)

    return RowValidationResult(
        row=Row(
            name=str(raw_name).strip(),
            amount=amount,
            date=row_date,
            verified=parse_verified(raw_row.get('verified'))
        )
    )

