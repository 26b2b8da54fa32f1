"""Display formatting for validated rows."""

from datetime import date
from typing import Dict

from services.row_validator import Row

CURRENCY_SYMBOL = '₹'
DISPLAY_DATE_FORMAT = '%d-%m-%Y'


def group_indian_digits(integer_part: str) -> str:
    """Group digits as 12,34,567 (last three, then pairs)."""
    last_three = integer_part[-3:]
    remaining = integer_part[:-3]
    if not remaining:
        return last_three

    pairs = []
    while len(remaining) > 2:
        pairs.insert(0, remaining[-2:])
        remaining = remaining[:-2]
    pairs.insert(0, remaining)
    return ','.join(pairs) + ',' + last_three


def format_amount(amount: float) -> str:
    """Format an amount as rupees with Indian digit grouping and two decimals."""
    sign = '-' if amount < 0 else ''
    integer_part, decimal_part = f"{abs(amount):.2f}".split('.')
    return f"{sign}{CURRENCY_SYMBOL}{group_indian_digits(integer_part)}.{decimal_part}"


def format_date(value: date) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT)


def format_verified(verified: bool) -> str:
    return 'Yes' if verified else 'No'


def format_row(row: Row) -> Dict[str, str]:
    """Table cells for one row."""
    return {
        'name': row.name,
        'amount': format_amount(row.amount),
        'date': format_date(row.date),
        'verified': format_verified(row.verified)
    }
