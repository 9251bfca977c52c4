"""
Field Parsers

Conversion of raw string fields into typed values. Every failure is raised
as MalformedFieldError carrying the source, row and column it came from.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from sales_ledger.exceptions import MalformedFieldError


def require_fields(
    record: Sequence[str],
    count: int,
    source: str,
    row: int,
) -> None:
    """Check that a record has at least `count` fields"""
    if len(record) < count:
        raise MalformedFieldError(
            f"Expected at least {count} fields, got {len(record)}",
            source=source,
            row=row,
        )


def parse_decimal(
    value: str,
    source: str,
    row: int,
    column: str,
    non_negative: bool = True,
) -> Decimal:
    """Parse a decimal amount, rejecting NaN, infinities and (by default) negatives"""
    try:
        amount = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        raise MalformedFieldError(
            "Not a decimal number", source=source, row=row, column=column, value=value
        ) from None
    if not amount.is_finite():
        raise MalformedFieldError(
            "Not a finite number", source=source, row=row, column=column, value=value
        )
    if non_negative and amount < 0:
        raise MalformedFieldError(
            "Must not be negative", source=source, row=row, column=column, value=value
        )
    return amount


def parse_int(value: str, source: str, row: int, column: str) -> int:
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        raise MalformedFieldError(
            "Not an integer", source=source, row=row, column=column, value=value
        ) from None


def parse_date(value: str, source: str, row: int, column: str) -> date:
    """Parse an ISO calendar date (YYYY-MM-DD)"""
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise MalformedFieldError(
            "Not an ISO date", source=source, row=row, column=column, value=value
        ) from None


def parse_text(value: Optional[str], source: str, row: int, column: str) -> str:
    """Return a mandatory text field, rejecting empty values"""
    if value is None or not value.strip():
        raise MalformedFieldError(
            "Missing value", source=source, row=row, column=column, value=value
        )
    return value.strip()
