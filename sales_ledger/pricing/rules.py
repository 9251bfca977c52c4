"""
Pricing Rules

Pure price and tax formulas, one family per item variant.

All money is handled as Decimal and rounded to cents with ROUND_HALF_UP at
every formula boundary, so intermediate results are already exact to two
decimals when they are summed.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sales_ledger.exceptions import InvalidLeasePeriodError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PURCHASE_TAX_RATE = Decimal("0.065")
SERVICE_TAX_RATE = Decimal("0.035")
DATA_PLAN_TAX_RATE = Decimal("0.055")
VOICE_PLAN_TAX_RATE = Decimal("0.065")

LEASE_MARKUP_DIVISOR = Decimal(2)


def round_money(amount: Decimal) -> Decimal:
    """Round an amount to cents, halves away from zero."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """Sum already-rounded amounts and round the total."""
    return round_money(sum(amounts, ZERO))


def apply_rate(gross: Decimal, rate: Decimal) -> Decimal:
    return round_money(gross * rate)


# =============================================================================
# PURCHASE
# =============================================================================

def purchase_gross_price(base_price: Decimal) -> Decimal:
    return round_money(base_price)


def purchase_tax(gross: Decimal) -> Decimal:
    return apply_rate(gross, PURCHASE_TAX_RATE)


# =============================================================================
# USAGE-BASED VARIANTS
# =============================================================================

def data_plan_gross_price(price_per_gb: Decimal, total_gb: Decimal) -> Decimal:
    return round_money(price_per_gb * total_gb)


def data_plan_tax(gross: Decimal) -> Decimal:
    return apply_rate(gross, DATA_PLAN_TAX_RATE)


def voice_plan_gross_price(price_per_period: Decimal, total_period: Decimal) -> Decimal:
    return round_money(price_per_period * total_period)


def voice_plan_tax(gross: Decimal) -> Decimal:
    return apply_rate(gross, VOICE_PLAN_TAX_RATE)


def service_gross_price(hourly_rate: Decimal, total_hours: Decimal) -> Decimal:
    return round_money(hourly_rate * total_hours)


def service_tax(gross: Decimal) -> Decimal:
    return apply_rate(gross, SERVICE_TAX_RATE)


# =============================================================================
# LEASE
# =============================================================================

def lease_period_in_months(start_date: date, end_date: date) -> int:
    """
    Whole calendar months between two dates.

    Counts years * 12 + months and truncates the day-of-month remainder, so
    2024-01-15 -> 2024-03-14 is one month, not two.
    """
    months = (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)
    days = end_date.day - start_date.day
    if months > 0 and days < 0:
        months -= 1
    elif months < 0 and days > 0:
        months += 1
    return months


def lease_markup_price(base_price: Decimal) -> Decimal:
    return round_money(round_money(base_price) / LEASE_MARKUP_DIVISOR)


def lease_total_price(base_price: Decimal) -> Decimal:
    return lease_markup_price(base_price) + round_money(base_price)


def lease_first_month_price(base_price: Decimal, period_in_months: int) -> Decimal:
    """
    Amortized first monthly invoice of a lease.

    Raises:
        InvalidLeasePeriodError: If the lease spans no whole month
    """
    if period_in_months <= 0:
        raise InvalidLeasePeriodError(
            f"Lease period must be at least one month, got {period_in_months}"
        )
    return round_money(lease_total_price(base_price) / Decimal(period_in_months))


def lease_tax(gross: Decimal) -> Decimal:
    # Lease tax is folded into the markup.
    return ZERO
