"""
Sale Totals

Aggregation of item prices into sale totals, and the reporting order of
sales. Works on anything exposing the item pricing capabilities.
"""

from decimal import Decimal
from typing import Iterable, List, Protocol, Sequence, TypeVar

from sales_ledger.pricing.rules import sum_money


class Priceable(Protocol):
    def compute_gross_price(self) -> Decimal: ...

    def compute_tax(self) -> Decimal: ...


class HasNetPrice(Protocol):
    @property
    def net_price(self) -> Decimal: ...


T = TypeVar("T", bound=HasNetPrice)


def sale_gross_price(items: Iterable[Priceable]) -> Decimal:
    return sum_money(item.compute_gross_price() for item in items)


def sale_total_tax(items: Iterable[Priceable]) -> Decimal:
    return sum_money(item.compute_tax() for item in items)


def sale_net_price(items: Sequence[Priceable]) -> Decimal:
    """
    Gross plus tax.

    Both operands are already exact to the cent, so the sum needs no
    further rounding.
    """
    return sale_gross_price(items) + sale_total_tax(items)


def rank_sales(sales: Iterable[T]) -> List[T]:
    """Order sales by net price, highest first; ties keep input order."""
    return sorted(sales, key=lambda sale: sale.net_price, reverse=True)
