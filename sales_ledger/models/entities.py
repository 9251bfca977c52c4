"""
Entity Models

Catalog entities (addresses, persons, stores) and the Sale aggregate that
owns its priced sale-line items.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List

from sales_ledger.pricing import totals

if TYPE_CHECKING:
    from sales_ledger.models.items import SaleItem


@dataclass(frozen=True)
class Address:
    """Postal address, compared by value"""
    street: str
    city: str
    state: str
    zip_code: int


@dataclass
class Person:
    """A customer, salesman, employee or manager identified by uuid"""
    uuid: str
    first_name: str
    last_name: str
    address: Address
    emails: List[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"


@dataclass
class Store:
    """A store identified by its store code and run by a manager"""
    store_code: str
    address: Address
    manager: Person


@dataclass
class Sale:
    """
    A sale made at a store.

    Items are appended during assembly in input row order and the order is
    kept for receipts and reports. Totals are derived from the items on
    every access.
    """
    unique_code: str
    store: Store
    customer: Person
    salesman: Person
    date: date
    items: List["SaleItem"] = field(default_factory=list)

    def add_item(self, item: "SaleItem") -> None:
        self.items.append(item)

    @property
    def gross_price(self) -> Decimal:
        return totals.sale_gross_price(self.items)

    @property
    def total_tax(self) -> Decimal:
        return totals.sale_total_tax(self.items)

    @property
    def net_price(self) -> Decimal:
        return totals.sale_net_price(self.items)
