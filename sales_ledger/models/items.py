"""
Item Models

Catalog item definitions and the closed set of sale-line variants derived
from them. Each sale-line variant is a copy of its catalog item's code, name
and base price, decorated with the fields of one sale-line row and tagged
with an ItemKind.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Dict, Optional, Union

from sales_ledger.exceptions import InvalidLeasePeriodError
from sales_ledger.models.entities import Person
from sales_ledger.pricing import rules


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ItemKind(str, Enum):
    """Discriminator tag of an item variant"""
    PURCHASE = "P"
    LEASE = "L"
    SERVICE = "S"
    DATA_PLAN = "D"
    VOICE_PLAN = "V"

    @classmethod
    def from_code(cls, code: str) -> Optional["ItemKind"]:
        """Return the kind for a one-letter code, or None when unknown"""
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None

    @property
    def arity(self) -> int:
        """Number of trailing fields a sale-line row of this kind carries"""
        return TRAILING_FIELD_COUNTS[self]


TRAILING_FIELD_COUNTS: Dict[ItemKind, int] = {
    ItemKind.PURCHASE: 0,
    ItemKind.LEASE: 2,
    ItemKind.SERVICE: 2,
    ItemKind.DATA_PLAN: 1,
    ItemKind.VOICE_PLAN: 2,
}

# Kinds a catalog file may declare; leases only exist on sale lines.
CATALOG_KINDS = frozenset(
    {ItemKind.PURCHASE, ItemKind.SERVICE, ItemKind.DATA_PLAN, ItemKind.VOICE_PLAN}
)


# =============================================================================
# CATALOG
# =============================================================================

@dataclass
class CatalogItem:
    """
    Master definition of a sellable item.

    The raw type code is kept as read; an unrecognized code only fails when a
    sale line tries to derive a variant from it.
    """
    unique_code: str
    type_code: str
    name: str
    base_price: Decimal

    @property
    def kind(self) -> Optional[ItemKind]:
        kind = ItemKind.from_code(self.type_code)
        return kind if kind in CATALOG_KINDS else None


# =============================================================================
# SALE-LINE VARIANTS
# =============================================================================

@dataclass
class ProductPurchase:
    """Flat per-unit purchase of a product"""
    kind: ClassVar[ItemKind] = ItemKind.PURCHASE

    unique_code: str
    name: str
    base_price: Decimal

    @classmethod
    def from_catalog(cls, item: CatalogItem) -> "ProductPurchase":
        return cls(item.unique_code, item.name, item.base_price)

    def compute_gross_price(self) -> Decimal:
        return rules.purchase_gross_price(self.base_price)

    def compute_tax(self) -> Decimal:
        return rules.purchase_tax(self.compute_gross_price())


@dataclass
class ProductLease:
    """
    Lease of a product between two dates.

    The gross price is the amortized first monthly invoice, not the total
    value of the lease.
    """
    kind: ClassVar[ItemKind] = ItemKind.LEASE

    unique_code: str
    name: str
    base_price: Decimal
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise InvalidLeasePeriodError(
                f"Lease of '{self.unique_code}' ends ({self.end_date}) "
                f"before it starts ({self.start_date})"
            )

    @classmethod
    def from_catalog(
        cls, item: CatalogItem, start_date: date, end_date: date
    ) -> "ProductLease":
        return cls(item.unique_code, item.name, item.base_price, start_date, end_date)

    @property
    def period_in_months(self) -> int:
        return rules.lease_period_in_months(self.start_date, self.end_date)

    @property
    def markup_price(self) -> Decimal:
        return rules.lease_markup_price(self.base_price)

    @property
    def total_lease_price(self) -> Decimal:
        return rules.lease_total_price(self.base_price)

    @property
    def first_month_price(self) -> Decimal:
        return rules.lease_first_month_price(self.base_price, self.period_in_months)

    def compute_gross_price(self) -> Decimal:
        return self.first_month_price

    def compute_tax(self) -> Decimal:
        return rules.lease_tax(self.compute_gross_price())


@dataclass
class Service:
    """Hourly service performed by an employee; base price is the hourly rate"""
    kind: ClassVar[ItemKind] = ItemKind.SERVICE

    unique_code: str
    name: str
    base_price: Decimal
    total_hours: Decimal
    employee: Person

    @classmethod
    def from_catalog(
        cls, item: CatalogItem, total_hours: Decimal, employee: Person
    ) -> "Service":
        return cls(item.unique_code, item.name, item.base_price, total_hours, employee)

    @property
    def hourly_rate(self) -> Decimal:
        return self.base_price

    def compute_gross_price(self) -> Decimal:
        return rules.service_gross_price(self.base_price, self.total_hours)

    def compute_tax(self) -> Decimal:
        return rules.service_tax(self.compute_gross_price())


@dataclass
class DataPlan:
    """Data plan billed per gigabyte"""
    kind: ClassVar[ItemKind] = ItemKind.DATA_PLAN

    unique_code: str
    name: str
    base_price: Decimal
    total_gb: Decimal

    @classmethod
    def from_catalog(cls, item: CatalogItem, total_gb: Decimal) -> "DataPlan":
        return cls(item.unique_code, item.name, item.base_price, total_gb)

    @property
    def price_per_gb(self) -> Decimal:
        return self.base_price

    def compute_gross_price(self) -> Decimal:
        return rules.data_plan_gross_price(self.base_price, self.total_gb)

    def compute_tax(self) -> Decimal:
        return rules.data_plan_tax(self.compute_gross_price())


@dataclass
class VoicePlan:
    """Voice plan on a phone number, billed per period unit"""
    kind: ClassVar[ItemKind] = ItemKind.VOICE_PLAN

    unique_code: str
    name: str
    base_price: Decimal
    phone_number: str
    total_period: Decimal

    @classmethod
    def from_catalog(
        cls, item: CatalogItem, phone_number: str, total_period: Decimal
    ) -> "VoicePlan":
        return cls(item.unique_code, item.name, item.base_price, phone_number, total_period)

    @property
    def price_per_period(self) -> Decimal:
        return self.base_price

    def compute_gross_price(self) -> Decimal:
        return rules.voice_plan_gross_price(self.base_price, self.total_period)

    def compute_tax(self) -> Decimal:
        return rules.voice_plan_tax(self.compute_gross_price())


SaleItem = Union[ProductPurchase, ProductLease, Service, DataPlan, VoicePlan]
