"""
Domain Models
"""
from .entities import Address, Person, Store, Sale
from .items import (
    CatalogItem,
    DataPlan,
    ItemKind,
    ProductLease,
    ProductPurchase,
    SaleItem,
    Service,
    VoicePlan,
)

__all__ = [
    "Address",
    "Person",
    "Store",
    "Sale",
    "CatalogItem",
    "ItemKind",
    "ProductPurchase",
    "ProductLease",
    "Service",
    "DataPlan",
    "VoicePlan",
    "SaleItem",
]
