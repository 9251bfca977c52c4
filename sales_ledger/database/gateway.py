"""
Persistence Gateway

Maps an assembled Ledger onto the relational schema and resolves natural
keys to surrogate ids.

Writes happen on the caller's session, so one session_scope() around
save_ledger() stores the whole graph atomically. Natural-key ids are
resolved from in-memory maps filled as rows are flushed, or bulk preloaded
with one query per table; nothing is looked up per row.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Type

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from sales_ledger.database.connection import session_scope
from sales_ledger.database.models import (
    Base,
    DimAddress,
    DimEmail,
    DimItem,
    DimPerson,
    DimStore,
    FactSale,
    FactSaleItem,
)
from sales_ledger.exceptions import UnresolvedReferenceError
from sales_ledger.ingestion.pipeline import Ledger
from sales_ledger.models import (
    Address,
    CatalogItem,
    DataPlan,
    Person,
    ProductLease,
    Sale,
    SaleItem,
    Service,
    Store,
    VoicePlan,
)

logger = structlog.get_logger(__name__)

# Child tables first so deletes never violate a foreign key
_DELETE_ORDER = (FactSaleItem, FactSale, DimStore, DimEmail, DimPerson, DimItem, DimAddress)


@dataclass
class NaturalKeyIndex:
    """Natural key to surrogate id maps for every keyed table"""
    persons: Dict[str, int] = field(default_factory=dict)
    stores: Dict[str, int] = field(default_factory=dict)
    items: Dict[str, int] = field(default_factory=dict)
    sales: Dict[str, int] = field(default_factory=dict)


def _resolve(ids: Mapping[str, int], entity: str, key: str) -> int:
    try:
        return ids[key]
    except KeyError:
        raise UnresolvedReferenceError(entity, key) from None


class SalesRepository:
    """
    Stores ledgers and answers natural-key lookups on one session.

    Example:
        with session_scope(engine) as session:
            repo = SalesRepository(session)
            index = repo.save_ledger(ledger)
    """

    def __init__(self, session: Session):
        self.session = session
        self._addresses: Dict[Address, int] = {}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Delete every stored row"""
        for model in _DELETE_ORDER:
            self.session.execute(delete(model))
        self._addresses.clear()
        logger.info("Ledger tables cleared")

    def save_addresses(self, addresses: Iterable[Address]) -> Dict[Address, int]:
        """Insert addresses not seen yet on this session, with a single flush"""
        new_records: Dict[Address, DimAddress] = {}
        for address in addresses:
            if address in self._addresses or address in new_records:
                continue
            new_records[address] = DimAddress(
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
            )
        if new_records:
            self.session.add_all(new_records.values())
            self.session.flush()
            for address, record in new_records.items():
                self._addresses[address] = record.address_id
        return self._addresses

    def save_persons(self, persons: Iterable[Person]) -> Dict[str, int]:
        persons = list(persons)
        address_ids = self.save_addresses(person.address for person in persons)
        records = []
        for person in persons:
            records.append(
                DimPerson(
                    uuid=person.uuid,
                    first_name=person.first_name,
                    last_name=person.last_name,
                    address_id=address_ids[person.address],
                    emails=[
                        DimEmail(position=position, address=email)
                        for position, email in enumerate(person.emails)
                    ],
                )
            )
        self.session.add_all(records)
        self.session.flush()
        return {record.uuid: record.person_id for record in records}

    def save_stores(
        self, stores: Iterable[Store], person_ids: Mapping[str, int]
    ) -> Dict[str, int]:
        stores = list(stores)
        address_ids = self.save_addresses(store.address for store in stores)
        records = [
            DimStore(
                store_code=store.store_code,
                manager_id=_resolve(person_ids, "manager", store.manager.uuid),
                address_id=address_ids[store.address],
            )
            for store in stores
        ]
        self.session.add_all(records)
        self.session.flush()
        return {record.store_code: record.store_id for record in records}

    def save_items(self, items: Iterable[CatalogItem]) -> Dict[str, int]:
        records = [
            DimItem(
                unique_code=item.unique_code,
                type_code=item.type_code,
                name=item.name,
                base_price=item.base_price,
            )
            for item in items
        ]
        self.session.add_all(records)
        self.session.flush()
        return {record.unique_code: record.item_id for record in records}

    def _sale_line(
        self,
        line_number: int,
        item: SaleItem,
        item_ids: Mapping[str, int],
        person_ids: Mapping[str, int],
    ) -> FactSaleItem:
        record = FactSaleItem(
            item_id=_resolve(item_ids, "item", item.unique_code),
            line_number=line_number,
            item_type=item.kind.value,
            gross_price=item.compute_gross_price(),
            tax=item.compute_tax(),
        )
        if isinstance(item, ProductLease):
            record.start_date = item.start_date
            record.end_date = item.end_date
        elif isinstance(item, Service):
            record.total_hours = item.total_hours
            record.employee_id = _resolve(person_ids, "employee", item.employee.uuid)
        elif isinstance(item, DataPlan):
            record.total_gb = item.total_gb
        elif isinstance(item, VoicePlan):
            record.phone_number = item.phone_number
            record.total_period = item.total_period
        return record

    def save_sales(
        self,
        sales: Iterable[Sale],
        index: NaturalKeyIndex,
    ) -> Dict[str, int]:
        records = []
        for sale in sales:
            records.append(
                FactSale(
                    unique_code=sale.unique_code,
                    sale_date=sale.date,
                    store_id=_resolve(index.stores, "store", sale.store.store_code),
                    customer_id=_resolve(index.persons, "customer", sale.customer.uuid),
                    salesman_id=_resolve(index.persons, "salesman", sale.salesman.uuid),
                    gross_price=sale.gross_price,
                    total_tax=sale.total_tax,
                    net_price=sale.net_price,
                    lines=[
                        self._sale_line(position, item, index.items, index.persons)
                        for position, item in enumerate(sale.items, start=1)
                    ],
                )
            )
        self.session.add_all(records)
        self.session.flush()
        return {record.unique_code: record.sale_id for record in records}

    def save_ledger(self, ledger: Ledger) -> NaturalKeyIndex:
        """
        Replace the stored contents with a whole ledger.

        Every load is a full reload: existing rows are cleared first.

        Returns:
            NaturalKeyIndex: Ids assigned to every stored natural key
        """
        self.clear()
        self.save_addresses(
            [person.address for person in ledger.persons.values()]
            + [store.address for store in ledger.stores.values()]
        )

        index = NaturalKeyIndex()
        index.persons = self.save_persons(ledger.persons.values())
        index.stores = self.save_stores(ledger.stores.values(), index.persons)
        index.items = self.save_items(ledger.items.values())
        index.sales = self.save_sales(ledger.sales.values(), index)

        logger.info(
            "Ledger stored",
            persons=len(index.persons),
            stores=len(index.stores),
            items=len(index.items),
            sales=len(index.sales),
            addresses=len(self._addresses),
        )
        return index

    # -------------------------------------------------------------------------
    # Natural key lookups
    # -------------------------------------------------------------------------

    def preload_ids(self) -> NaturalKeyIndex:
        """Bulk load every natural key to id map, one query per table"""
        return NaturalKeyIndex(
            persons=dict(self.session.execute(select(DimPerson.uuid, DimPerson.person_id)).all()),
            stores=dict(self.session.execute(select(DimStore.store_code, DimStore.store_id)).all()),
            items=dict(self.session.execute(select(DimItem.unique_code, DimItem.item_id)).all()),
            sales=dict(self.session.execute(select(FactSale.unique_code, FactSale.sale_id)).all()),
        )

    def _lookup(self, column, id_column, entity: str, key: str) -> int:
        found: Optional[int] = self.session.execute(
            select(id_column).where(column == key)
        ).scalar_one_or_none()
        if found is None:
            raise UnresolvedReferenceError(entity, key)
        return found

    def person_id(self, uuid: str) -> int:
        return self._lookup(DimPerson.uuid, DimPerson.person_id, "person", uuid)

    def store_id(self, store_code: str) -> int:
        return self._lookup(DimStore.store_code, DimStore.store_id, "store", store_code)

    def item_id(self, unique_code: str) -> int:
        return self._lookup(DimItem.unique_code, DimItem.item_id, "item", unique_code)

    def sale_id(self, unique_code: str) -> int:
        return self._lookup(FactSale.unique_code, FactSale.sale_id, "sale", unique_code)

    def count(self, model: Type[Base]) -> int:
        return self.session.execute(select(func.count()).select_from(model)).scalar_one()


def persist_ledger(ledger: Ledger, engine: Engine) -> NaturalKeyIndex:
    """Store a ledger in a single transaction on a fresh session"""
    with session_scope(engine) as session:
        return SalesRepository(session).save_ledger(ledger)
