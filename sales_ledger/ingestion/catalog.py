"""
Catalog Loader

Builds natural-key lookup tables for catalog items, persons, stores and sale
headers from parsed records.

Every loader receives the full record sequence of one file, discards the
first record as a header, and either returns a complete mapping or raises:
parsing is all-or-nothing per file. Duplicate natural keys are not an
error; the later record wins.
"""

from typing import Dict, List, Mapping, Sequence, TypeVar

import structlog

from sales_ledger.exceptions import MalformedFieldError, UnresolvedReferenceError
from sales_ledger.ingestion.fields import (
    parse_date,
    parse_decimal,
    parse_int,
    parse_text,
    require_fields,
)
from sales_ledger.models import Address, CatalogItem, Person, Sale, Store

logger = structlog.get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")

Records = Sequence[Sequence[str]]

# Column index where a person's variable-length email tail starts
PERSON_EMAIL_START = 7


def _data_rows(records: Records):
    """Yield (row_number, record) pairs, skipping the header row"""
    for row_number, record in enumerate(records[1:], start=2):
        yield row_number, record


def _log_loaded(source: str, records: Records, mapping: Mapping) -> None:
    data_rows = max(len(records) - 1, 0)
    overwritten = data_rows - len(mapping)
    if overwritten:
        logger.warning(
            "Duplicate natural keys overwritten",
            source=source,
            duplicates=overwritten,
        )
    logger.info("Catalog loaded", source=source, rows=data_rows, entries=len(mapping))


def _parse_address(
    record: Sequence[str], offset: int, source: str, row: int
) -> Address:
    return Address(
        street=record[offset],
        city=record[offset + 1],
        state=record[offset + 2],
        zip_code=parse_int(record[offset + 3], source, row, "zip"),
    )


def load_items(records: Records, source: str = "items") -> Dict[str, CatalogItem]:
    """
    Load catalog item definitions keyed by unique code.

    Columns: uniqueCode, typeCode, name, basePrice
    """
    items: Dict[str, CatalogItem] = {}
    try:
        for row, record in _data_rows(records):
            require_fields(record, 4, source, row)
            item = CatalogItem(
                unique_code=parse_text(record[0], source, row, "uniqueCode"),
                type_code=parse_text(record[1], source, row, "typeCode"),
                name=record[2],
                base_price=parse_decimal(record[3], source, row, "basePrice"),
            )
            items[item.unique_code] = item
    except MalformedFieldError as e:
        logger.error("Catalog load failed", source=source, error=str(e))
        raise

    _log_loaded(source, records, items)
    return items


def load_persons(records: Records, source: str = "persons") -> Dict[str, Person]:
    """
    Load persons keyed by uuid.

    Columns: uuid, firstName, lastName, street, city, state, zip,
    email1 ... emailN. Every field from the eighth column on is an email,
    kept in order with duplicates.
    """
    persons: Dict[str, Person] = {}
    try:
        for row, record in _data_rows(records):
            require_fields(record, PERSON_EMAIL_START, source, row)
            person = Person(
                uuid=parse_text(record[0], source, row, "uuid"),
                first_name=record[1],
                last_name=record[2],
                address=_parse_address(record, 3, source, row),
                emails=list(record[PERSON_EMAIL_START:]),
            )
            persons[person.uuid] = person
    except MalformedFieldError as e:
        logger.error("Catalog load failed", source=source, error=str(e))
        raise

    _log_loaded(source, records, persons)
    return persons


def load_stores(
    records: Records,
    persons: Mapping[str, Person],
    source: str = "stores",
) -> Dict[str, Store]:
    """
    Load stores keyed by store code, resolving managers from the persons lookup.

    Columns: storeCode, managerUuid, street, city, state, zip
    """
    stores: Dict[str, Store] = {}
    try:
        for row, record in _data_rows(records):
            require_fields(record, 6, source, row)
            manager_uuid = record[1]
            manager = persons.get(manager_uuid)
            if manager is None:
                raise UnresolvedReferenceError("manager", manager_uuid, row=row)
            store = Store(
                store_code=parse_text(record[0], source, row, "storeCode"),
                address=_parse_address(record, 2, source, row),
                manager=manager,
            )
            stores[store.store_code] = store
    except (MalformedFieldError, UnresolvedReferenceError) as e:
        logger.error("Catalog load failed", source=source, error=str(e))
        raise

    _log_loaded(source, records, stores)
    return stores


def load_sales(
    records: Records,
    stores: Mapping[str, Store],
    persons: Mapping[str, Person],
    source: str = "sales",
) -> Dict[str, Sale]:
    """
    Load sale headers keyed by sale code, with no items yet.

    Columns: saleCode, storeCode, customerUuid, salesmanUuid, date
    """
    sales: Dict[str, Sale] = {}
    try:
        for row, record in _data_rows(records):
            require_fields(record, 5, source, row)
            sale_code = parse_text(record[0], source, row, "saleCode")
            store = stores.get(record[1])
            if store is None:
                raise UnresolvedReferenceError("store", record[1], row=row)
            customer = persons.get(record[2])
            if customer is None:
                raise UnresolvedReferenceError("customer", record[2], row=row)
            salesman = persons.get(record[3])
            if salesman is None:
                raise UnresolvedReferenceError("salesman", record[3], row=row)
            sales[sale_code] = Sale(
                unique_code=sale_code,
                store=store,
                customer=customer,
                salesman=salesman,
                date=parse_date(record[4], source, row, "date"),
            )
    except (MalformedFieldError, UnresolvedReferenceError) as e:
        logger.error("Catalog load failed", source=source, error=str(e))
        raise

    _log_loaded(source, records, sales)
    return sales


def to_list(mapping: Mapping[K, V]) -> List[V]:
    """List view of a lookup table, in no guaranteed order."""
    return list(mapping.values())
