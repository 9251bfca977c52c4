"""
Test Suite Configuration
"""
import pytest
from pathlib import Path
from typing import Callable, Dict, List

from sales_ledger.config import ErrorPolicy, Settings
from sales_ledger.config.settings import AssemblySettings, DataFileSettings
from sales_ledger.database import create_db_engine, create_schema
from sales_ledger.ingestion import load_items, load_persons, load_sales, load_stores
from sales_ledger.models import CatalogItem, Person, Sale, Store


PERSON_RECORDS = [
    ["uuid", "firstName", "lastName", "street", "city", "state", "zip", "emails"],
    ["p1", "Ada", "Lovelace", "1 Main St", "Lincoln", "NE", "68508", "ada@example.com", "ada@work.com"],
    ["p2", "Alan", "Turing", "2 Oak Ave", "Omaha", "NE", "68102"],
    ["p3", "Grace", "Hopper", "1 Main St", "Lincoln", "NE", "68508", "grace@example.com"],
]

STORE_RECORDS = [
    ["storeCode", "managerUuid", "street", "city", "state", "zip"],
    ["s1", "p1", "10 Market St", "Lincoln", "NE", "68508"],
    ["s2", "p3", "20 Plaza Blvd", "Omaha", "NE", "68102"],
]

ITEM_RECORDS = [
    ["uniqueCode", "typeCode", "name", "basePrice"],
    ["i1", "P", "Smartphone", "1200.00"],
    ["i2", "S", "Screen Repair", "40.00"],
    ["i3", "D", "Data 5G", "10.00"],
    ["i4", "V", "Voice Unlimited", "2.00"],
    ["i5", "X", "Mystery Box", "1.00"],
]

SALE_RECORDS = [
    ["saleCode", "storeCode", "customerUuid", "salesmanUuid", "date"],
    ["sa1", "s1", "p2", "p1", "2024-02-01"],
    ["sa2", "s2", "p3", "p1", "2024-02-02"],
]

SALE_ITEM_RECORDS = [
    ["saleCode", "itemCode", "fields"],
    ["sa1", "i3", "5"],
    ["sa1", "i4", "402-555-0100", "30"],
    ["sa2", "i1"],
    ["sa2", "i1", "2024-01-01", "2024-07-01"],
    ["sa2", "i2", "2.5", "p2"],
]


@pytest.fixture
def person_records() -> List[List[str]]:
    return [list(record) for record in PERSON_RECORDS]


@pytest.fixture
def item_records() -> List[List[str]]:
    return [list(record) for record in ITEM_RECORDS]


@pytest.fixture
def persons() -> Dict[str, Person]:
    return load_persons(PERSON_RECORDS)


@pytest.fixture
def stores(persons) -> Dict[str, Store]:
    return load_stores(STORE_RECORDS, persons)


@pytest.fixture
def items() -> Dict[str, CatalogItem]:
    return load_items(ITEM_RECORDS)


@pytest.fixture
def sales(stores, persons) -> Dict[str, Sale]:
    """Fresh sale headers with no items"""
    return load_sales(SALE_RECORDS, stores, persons)


@pytest.fixture
def sale_item_records() -> List[List[str]]:
    return [list(record) for record in SALE_ITEM_RECORDS]


def write_records(path: Path, records: List[List[str]]) -> None:
    path.write_text("\n".join(",".join(record) for record in records) + "\n", encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Directory with a complete, valid set of record files"""
    write_records(tmp_path / "Persons.csv", PERSON_RECORDS)
    write_records(tmp_path / "Stores.csv", STORE_RECORDS)
    write_records(tmp_path / "Items.csv", ITEM_RECORDS)
    write_records(tmp_path / "Sales.csv", SALE_RECORDS)
    write_records(tmp_path / "SaleItems.csv", SALE_ITEM_RECORDS)
    return tmp_path


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build settings pointing at a data directory"""
    def _make(data_dir: Path, error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST) -> Settings:
        return Settings(
            data_files=DataFileSettings(data_dir=data_dir),
            assembly=AssemblySettings(error_policy=error_policy),
        )
    return _make


@pytest.fixture
def test_engine():
    """In-memory SQLite engine with the ledger schema"""
    engine = create_db_engine("sqlite://", echo=False)
    create_schema(engine)
    yield engine
    engine.dispose()
