"""
Unit Tests - Persistence Gateway
"""
import pytest
from decimal import Decimal
from sqlalchemy import event, select

from sales_ledger.database import (
    SalesRepository,
    create_schema,
    drop_schema,
    persist_ledger,
    session_scope,
)
from sales_ledger.database.models import (
    DimAddress,
    DimEmail,
    DimItem,
    DimPerson,
    DimStore,
    FactSale,
    FactSaleItem,
)
from sales_ledger.exceptions import UnresolvedReferenceError
from sales_ledger.ingestion import Ledger, SaleAssembler, load_items
from sales_ledger.models import Address


@pytest.fixture
def ledger(persons, stores, items, sales, sale_item_records) -> Ledger:
    SaleAssembler(items, persons).assemble(sales, sale_item_records)
    return Ledger(persons=persons, stores=stores, items=items, sales=sales)


class TestSaveLedger:
    """Tests for storing an assembled ledger"""

    def test_row_counts(self, test_engine, ledger):
        """Test every entity is stored once"""
        index = persist_ledger(ledger, test_engine)

        assert set(index.persons) == {"p1", "p2", "p3"}
        assert set(index.sales) == {"sa1", "sa2"}
        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            assert repo.count(DimPerson) == 3
            assert repo.count(DimStore) == 2
            assert repo.count(DimItem) == 5
            assert repo.count(FactSale) == 2
            assert repo.count(FactSaleItem) == 5
            assert repo.count(DimEmail) == 3
            # p1 and p3 share an address
            assert repo.count(DimAddress) == 4

    def test_sale_lines_and_totals(self, test_engine, ledger):
        """Test sale totals and variant columns are stored"""
        persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            sale = session.execute(
                select(FactSale).where(FactSale.unique_code == "sa2")
            ).scalar_one()
            assert sale.net_price == Decimal("1681.50")
            assert [line.item_type for line in sale.lines] == ["P", "L", "S"]
            assert [line.line_number for line in sale.lines] == [1, 2, 3]

            lease = sale.lines[1]
            assert lease.gross_price == Decimal("300.00")
            assert lease.end_date.isoformat() == "2024-07-01"

            service = sale.lines[2]
            assert service.employee_id == SalesRepository(session).person_id("p2")

    def test_emails_keep_order(self, test_engine, ledger):
        persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            person = session.execute(
                select(DimPerson).where(DimPerson.uuid == "p1")
            ).scalar_one()
            assert [email.address for email in person.emails] == [
                "ada@example.com",
                "ada@work.com",
            ]

    def test_reload_replaces_rows(self, test_engine, ledger):
        """Test storing twice leaves one copy of the ledger"""
        persist_ledger(ledger, test_engine)
        persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            assert repo.count(FactSale) == 2
            assert repo.count(DimPerson) == 3

    def test_save_over_stored_ledger(self, test_engine, ledger):
        """Test saving on a populated database replaces its contents"""
        first = persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            second = SalesRepository(session).save_ledger(ledger)

        assert set(second.sales) == set(first.sales)
        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            assert repo.count(DimPerson) == 3
            assert repo.count(DimAddress) == 4
            assert repo.count(FactSaleItem) == 5

    def test_sub_cent_inputs_kept(self, test_engine, persons, stores, sales, item_records):
        """Test base prices and quantities are stored at full precision"""
        item_records.append(["i6", "D", "Data Micro", "0.125"])
        items = load_items(item_records)
        SaleAssembler(items, persons).assemble(
            sales, [["saleCode", "itemCode", "gb"], ["sa1", "i6", "3.333"]]
        )
        persist_ledger(
            Ledger(persons=persons, stores=stores, items=items, sales=sales), test_engine
        )

        with session_scope(test_engine) as session:
            item = session.execute(
                select(DimItem).where(DimItem.unique_code == "i6")
            ).scalar_one()
            line = session.execute(
                select(FactSaleItem).where(FactSaleItem.item_id == item.item_id)
            ).scalar_one()
            assert item.base_price == Decimal("0.125")
            assert line.total_gb == Decimal("3.333")
            assert line.gross_price == Decimal("0.42")

    def test_failed_save_rolls_back(self, test_engine, ledger, stores):
        """Test a failing save leaves the previous contents in place"""
        persist_ledger(ledger, test_engine)
        broken = Ledger(stores=stores)

        with pytest.raises(UnresolvedReferenceError):
            persist_ledger(broken, test_engine)

        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            assert repo.count(DimStore) == 2
            assert repo.count(FactSale) == 2


class TestLookups:
    """Tests for natural key resolution"""

    def test_lookup_ids(self, test_engine, ledger):
        """Test natural keys resolve to the stored ids"""
        index = persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            assert repo.person_id("p1") == index.persons["p1"]
            assert repo.store_id("s2") == index.stores["s2"]
            assert repo.item_id("i3") == index.items["i3"]
            assert repo.sale_id("sa1") == index.sales["sa1"]

    def test_unknown_key(self, test_engine, ledger):
        persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            with pytest.raises(UnresolvedReferenceError) as exc_info:
                SalesRepository(session).store_id("s99")

        assert exc_info.value.entity == "store"

    def test_preload_ids(self, test_engine, ledger):
        """Test bulk preload matches the ids assigned on save"""
        index = persist_ledger(ledger, test_engine)

        with session_scope(test_engine) as session:
            preloaded = SalesRepository(session).preload_ids()

        assert preloaded == index


class TestSchema:
    """Tests for schema management"""

    def test_drop_and_create(self, test_engine, ledger):
        """Test dropping the schema removes stored rows"""
        persist_ledger(ledger, test_engine)

        drop_schema(test_engine)
        create_schema(test_engine)

        with session_scope(test_engine) as session:
            assert SalesRepository(session).count(FactSale) == 0


class TestAddresses:
    """Tests for address deduplication"""

    def test_addresses_inserted_with_one_flush(self, test_engine):
        """Test new addresses are written in a single batch, duplicates once"""
        home = Address("1 Main St", "Lincoln", "NE", 68508)
        office = Address("20 Plaza Blvd", "Omaha", "NE", 68102)

        with session_scope(test_engine) as session:
            flushes = []
            event.listen(session, "after_flush", lambda *args: flushes.append(1))
            repo = SalesRepository(session)

            ids = repo.save_addresses([home, office, Address("1 Main St", "Lincoln", "NE", 68508)])

            assert len(flushes) == 1
            assert set(ids) == {home, office}
            assert repo.count(DimAddress) == 2

    def test_known_addresses_not_reinserted(self, test_engine):
        home = Address("1 Main St", "Lincoln", "NE", 68508)

        with session_scope(test_engine) as session:
            repo = SalesRepository(session)
            first = dict(repo.save_addresses([home]))
            second = repo.save_addresses([home])

            assert second[home] == first[home]
            assert repo.count(DimAddress) == 1
