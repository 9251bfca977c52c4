"""
Unit Tests - Reporting
"""
import pytest
import polars as pl
from decimal import Decimal

from sales_ledger.ingestion import SaleAssembler
from sales_ledger.reporting import (
    render_receipt,
    render_summary_report,
    sales_summary_frame,
    store_summary_frame,
)


@pytest.fixture
def assembled_sales(items, persons, sales, sale_item_records):
    SaleAssembler(items, persons).assemble(sales, sale_item_records)
    return sales


class TestSummaryFrames:
    """Tests for Polars summary frames"""

    def test_sales_frame_ranked(self, assembled_sales):
        """Test one row per sale, highest net price first"""
        df = sales_summary_frame(assembled_sales.values())

        assert df["sale_code"].to_list() == ["sa2", "sa1"]
        assert df["item_count"].to_list() == [3, 2]
        assert df["net_price"].to_list() == [Decimal("1681.50"), Decimal("116.65")]
        assert df["customer"].to_list() == ["Hopper, Grace", "Turing, Alan"]

    def test_sales_frame_empty(self):
        """Test no sales give an empty frame with the full schema"""
        df = sales_summary_frame([])

        assert df.height == 0
        assert "net_price" in df.columns
        assert isinstance(df.schema["net_price"], pl.Decimal)

    def test_store_frame(self, stores, assembled_sales):
        """Test per-store counts and totals"""
        df = store_summary_frame(stores, assembled_sales.values())

        assert df["store_code"].to_list() == ["s2", "s1"]
        assert df["sale_count"].to_list() == [1, 1]
        assert df["grand_total"].to_list() == [Decimal("1681.50"), Decimal("116.65")]
        assert df["manager"].to_list() == ["Hopper, Grace", "Lovelace, Ada"]

    def test_store_without_sales(self, stores, assembled_sales):
        """Test a store with no sales is listed with zero totals"""
        only_sa1 = [assembled_sales["sa1"]]

        df = store_summary_frame(stores, only_sa1)

        assert df["store_code"].to_list() == ["s1", "s2"]
        assert df["sale_count"].to_list() == [1, 0]
        assert df["grand_total"].to_list()[1] == Decimal("0")


class TestTextReports:
    """Tests for receipts and the summary report"""

    def test_receipt(self, assembled_sales):
        """Test a receipt lists the sale, its parties and totals"""
        receipt = render_receipt(assembled_sales["sa1"])

        assert receipt.startswith("Sale    #sa1")
        assert "Store   #s1" in receipt
        assert "Turing, Alan (p2)" in receipt
        assert "Lovelace, Ada (p1)" in receipt
        assert "ada@example.com, ada@work.com" in receipt
        assert "Data 5G (i3)" in receipt
        assert "Voice Unlimited (i4)" in receipt
        assert "116.65" in receipt
        assert "6.65" in receipt

    def test_receipt_lease_details(self, assembled_sales):
        receipt = render_receipt(assembled_sales["sa2"])

        assert "Lease for 6 months (2024-01-01 to 2024-07-01)" in receipt
        assert "Service by Turing, Alan" in receipt

    def test_summary_report_order_and_totals(self, assembled_sales):
        """Test the summary is ranked and totalled"""
        report = render_summary_report(assembled_sales.values())
        lines = report.splitlines()

        assert lines[0] == "Summary Report - By Total"
        assert lines[3].startswith("sa2")
        assert lines[4].startswith("sa1")
        assert "1798.15" in lines[-1]
        assert "88.15" in lines[-1]
