"""
Unit Tests - Load Pipeline
"""
import pytest
from decimal import Decimal

from sales_ledger.config import ErrorPolicy
from sales_ledger.exceptions import InvalidLeasePeriodError, UnresolvedReferenceError
from sales_ledger.ingestion import LoadStatus, SalesPipeline


class TestSalesPipeline:
    """Tests for SalesPipeline"""

    def test_full_load(self, data_dir, make_settings):
        """Test every file is loaded and joined"""
        pipeline = SalesPipeline(make_settings(data_dir))

        ledger = pipeline.run()

        assert len(ledger.persons) == 3
        assert len(ledger.stores) == 2
        assert len(ledger.items) == 5
        assert [sale.unique_code for sale in ledger.sale_list] == ["sa1", "sa2"]
        assert ledger.sales["sa2"].net_price == Decimal("1681.50")
        assert ledger.row_errors == []

    def test_summary_completed(self, data_dir, make_settings):
        """Test a clean run records its counts"""
        pipeline = SalesPipeline(make_settings(data_dir))
        pipeline.run()

        summary = pipeline.summary
        assert summary.status == LoadStatus.COMPLETED
        assert summary.sales_loaded == 2
        assert summary.sale_lines_loaded == 5
        assert summary.sale_lines_rejected == 0
        assert summary.completed_at is not None
        assert summary.load_duration_seconds >= 0

    def test_tolerates_blank_lines_and_dangling_delimiters(self, data_dir, make_settings):
        """Test file layout noise does not change the result"""
        (data_dir / "Persons.csv").write_text(
            "uuid,first,last,street,city,state,zip,emails\n"
            "\n"
            "p1,Ada,Lovelace,1 Main St,Lincoln,NE,68508,ada@example.com,\n"
            "p2,Alan,Turing,2 Oak Ave,Omaha,NE,68102,\n"
            "p3,Grace,Hopper,1 Main St,Lincoln,NE,68508,,\n",
            encoding="utf-8",
        )

        ledger = SalesPipeline(make_settings(data_dir)).run()

        assert ledger.persons["p1"].emails == ["ada@example.com"]
        assert ledger.persons["p2"].emails == []
        assert ledger.persons["p3"].emails == []

    def test_fail_fast_run(self, data_dir, make_settings):
        """Test a bad sale line fails the run"""
        with open(data_dir / "SaleItems.csv", "a", encoding="utf-8") as fh:
            fh.write("sa9,i1\n")
        pipeline = SalesPipeline(make_settings(data_dir))

        with pytest.raises(UnresolvedReferenceError):
            pipeline.run()

        assert pipeline.summary.status == LoadStatus.FAILED
        assert "sa9" in pipeline.summary.error_message

    def test_collect_run_is_partial(self, data_dir, make_settings):
        """Test collect mode finishes with the rejected rows listed"""
        with open(data_dir / "SaleItems.csv", "a", encoding="utf-8") as fh:
            fh.write("sa9,i1\n")
        pipeline = SalesPipeline(make_settings(data_dir, ErrorPolicy.COLLECT))

        ledger = pipeline.run()

        assert pipeline.summary.status == LoadStatus.PARTIAL
        assert pipeline.summary.sale_lines_loaded == 5
        assert pipeline.summary.sale_lines_rejected == 1
        assert pipeline.summary.row_errors[0]["row"] == 7
        assert ledger.row_errors[0].sale_code == "sa9"

    def test_missing_file(self, data_dir, make_settings):
        """Test a missing record file fails the run"""
        (data_dir / "Stores.csv").unlink()
        pipeline = SalesPipeline(make_settings(data_dir))

        with pytest.raises(FileNotFoundError):
            pipeline.run()

        assert pipeline.summary.status == LoadStatus.FAILED

    def test_short_lease_fails_during_assembly(self, data_dir, make_settings):
        """Test a lease under one month is rejected at its own row"""
        with open(data_dir / "SaleItems.csv", "a", encoding="utf-8") as fh:
            fh.write("sa1,i1,2024-01-01,2024-01-15\n")
        pipeline = SalesPipeline(make_settings(data_dir, ErrorPolicy.COLLECT))

        ledger = pipeline.run()

        assert ledger.row_errors[0].row == 7
        assert ledger.row_errors[0].error_type == InvalidLeasePeriodError.__name__
        assert len(ledger.sales["sa1"].items) == 2

    def test_run_statuses(self):
        """Test a run ends in one of the terminal statuses it reports"""
        assert {status.value for status in LoadStatus} == {
            "running",
            "completed",
            "failed",
            "partial",
        }
