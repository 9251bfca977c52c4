"""
Load Pipeline

Full, from-scratch load of the five record files into a priced object
graph:

1. read persons, stores, catalog items and sale headers into lookups
2. assemble sale-line items onto their sales, pricing each line on its own
   row so pricing errors surface before the graph is handed on

All lookups are built in memory before the join pass; nothing is fetched
per row.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, Field

from sales_ledger.config import Settings, get_settings
from sales_ledger.ingestion.assembler import RowError, SaleAssembler
from sales_ledger.ingestion.catalog import (
    load_items,
    load_persons,
    load_sales,
    load_stores,
)
from sales_ledger.ingestion.reader import read_records
from sales_ledger.models import CatalogItem, Person, Sale, Store

logger = structlog.get_logger(__name__)


class LoadStatus(str, Enum):
    """Pipeline run status"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


class LoadSummary(BaseModel):
    """Result of a pipeline run"""
    status: LoadStatus
    persons_loaded: int = 0
    stores_loaded: int = 0
    items_loaded: int = 0
    sales_loaded: int = 0
    sale_lines_loaded: int = 0
    sale_lines_rejected: int = 0
    error_message: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    load_duration_seconds: float = 0
    row_errors: List[Dict[str, Any]] = Field(default_factory=list)


@dataclass
class Ledger:
    """The assembled object graph of one run"""
    persons: Dict[str, Person] = field(default_factory=dict)
    stores: Dict[str, Store] = field(default_factory=dict)
    items: Dict[str, CatalogItem] = field(default_factory=dict)
    sales: Dict[str, Sale] = field(default_factory=dict)
    row_errors: List[RowError] = field(default_factory=list)

    @property
    def sale_list(self) -> List[Sale]:
        """Sales in sale-header file order"""
        return list(self.sales.values())


class SalesPipeline:
    """
    Loads the record files named in the settings into a Ledger.

    Example:
        pipeline = SalesPipeline()
        ledger = pipeline.run()
        print(pipeline.summary.status)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.summary: Optional[LoadSummary] = None

    def _read(self, file_name: str):
        files = self.settings.data_files
        return read_records(
            files.path_for(file_name),
            delimiter=files.delimiter,
            encoding=files.encoding,
        )

    def build_ledger(self) -> Ledger:
        """Read, join and price every record set. Raises on the first fatal error."""
        files = self.settings.data_files

        persons = load_persons(self._read(files.persons_file), source=files.persons_file)
        stores = load_stores(self._read(files.stores_file), persons, source=files.stores_file)
        items = load_items(self._read(files.items_file), source=files.items_file)
        sales = load_sales(
            self._read(files.sales_file), stores, persons, source=files.sales_file
        )

        assembler = SaleAssembler(
            items,
            persons,
            error_policy=self.settings.assembly.error_policy,
            source=files.sale_items_file,
        )
        result = assembler.assemble(sales, self._read(files.sale_items_file))

        return Ledger(
            persons=persons,
            stores=stores,
            items=items,
            sales=sales,
            row_errors=result.errors,
        )

    def run(self) -> Ledger:
        """
        Run the pipeline and record a LoadSummary.

        Returns:
            Ledger: The assembled graph

        Raises:
            SalesLedgerError, FileNotFoundError: The run failed; no ledger is returned
        """
        started_at = datetime.utcnow()
        self.summary = LoadSummary(status=LoadStatus.RUNNING, started_at=started_at)
        logger.info("Starting sales load", data_dir=str(self.settings.data_files.data_dir))

        try:
            ledger = self.build_ledger()
        except Exception as e:
            self._finish(LoadStatus.FAILED, started_at, error_message=str(e))
            logger.error(
                "Sales load failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        summary = self.summary
        summary.persons_loaded = len(ledger.persons)
        summary.stores_loaded = len(ledger.stores)
        summary.items_loaded = len(ledger.items)
        summary.sales_loaded = len(ledger.sales)
        summary.sale_lines_loaded = sum(len(sale.items) for sale in ledger.sales.values())
        summary.sale_lines_rejected = len(ledger.row_errors)
        summary.row_errors = [
            {
                "row": error.row,
                "error_type": error.error_type,
                "message": error.message,
            }
            for error in ledger.row_errors
        ]
        status = LoadStatus.PARTIAL if ledger.row_errors else LoadStatus.COMPLETED
        self._finish(status, started_at)

        logger.info(
            "Sales load completed",
            status=status.value,
            sales=summary.sales_loaded,
            sale_lines=summary.sale_lines_loaded,
            rejected=summary.sale_lines_rejected,
            duration_seconds=summary.load_duration_seconds,
        )
        return ledger

    def _finish(
        self,
        status: LoadStatus,
        started_at: datetime,
        error_message: Optional[str] = None,
    ) -> None:
        self.summary.status = status
        self.summary.error_message = error_message
        self.summary.completed_at = datetime.utcnow()
        self.summary.load_duration_seconds = (
            self.summary.completed_at - started_at
        ).total_seconds()
