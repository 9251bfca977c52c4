"""
Command Line Entry Point

Usage:
    sales-ledger report [--data-dir DIR] [--receipts] [--collect-errors]
    sales-ledger load   [--data-dir DIR] [--database-url URL] [--collect-errors]
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl
import structlog
from sqlalchemy.exc import SQLAlchemyError

from sales_ledger.config import ErrorPolicy, Settings, get_settings
from sales_ledger.config.logging import configure_logging
from sales_ledger.exceptions import SalesLedgerError
from sales_ledger.ingestion import Ledger, SalesPipeline

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sales-ledger", description="Retail sales ledger")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the record files")
    parser.add_argument(
        "--collect-errors",
        action="store_true",
        help="Skip and report bad sale lines instead of aborting",
    )
    parser.add_argument("--log-level", help="Override log level")

    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Print sales and store summaries")
    report.add_argument("--receipts", action="store_true", help="Also print every receipt")

    load = sub.add_parser("load", help="Store the assembled ledger in the database")
    load.add_argument("--database-url", help="SQLAlchemy URL (defaults to settings)")
    load.add_argument("--create-schema", action="store_true", help="Create missing tables first")
    return parser


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    updates = {}
    if args.data_dir is not None:
        updates["data_files"] = settings.data_files.model_copy(update={"data_dir": args.data_dir})
    if args.collect_errors:
        updates["assembly"] = settings.assembly.model_copy(
            update={"error_policy": ErrorPolicy.COLLECT}
        )
    return settings.model_copy(update=updates) if updates else settings


def print_reports(ledger: Ledger, receipts: bool = False) -> None:
    from sales_ledger.reporting import (
        render_receipt,
        render_summary_report,
        store_summary_frame,
    )

    print(render_summary_report(ledger.sale_list))
    print()
    with pl.Config(tbl_rows=-1, tbl_hide_dataframe_shape=True):
        print("Store Sales Summary Report")
        print(store_summary_frame(ledger.stores, ledger.sale_list))
    if receipts:
        for sale in ledger.sale_list:
            print()
            print(render_receipt(sale))


def load_database(ledger: Ledger, url: Optional[str], create: bool) -> None:
    from sales_ledger.database import create_db_engine, create_schema, persist_ledger

    engine = create_db_engine(url)
    try:
        if create:
            create_schema(engine)
        index = persist_ledger(ledger, engine)
        logger.info("Ledger persisted", sales=len(index.sales), dialect=engine.dialect.name)
        print(f"Stored {len(index.sales)} sales for {len(index.stores)} stores")
    finally:
        engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level)
    settings = _settings_for(args)

    pipeline = SalesPipeline(settings)
    try:
        ledger = pipeline.run()
    except (SalesLedgerError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for error in ledger.row_errors:
        print(f"rejected row {error.row}: {error.message}", file=sys.stderr)

    if args.command == "report":
        print_reports(ledger, receipts=args.receipts)
    elif args.command == "load":
        try:
            load_database(ledger, args.database_url, args.create_schema)
        except (SalesLedgerError, SQLAlchemyError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
