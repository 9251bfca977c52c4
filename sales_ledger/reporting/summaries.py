"""
Sales Summaries

Tabular views of an assembled ledger as Polars DataFrames. Money columns
use a two-decimal Decimal dtype so report totals match the pricing engine
to the cent.
"""

from decimal import Decimal
from typing import Iterable, Mapping

import polars as pl
import structlog

from sales_ledger.models import Sale, Store
from sales_ledger.pricing import rank_sales

logger = structlog.get_logger(__name__)

MONEY = pl.Decimal(precision=18, scale=2)

SALES_SCHEMA = {
    "sale_code": pl.Utf8,
    "store_code": pl.Utf8,
    "sale_date": pl.Date,
    "customer": pl.Utf8,
    "salesman": pl.Utf8,
    "item_count": pl.Int64,
    "gross_price": MONEY,
    "total_tax": MONEY,
    "net_price": MONEY,
}

STORES_SCHEMA = {
    "store_code": pl.Utf8,
    "manager": pl.Utf8,
}


def sales_summary_frame(sales: Iterable[Sale]) -> pl.DataFrame:
    """
    One row per sale, ranked by net price (highest first, ties in input order).

    Returns:
        pl.DataFrame: Columns of SALES_SCHEMA
    """
    rows = [
        {
            "sale_code": sale.unique_code,
            "store_code": sale.store.store_code,
            "sale_date": sale.date,
            "customer": sale.customer.full_name,
            "salesman": sale.salesman.full_name,
            "item_count": len(sale.items),
            "gross_price": sale.gross_price,
            "total_tax": sale.total_tax,
            "net_price": sale.net_price,
        }
        for sale in rank_sales(sales)
    ]
    return pl.DataFrame(rows, schema=SALES_SCHEMA)


def store_summary_frame(
    stores: Mapping[str, Store],
    sales: Iterable[Sale],
) -> pl.DataFrame:
    """
    Per-store sale count and grand total, stores without sales included.

    Ordered by grand total descending, then store code.
    """
    store_frame = pl.DataFrame(
        [
            {"store_code": store.store_code, "manager": store.manager.full_name}
            for store in stores.values()
        ],
        schema=STORES_SCHEMA,
    )

    totals = (
        sales_summary_frame(sales)
        .group_by("store_code")
        .agg(
            pl.len().alias("sale_count"),
            pl.col("net_price").sum().alias("grand_total"),
        )
    )

    summary = (
        store_frame.join(totals, on="store_code", how="left")
        .with_columns(
            pl.col("sale_count").fill_null(0).cast(pl.Int64),
            pl.col("grand_total").fill_null(pl.lit(Decimal("0.00"))).cast(MONEY),
        )
        .sort(["grand_total", "store_code"], descending=[True, False])
    )
    logger.debug("Store summary built", stores=summary.height)
    return summary
