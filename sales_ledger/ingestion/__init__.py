"""
Data Ingestion Module
"""
from .assembler import AssemblyResult, RowError, SaleAssembler
from .catalog import load_items, load_persons, load_sales, load_stores
from .pipeline import Ledger, LoadStatus, LoadSummary, SalesPipeline
from .reader import read_records

__all__ = [
    "AssemblyResult",
    "RowError",
    "SaleAssembler",
    "load_items",
    "load_persons",
    "load_sales",
    "load_stores",
    "Ledger",
    "LoadStatus",
    "LoadSummary",
    "SalesPipeline",
    "read_records",
]
