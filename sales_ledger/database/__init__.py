"""
Database Module
"""
from .connection import create_db_engine, create_schema, drop_schema, session_scope
from .gateway import NaturalKeyIndex, SalesRepository, persist_ledger
from .models import Base

__all__ = [
    "create_db_engine",
    "create_schema",
    "drop_schema",
    "session_scope",
    "NaturalKeyIndex",
    "SalesRepository",
    "persist_ledger",
    "Base",
]
