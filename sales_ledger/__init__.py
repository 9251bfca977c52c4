"""
Retail Sales Ledger

Loads catalog and sales records from delimited files, assembles them into a
priced object graph and stores it.
"""

__version__ = "1.0.0"
