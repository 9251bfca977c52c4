"""
Retail Sales Ledger
Configuration Module
"""
from .settings import ErrorPolicy, Settings, get_settings

__all__ = ["ErrorPolicy", "Settings", "get_settings"]
