"""
Reporting Module
"""
from .receipts import render_receipt, render_summary_report
from .summaries import sales_summary_frame, store_summary_frame

__all__ = [
    "render_receipt",
    "render_summary_report",
    "sales_summary_frame",
    "store_summary_frame",
]
