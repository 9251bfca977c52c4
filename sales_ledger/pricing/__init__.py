"""
Pricing Module
"""
from .rules import round_money, lease_period_in_months
from .totals import sale_gross_price, sale_total_tax, sale_net_price, rank_sales

__all__ = [
    "round_money",
    "lease_period_in_months",
    "sale_gross_price",
    "sale_total_tax",
    "sale_net_price",
    "rank_sales",
]
