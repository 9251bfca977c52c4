"""
Text Reports

Fixed-width renderings of sales: a detailed receipt per sale and a summary
table of all sales.
"""

from decimal import Decimal
from typing import Iterable, List

from sales_ledger.models import (
    DataPlan,
    Person,
    ProductLease,
    ProductPurchase,
    Sale,
    SaleItem,
    Service,
    VoicePlan,
)
from sales_ledger.pricing import rank_sales
from sales_ledger.pricing.rules import sum_money

RULE = "-=" * 41
WIDTH = len(RULE)


def _money_columns(label: str, tax: Decimal, total: Decimal) -> str:
    return f"{label:>58} ${tax:>10.2f} ${total:>10.2f}"


def render_person(person: Person) -> str:
    address = person.address
    return "\n".join(
        [
            f"{person.full_name} ({person.uuid})",
            f"\t{', '.join(person.emails) if person.emails else '(no email)'}",
            f"\t{address.street}",
            f"\t{address.city} {address.state} {address.zip_code}",
        ]
    )


def _item_detail(item: SaleItem) -> str:
    if isinstance(item, ProductLease):
        return f"Lease for {item.period_in_months} months ({item.start_date} to {item.end_date})"
    if isinstance(item, Service):
        return (
            f"Service by {item.employee.full_name}: "
            f"{item.total_hours:.2f} hours @ ${item.hourly_rate:.2f}/hr"
        )
    if isinstance(item, DataPlan):
        return f"Data: {item.total_gb:.2f} GB @ ${item.price_per_gb:.2f}/GB"
    if isinstance(item, VoicePlan):
        return (
            f"Voice: {item.phone_number}, {item.total_period:.2f} periods "
            f"@ ${item.price_per_period:.2f}/period"
        )
    if isinstance(item, ProductPurchase):
        return "Purchase"
    return item.kind.name


def render_item(item: SaleItem) -> str:
    return "\n".join(
        [
            f"{item.name} ({item.unique_code}) - {_item_detail(item)}",
            _money_columns("", item.compute_tax(), item.compute_gross_price()),
        ]
    )


def render_receipt(sale: Sale) -> str:
    """Detailed receipt: header, parties, one block per item, totals"""
    lines: List[str] = [
        f"Sale    #{sale.unique_code}",
        f"Store   #{sale.store.store_code}",
        f"Date     {sale.date.isoformat()}",
        "Customer:",
        render_person(sale.customer),
        "Sales Person:",
        render_person(sale.salesman),
        f"Items ({len(sale.items)}){'Tax':>62}{'Total':>12}",
        RULE,
    ]
    lines.extend(render_item(item) for item in sale.items)
    lines.append(RULE)
    lines.append(_money_columns("Subtotals", sale.total_tax, sale.gross_price))
    lines.append(f"{'Grand total':>58} {'':>11} ${sale.net_price:>10.2f}")
    lines.append("_" * WIDTH)
    return "\n".join(lines)


def render_summary_report(sales: Iterable[Sale]) -> str:
    """One line per sale ranked by net price, with a totals row"""
    ranked = rank_sales(sales)
    header = (
        f"{'Sale':<10} {'Store':<10} {'Customer':<28} {'Items':>5} "
        f"{'Tax':>12} {'Total':>12}"
    )
    lines = ["Summary Report - By Total", "=" * len(header), header]
    for sale in ranked:
        lines.append(
            f"{sale.unique_code:<10} {sale.store.store_code:<10} "
            f"{sale.customer.full_name[:28]:<28} {len(sale.items):>5} "
            f"${sale.total_tax:>11.2f} ${sale.net_price:>11.2f}"
        )
    lines.append("-" * len(header))
    item_count = sum(len(sale.items) for sale in ranked)
    lines.append(
        f"{'':<10} {'':<10} {'':<28} {item_count:>5} "
        f"${sum_money(sale.total_tax for sale in ranked):>11.2f} "
        f"${sum_money(sale.net_price for sale in ranked):>11.2f}"
    )
    return "\n".join(lines)
