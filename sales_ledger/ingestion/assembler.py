"""
Sale Assembler

Joins sale-line records against the sale headers and the catalog lookups,
deriving one priced sale-line item per record and appending it to its sale
in record order.

Row failures follow the configured error policy:
- FAIL_FAST: the first bad row raises and no sale is modified.
- COLLECT: bad rows are reported and skipped, good rows are committed.

Items are staged during the pass and only appended to their sales once the
pass is over, so a fail-fast abort never leaves a partially filled graph.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from sales_ledger.config.settings import ErrorPolicy
from sales_ledger.exceptions import (
    MalformedFieldError,
    SalesLedgerError,
    UnknownVariantError,
    UnresolvedReferenceError,
)
from sales_ledger.ingestion.fields import (
    parse_date,
    parse_decimal,
    parse_text,
    require_fields,
)
from sales_ledger.models import (
    CatalogItem,
    DataPlan,
    ItemKind,
    Person,
    ProductLease,
    ProductPurchase,
    Sale,
    SaleItem,
    Service,
    VoicePlan,
)

logger = structlog.get_logger(__name__)


@dataclass
class RowError:
    """A sale-line row that could not be assembled"""
    row: int
    error_type: str
    message: str
    sale_code: Optional[str] = None
    item_code: Optional[str] = None


@dataclass
class AssemblyResult:
    """Outcome of one assembly pass"""
    sales: Dict[str, Sale]
    rows_processed: int = 0
    items_added: int = 0
    errors: List[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class SaleAssembler:
    """
    Builds sale-line items and attaches them to their sales.

    The variant of each line comes from the kind of the catalog item it
    references. Product catalog items become a purchase with no trailing
    fields or a lease with a start and end date. A line may carry a
    one-letter discriminator as its first trailing field; when present it
    must agree with the catalog kind.

    Example:
        assembler = SaleAssembler(items, persons)
        result = assembler.assemble(sales, sale_item_records)
    """

    def __init__(
        self,
        items: Mapping[str, CatalogItem],
        persons: Mapping[str, Person],
        error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST,
        source: str = "sale_items",
    ):
        self.items = items
        self.persons = persons
        self.error_policy = error_policy
        self.source = source
        self._builders: Dict[ItemKind, Callable[[CatalogItem, Sequence[str], int], SaleItem]] = {
            ItemKind.PURCHASE: self._build_purchase,
            ItemKind.LEASE: self._build_lease,
            ItemKind.SERVICE: self._build_service,
            ItemKind.DATA_PLAN: self._build_data_plan,
            ItemKind.VOICE_PLAN: self._build_voice_plan,
        }

    # -------------------------------------------------------------------------
    # Variant builders
    # -------------------------------------------------------------------------

    def _build_purchase(self, item: CatalogItem, fields: Sequence[str], row: int) -> SaleItem:
        return ProductPurchase.from_catalog(item)

    def _build_lease(self, item: CatalogItem, fields: Sequence[str], row: int) -> SaleItem:
        start = parse_date(fields[0], self.source, row, "startDate")
        end = parse_date(fields[1], self.source, row, "endDate")
        return ProductLease.from_catalog(item, start, end)

    def _build_service(self, item: CatalogItem, fields: Sequence[str], row: int) -> SaleItem:
        hours = parse_decimal(fields[0], self.source, row, "totalHours")
        employee = self.persons.get(fields[1])
        if employee is None:
            raise UnresolvedReferenceError("employee", fields[1], row=row)
        return Service.from_catalog(item, hours, employee)

    def _build_data_plan(self, item: CatalogItem, fields: Sequence[str], row: int) -> SaleItem:
        gb = parse_decimal(fields[0], self.source, row, "totalGB")
        return DataPlan.from_catalog(item, gb)

    def _build_voice_plan(self, item: CatalogItem, fields: Sequence[str], row: int) -> SaleItem:
        phone = parse_text(fields[0], self.source, row, "phoneNumber")
        period = parse_decimal(fields[1], self.source, row, "totalPeriod")
        return VoicePlan.from_catalog(item, phone, period)

    # -------------------------------------------------------------------------
    # Row handling
    # -------------------------------------------------------------------------

    def resolve_kind(
        self,
        item: CatalogItem,
        trailing: Sequence[str],
        row: int,
    ) -> Tuple[ItemKind, Sequence[str]]:
        """
        Pick the variant for a line and return it with its own fields.

        Raises:
            UnknownVariantError: Catalog kind unknown or discriminator mismatch
            MalformedFieldError: Trailing field count fits no allowed variant
        """
        catalog_kind = item.kind
        if catalog_kind is None:
            raise UnknownVariantError(item.type_code, item.unique_code, row=row)

        if catalog_kind is ItemKind.PURCHASE:
            allowed = (ItemKind.PURCHASE, ItemKind.LEASE)
        else:
            allowed = (catalog_kind,)

        if trailing and len(trailing[0]) == 1:
            tag = ItemKind.from_code(trailing[0])
            if tag is not None and len(trailing) - 1 == tag.arity:
                if tag not in allowed:
                    raise UnknownVariantError(tag.value, item.unique_code, row=row)
                return tag, trailing[1:]

        for kind in allowed:
            if len(trailing) == kind.arity:
                return kind, trailing

        expected = " or ".join(str(kind.arity) for kind in allowed)
        raise MalformedFieldError(
            f"Item '{item.unique_code}' line expects {expected} trailing fields, "
            f"got {len(trailing)}",
            source=self.source,
            row=row,
        )

    def build_line(
        self,
        sales: Mapping[str, Sale],
        record: Sequence[str],
        row: int,
    ) -> Tuple[Sale, SaleItem]:
        """Resolve one sale-line record into its sale and a priced item."""
        require_fields(record, 2, self.source, row)
        sale_code, item_code, trailing = record[0], record[1], record[2:]

        sale = sales.get(sale_code)
        if sale is None:
            raise UnresolvedReferenceError("sale", sale_code, row=row)

        catalog_item = self.items.get(item_code)
        if catalog_item is None:
            raise UnresolvedReferenceError("item", item_code, row=row)

        kind, fields = self.resolve_kind(catalog_item, trailing, row)
        line_item = self._builders[kind](catalog_item, fields, row)

        # Price once so formula errors (zero-month leases) surface on their row
        line_item.compute_gross_price()
        return sale, line_item

    def assemble(
        self,
        sales: Mapping[str, Sale],
        records: Sequence[Sequence[str]],
    ) -> AssemblyResult:
        """
        Populate the item lists of `sales` from sale-line records.

        The first record is a header and is discarded.

        Raises:
            SalesLedgerError: First failing row, under the fail-fast policy
        """
        result = AssemblyResult(sales=dict(sales))
        staged: List[Tuple[Sale, SaleItem]] = []

        for row, record in enumerate(records[1:], start=2):
            result.rows_processed += 1
            try:
                staged.append(self.build_line(sales, record, row))
            except SalesLedgerError as e:
                logger.error(
                    "Sale line rejected",
                    source=self.source,
                    row=row,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if self.error_policy is ErrorPolicy.FAIL_FAST:
                    raise
                result.errors.append(
                    RowError(
                        row=row,
                        error_type=type(e).__name__,
                        message=str(e),
                        sale_code=record[0] if len(record) > 0 else None,
                        item_code=record[1] if len(record) > 1 else None,
                    )
                )

        for sale, line_item in staged:
            sale.add_item(line_item)
        result.items_added = len(staged)

        logger.info(
            "Sale assembly completed",
            source=self.source,
            rows=result.rows_processed,
            items_added=result.items_added,
            rows_rejected=len(result.errors),
        )
        return result
