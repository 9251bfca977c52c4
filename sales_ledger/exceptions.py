"""
Domain Exceptions

Every failure raised by the ledger core derives from SalesLedgerError so
callers can catch the whole family at once. All of them are fatal for the
load or assembly that raised them.
"""

from typing import Optional


class SalesLedgerError(Exception):
    """Base exception for all sales ledger errors."""

    pass


class MalformedFieldError(SalesLedgerError, ValueError):
    """
    Raised when a numeric, date or mandatory field cannot be parsed.

    Parsing is all-or-nothing per file, so this aborts the whole load.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        row: Optional[int] = None,
        column: Optional[str] = None,
        value: Optional[str] = None,
    ):
        self.source = source
        self.row = row
        self.column = column
        self.value = value
        location = ", ".join(
            part
            for part in (
                f"source={source}" if source else "",
                f"row={row}" if row is not None else "",
                f"column={column}" if column else "",
                f"value={value!r}" if value is not None else "",
            )
            if part
        )
        super().__init__(f"{message} ({location})" if location else message)


class UnresolvedReferenceError(SalesLedgerError, LookupError):
    """Raised when a natural key is absent from its lookup table."""

    def __init__(self, entity: str, key: str, row: Optional[int] = None):
        self.entity = entity
        self.key = key
        self.row = row
        where = f" at row {row}" if row is not None else ""
        super().__init__(f"Unknown {entity} '{key}'{where}")


class UnknownVariantError(SalesLedgerError):
    """Raised when an item discriminator matches no known variant."""

    def __init__(self, type_code: str, item_code: str, row: Optional[int] = None):
        self.type_code = type_code
        self.item_code = item_code
        self.row = row
        where = f" at row {row}" if row is not None else ""
        super().__init__(
            f"Item '{item_code}' has unsupported variant '{type_code}'{where}"
        )


class InvalidLeasePeriodError(SalesLedgerError, ValueError):
    """Raised when a lease spans less than one whole month or ends before it starts."""

    pass
