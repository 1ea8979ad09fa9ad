from __future__ import annotations

from typing import Any

"""Error taxonomy shared by the query engine, the contact operations and the CLI.

Every error carries an ``error_type`` code (UPPER_SNAKE) which is what ends up in
the JSON Lines error log. An empty result set is not an error: query functions
return an empty list for that case.
"""

__all__ = [
    "SalesbookError",
    "NotFoundError",
    "ProductNotFoundError",
    "CustomerNotFoundError",
    "ContactNotFoundError",
    "NoOrdersInPeriodError",
    "DuplicateContactError",
    "OrganizationExistsError",
    "ParseError",
    "PersistenceError",
    "WorkbookError",
    "SheetNotFoundError",
]


class SalesbookError(Exception):
    """Base class for all errors raised by the core."""

    error_type = "SALESBOOK_ERROR"


class NotFoundError(SalesbookError):
    """A lookup yielded no row."""

    error_type = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_name: str) -> None:
        super().__init__(f"product not found: '{product_name}'")
        self.product_name = product_name


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_code: str) -> None:
        super().__init__(f"customer not found: code='{customer_code}'")
        self.customer_code = customer_code


class ContactNotFoundError(NotFoundError):
    def __init__(self, contact_person: str) -> None:
        super().__init__(f"contact person not found: '{contact_person}'")
        self.contact_person = contact_person


class NoOrdersInPeriodError(NotFoundError):
    def __init__(self, year: int, month: int) -> None:
        super().__init__(f"no orders for period {year:04d}-{month:02d}")
        self.year = year
        self.month = month


class DuplicateContactError(SalesbookError):
    error_type = "DUPLICATE_CONTACT"

    def __init__(self, contact_person: str) -> None:
        super().__init__(f"contact person already exists: '{contact_person}'")
        self.contact_person = contact_person


class OrganizationExistsError(SalesbookError):
    """Raised instead of attaching a second contact to a known organization."""

    error_type = "ORGANIZATION_EXISTS"

    def __init__(self, organization_name: str) -> None:
        super().__init__(f"organization already exists: '{organization_name}'")
        self.organization_name = organization_name


class ParseError(SalesbookError):
    """A cell expected to hold a number or a date does not."""

    error_type = "PARSE_ERROR"

    def __init__(self, sheet: str, row: int, column: int, value: Any, expected: str) -> None:
        super().__init__(
            f"sheet '{sheet}' row {row} column {column}: expected {expected}, got {value!r}"
        )
        self.sheet = sheet
        self.row = row
        self.column = column
        self.value = value
        self.expected = expected


class PersistenceError(SalesbookError):
    """Writing the in-memory sheet back to the workbook failed.

    The in-memory state is left as it was after the mutation, so memory and file
    can diverge after this error.
    """

    error_type = "PERSISTENCE_ERROR"

    def __init__(self, message: str, sheet: str = "") -> None:
        super().__init__(message)
        self.sheet = sheet


class WorkbookError(SalesbookError):
    error_type = "WORKBOOK_ERROR"


class SheetNotFoundError(WorkbookError):
    def __init__(self, sheet_name: str, available: list[str]) -> None:
        super().__init__(f"sheet '{sheet_name}' not found (available: {available})")
        self.sheet_name = sheet_name
        self.available = available
