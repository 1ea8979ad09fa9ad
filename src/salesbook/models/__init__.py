"""Domain models for the salesbook workbook tool.

Table accessors live in ``salesbook.models.tables``; they depend on the sheet row
model and are imported from there directly.
"""

from .columns import HEADER_ROW, CustomerColumn, OrderColumn, ProductColumn
from .error_record import ErrorRecord
from .results import DEFAULT_DATE_FORMAT, ContactEntry, CustomerOrderLine, TopCustomer

__all__ = [
    # Sheet layout
    "HEADER_ROW",
    "ProductColumn",
    "CustomerColumn",
    "OrderColumn",
    # Results
    "DEFAULT_DATE_FORMAT",
    "CustomerOrderLine",
    "TopCustomer",
    "ContactEntry",
    # Error log
    "ErrorRecord",
]
