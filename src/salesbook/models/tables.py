from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

from ..excel.sheet import SheetRow, SheetTable
from .columns import CustomerColumn, OrderColumn, ProductColumn

"""Table accessors for the three sheets of the sales workbook.

Each accessor wraps a ``SheetTable`` and yields typed rows whose properties map
the fixed column positions to named fields. Products and Orders are read-only;
Customers additionally exposes the mutations used by the contact operations.
"""

__all__ = [
    "SheetNames",
    "ProductRow",
    "CustomerRow",
    "OrderRow",
    "ProductsTable",
    "CustomersTable",
    "OrdersTable",
    "WorkbookStore",
]


@dataclass(frozen=True)
class SheetNames:
    """Worksheet names of the three tables inside the workbook."""
    products: str = "Products"
    customers: str = "Customers"
    orders: str = "Orders"


class ProductRow(SheetRow):
    @property
    def code(self) -> str:
        return self.get_string(ProductColumn.CODE)

    @property
    def name(self) -> str:
        return self.get_string(ProductColumn.NAME)

    @property
    def unit(self) -> str:
        return self.get_string(ProductColumn.UNIT)

    @property
    def price(self) -> Decimal:
        return self.get_decimal(ProductColumn.PRICE)


class CustomerRow(SheetRow):
    @property
    def code(self) -> str:
        return self.get_string(CustomerColumn.CODE)

    @property
    def organization_name(self) -> str:
        return self.get_string(CustomerColumn.ORGANIZATION_NAME)

    @property
    def address(self) -> str:
        return self.get_string(CustomerColumn.ADDRESS)

    @property
    def contact_person(self) -> str:
        return self.get_string(CustomerColumn.CONTACT_PERSON)


class OrderRow(SheetRow):
    @property
    def code(self) -> str:
        return self.get_string(OrderColumn.CODE)

    @property
    def product_code(self) -> str:
        return self.get_string(OrderColumn.PRODUCT_CODE)

    @property
    def customer_code(self) -> str:
        return self.get_string(OrderColumn.CUSTOMER_CODE)

    @property
    def request_number(self) -> str:
        return self.get_string(OrderColumn.REQUEST_NUMBER)

    @property
    def quantity(self) -> int:
        return self.get_int(OrderColumn.QUANTITY)

    @property
    def order_date(self) -> date:
        return self.get_date(OrderColumn.ORDER_DATE)


class ProductsTable:
    WIDTH = len(ProductColumn)

    def __init__(self, sheet: SheetTable) -> None:
        self.sheet = sheet

    def rows(self) -> Iterator[ProductRow]:
        return self.sheet.rows(ProductRow)


class OrdersTable:
    WIDTH = len(OrderColumn)

    def __init__(self, sheet: SheetTable) -> None:
        self.sheet = sheet

    def rows(self) -> Iterator[OrderRow]:
        return self.sheet.rows(OrderRow)


class CustomersTable:
    WIDTH = len(CustomerColumn)

    def __init__(self, sheet: SheetTable) -> None:
        self.sheet = sheet

    def rows(self) -> Iterator[CustomerRow]:
        return self.sheet.rows(CustomerRow)

    def append(self, organization_name: str, contact_person: str) -> CustomerRow:
        """Append a customer with only organization and contact filled in.

        Code and address stay empty; nothing in the tool assigns them.
        """
        row_number = self.sheet.append_row(
            {
                CustomerColumn.ORGANIZATION_NAME: organization_name,
                CustomerColumn.CONTACT_PERSON: contact_person,
            }
        )
        return CustomerRow(self.sheet, row_number)

    def set_contact_person(self, row: CustomerRow, contact_person: str) -> None:
        self.sheet.update_cell(row.row_number, CustomerColumn.CONTACT_PERSON, contact_person)

    def delete(self, row: CustomerRow) -> None:
        self.sheet.delete_row(row.row_number)


@dataclass
class WorkbookStore:
    """The three tables of one open workbook, owned by a single session."""
    path: Path
    products: ProductsTable
    customers: CustomersTable
    orders: OrdersTable

    @classmethod
    def from_sheets(
        cls, path: Path, products: SheetTable, customers: SheetTable, orders: SheetTable
    ) -> WorkbookStore:
        return cls(
            path=path,
            products=ProductsTable(products),
            customers=CustomersTable(customers),
            orders=OrdersTable(orders),
        )
