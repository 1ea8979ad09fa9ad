from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

"""Result records returned by the query engine and the contact operations."""

__all__ = [
    "DEFAULT_DATE_FORMAT",
    "CustomerOrderLine",
    "TopCustomer",
    "ContactEntry",
]

DEFAULT_DATE_FORMAT = "%d.%m.%Y"


@dataclass(frozen=True)
class CustomerOrderLine:
    """One order of a product, joined with the ordering customer's contact."""
    contact_person: str
    quantity: int
    price: Decimal  # 商品の単価 (Products sheet)
    order_date: date

    def order_date_text(self, date_format: str = DEFAULT_DATE_FORMAT) -> str:
        return self.order_date.strftime(date_format)


@dataclass(frozen=True)
class TopCustomer:
    """Customer with the most orders in a calendar month."""
    contact_person: str
    order_count: int
    customer_code: str


@dataclass(frozen=True)
class ContactEntry:
    organization_name: str
    contact_person: str
