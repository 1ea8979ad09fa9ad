from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from typing import TypeVar

from ..models.errors import CustomerNotFoundError, NoOrdersInPeriodError, ProductNotFoundError
from ..models.results import ContactEntry, CustomerOrderLine, TopCustomer
from ..models.tables import CustomerRow, CustomersTable, WorkbookStore

"""Read-only queries over an open workbook.

Lookups follow one tie-break rule, ``first_match``: when several rows satisfy a
predicate the earliest row in sheet order wins. Orders whose product or customer
code does not resolve are skipped. A ``ParseError`` raised by a typed getter
aborts the whole query, because skipping malformed rows would change counts.
"""

__all__ = [
    "first_match",
    "find_customer_by_code",
    "find_customer_by_contact",
    "find_customers_by_product_name",
    "find_top_customer",
    "list_contact_persons",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_match(rows: Iterable[T], predicate: Callable[[T], bool]) -> T | None:
    """Return the earliest row satisfying ``predicate``, or None."""
    for row in rows:
        if predicate(row):
            return row
    return None


def find_customer_by_code(customers: CustomersTable, code: str) -> CustomerRow | None:
    return first_match(customers.rows(), lambda c: c.code == code)


def find_customer_by_contact(customers: CustomersTable, contact_person: str) -> CustomerRow | None:
    """First customer whose contact person equals ``contact_person`` exactly (case-sensitive)."""
    return first_match(customers.rows(), lambda c: c.contact_person == contact_person)


def find_customers_by_product_name(store: WorkbookStore, name: str) -> list[CustomerOrderLine]:
    """Contacts, quantities, price and dates of every order of a product.

    The product is matched by lower-cased exact name. Lines come out in Orders
    sheet order. An empty list means the product exists but nobody ordered it
    (or none of its orders resolve to a customer).

    Raises
    ------
    ProductNotFoundError: no product has that name
    ParseError: a quantity, price or date cell of a matching order is malformed
    """
    needle = name.lower()
    product = first_match(store.products.rows(), lambda p: p.name.lower() == needle)
    if product is None:
        raise ProductNotFoundError(name)

    product_code = product.code
    lines: list[CustomerOrderLine] = []
    for order in store.orders.rows():
        if order.product_code != product_code:
            continue
        customer = find_customer_by_code(store.customers, order.customer_code)
        if customer is None:
            logger.debug(
                f"order row {order.row_number}: customer '{order.customer_code}' not found, skipped"
            )
            continue
        lines.append(
            CustomerOrderLine(
                contact_person=customer.contact_person,
                quantity=order.quantity,
                price=product.price,
                order_date=order.order_date,
            )
        )
    return lines


def find_top_customer(store: WorkbookStore, year: int, month: int) -> TopCustomer:
    """Customer with the most orders dated in the given calendar month.

    ``year`` and ``month`` are assumed valid; range checks belong to the caller.
    On a tie the customer whose first order in the period comes earliest in the
    Orders sheet wins.

    Raises
    ------
    NoOrdersInPeriodError: no order is dated in that month
    CustomerNotFoundError: the winning customer code has no Customers row
    ParseError: an order date cell is malformed
    """
    counts: Counter[str] = Counter()
    for order in store.orders.rows():
        order_date = order.order_date
        if order_date.year == year and order_date.month == month:
            counts[order.customer_code] += 1

    if not counts:
        raise NoOrdersInPeriodError(year, month)

    # most_common は同数の場合に最初に出現した順を保つ
    customer_code, order_count = counts.most_common(1)[0]
    customer = find_customer_by_code(store.customers, customer_code)
    if customer is None:
        raise CustomerNotFoundError(customer_code)
    return TopCustomer(
        contact_person=customer.contact_person,
        order_count=order_count,
        customer_code=customer_code,
    )


def list_contact_persons(store: WorkbookStore) -> list[ContactEntry]:
    """Organization and contact person of every customer, in sheet order."""
    return [
        ContactEntry(organization_name=c.organization_name, contact_person=c.contact_person)
        for c in store.customers.rows()
    ]
