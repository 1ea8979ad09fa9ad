from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from salesbook.models.errors import (
    CustomerNotFoundError,
    NoOrdersInPeriodError,
    NotFoundError,
    ParseError,
    ProductNotFoundError,
)
from salesbook.models.results import ContactEntry
from salesbook.services.queries import (
    find_customer_by_contact,
    find_customers_by_product_name,
    find_top_customer,
    first_match,
    list_contact_persons,
)

ORDER_HEADER = ["Code", "Product code", "Customer code", "Request number", "Quantity", "Order date"]
CUSTOMER_HEADER = ["Code", "Organization", "Address", "Contact person"]
PRODUCT_HEADER = ["Code", "Name", "Unit", "Price"]


def test_example_scenario(store_factory):
    store = store_factory(
        products=[PRODUCT_HEADER, ["P1", "Bolt", "pcs", 1.50]],
        customers=[CUSTOMER_HEADER, ["C1", "Acme", "", "Ivan"]],
        orders=[ORDER_HEADER, ["O1", "P1", "C1", "R-1", 10, datetime(2023, 8, 5)]],
    )
    lines = find_customers_by_product_name(store, "bolt")
    assert len(lines) == 1
    line = lines[0]
    assert line.contact_person == "Ivan"
    assert line.quantity == 10
    assert line.price == Decimal("1.50")
    assert line.order_date_text() == "05.08.2023"

    top = find_top_customer(store, 2023, 8)
    assert (top.contact_person, top.order_count) == ("Ivan", 1)

    with pytest.raises(NotFoundError):
        find_top_customer(store, 2023, 9)


def test_customers_by_product_in_order_sheet_order_skipping_unknown_customers(store):
    lines = find_customers_by_product_name(store, "BOLT")
    # O5 は顧客 C9 が存在しないためスキップ
    assert [(l.contact_person, l.quantity, l.order_date) for l in lines] == [
        ("Ivan", 10, date(2023, 8, 5)),
        ("Olga", 3, date(2023, 8, 12)),
    ]
    assert all(l.price == Decimal("1.5") for l in lines)


def test_customers_by_product_unknown_product(store):
    with pytest.raises(ProductNotFoundError) as e:
        find_customers_by_product_name(store, "Sprocket")
    assert e.value.error_type == "NOT_FOUND"


def test_customers_by_product_without_orders_is_empty_not_error(store):
    assert find_customers_by_product_name(store, "washer") == []


def test_customers_by_product_first_matching_product_wins(store_factory):
    store = store_factory(
        products=[PRODUCT_HEADER, ["P1", "Bolt", "pcs", 1], ["P2", "bolt", "pcs", 2]],
        orders=[
            ORDER_HEADER,
            ["O1", "P2", "C1", "R-1", 1, datetime(2023, 1, 1)],
            ["O2", "P1", "C2", "R-2", 2, datetime(2023, 1, 2)],
        ],
    )
    lines = find_customers_by_product_name(store, "bolt")
    assert [(l.contact_person, l.price) for l in lines] == [("Olga", Decimal("1"))]


def test_customers_by_product_only_emits_customers_that_ordered_it(store):
    lines = find_customers_by_product_name(store, "nut")
    assert {l.contact_person for l in lines} == {"Olga"}
    assert [l.quantity for l in lines] == [5, 1]


def test_customers_by_product_parse_error_aborts(store_factory):
    store = store_factory(
        orders=[
            ORDER_HEADER,
            ["O1", "P1", "C1", "R-1", 10, datetime(2023, 8, 5)],
            ["O2", "P1", "C2", "R-2", "ten", datetime(2023, 8, 6)],
        ]
    )
    with pytest.raises(ParseError) as e:
        find_customers_by_product_name(store, "bolt")
    assert e.value.row == 3


def test_top_customer_counts_orders_in_calendar_month(store):
    top = find_top_customer(store, 2023, 8)
    assert top.contact_person == "Olga"
    assert top.order_count == 2
    assert top.customer_code == "C2"

    # 7 月は O4 のみ
    july = find_top_customer(store, 2023, 7)
    assert (july.contact_person, july.order_count) == ("Olga", 1)


def test_top_customer_count_matches_exact_order_count(store):
    top = find_top_customer(store, 2023, 8)
    in_period = [
        o for o in store.orders.rows()
        if o.order_date.year == 2023 and o.order_date.month == 8
    ]
    assert top.order_count == sum(1 for o in in_period if o.customer_code == top.customer_code)
    for code in {o.customer_code for o in in_period}:
        assert sum(1 for o in in_period if o.customer_code == code) <= top.order_count


def test_top_customer_same_month_other_year_not_counted(store_factory):
    store = store_factory(
        orders=[
            ORDER_HEADER,
            ["O1", "P1", "C1", "R-1", 1, datetime(2022, 8, 1)],
            ["O2", "P1", "C1", "R-2", 1, datetime(2022, 8, 2)],
            ["O3", "P1", "C3", "R-3", 1, datetime(2023, 8, 3)],
        ]
    )
    top = find_top_customer(store, 2023, 8)
    assert (top.contact_person, top.order_count) == ("Petr", 1)


def test_top_customer_tie_goes_to_first_encountered(store_factory):
    store = store_factory(
        orders=[
            ORDER_HEADER,
            ["O1", "P1", "C3", "R-1", 1, datetime(2023, 8, 1)],
            ["O2", "P1", "C1", "R-2", 1, datetime(2023, 8, 2)],
            ["O3", "P1", "C1", "R-3", 1, datetime(2023, 8, 3)],
            ["O4", "P1", "C3", "R-4", 1, datetime(2023, 8, 4)],
        ]
    )
    top = find_top_customer(store, 2023, 8)
    assert (top.contact_person, top.order_count) == ("Petr", 2)


def test_top_customer_no_orders_in_period(store):
    with pytest.raises(NoOrdersInPeriodError) as e:
        find_top_customer(store, 2023, 9)
    assert (e.value.year, e.value.month) == (2023, 9)


def test_top_customer_unresolved_customer(store_factory):
    store = store_factory(
        orders=[ORDER_HEADER, ["O1", "P1", "C9", "R-1", 1, datetime(2023, 8, 1)]]
    )
    with pytest.raises(CustomerNotFoundError):
        find_top_customer(store, 2023, 8)


def test_top_customer_malformed_date_aborts(store_factory):
    store = store_factory(
        orders=[
            ORDER_HEADER,
            ["O1", "P1", "C1", "R-1", 1, datetime(2023, 8, 1)],
            ["O2", "P1", "C2", "R-2", 1, "not a date"],
        ]
    )
    with pytest.raises(ParseError):
        find_top_customer(store, 2023, 8)


def test_list_contact_persons(store):
    assert list_contact_persons(store) == [
        ContactEntry("Acme", "Ivan"),
        ContactEntry("Globex", "Olga"),
        ContactEntry("Initech", "Petr"),
    ]


def test_list_contact_persons_empty_sheet(store_factory):
    store = store_factory(customers=[CUSTOMER_HEADER])
    assert list_contact_persons(store) == []


def test_list_contact_persons_keeps_empty_contacts(store_factory):
    store = store_factory(customers=[CUSTOMER_HEADER, ["C1", "Acme", "addr", None]])
    assert list_contact_persons(store) == [ContactEntry("Acme", "")]


def test_first_match_returns_earliest():
    assert first_match([1, 2, 3, 4], lambda n: n % 2 == 0) == 2
    assert first_match([], lambda n: True) is None


def test_find_customer_by_contact_is_exact_and_first_match(store_factory):
    store = store_factory(
        customers=[CUSTOMER_HEADER, ["C1", "Acme", "", "Ivan"], ["C2", "Globex", "", "Ivan"]]
    )
    assert find_customer_by_contact(store.customers, "Ivan").code == "C1"
    assert find_customer_by_contact(store.customers, "ivan") is None
