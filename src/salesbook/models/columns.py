from __future__ import annotations

from enum import IntEnum

"""Fixed sheet layout of the sales workbook.

Column positions are 1-based and the header occupies the first row. These
positions are the contract with the file: a workbook written by another tool
must keep them.
"""

__all__ = [
    "HEADER_ROW",
    "ProductColumn",
    "CustomerColumn",
    "OrderColumn",
]

HEADER_ROW = 1


class ProductColumn(IntEnum):
    CODE = 1
    NAME = 2
    UNIT = 3
    PRICE = 4


class CustomerColumn(IntEnum):
    CODE = 1
    ORGANIZATION_NAME = 2
    ADDRESS = 3
    CONTACT_PERSON = 4


class OrderColumn(IntEnum):
    CODE = 1
    PRODUCT_CODE = 2
    CUSTOMER_CODE = 3
    REQUEST_NUMBER = 4
    QUANTITY = 5
    ORDER_DATE = 6
