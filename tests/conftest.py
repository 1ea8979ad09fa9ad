# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from salesbook.excel.sheet import SheetTable
from salesbook.models.errors import PersistenceError
from salesbook.models.tables import CustomersTable, OrdersTable, ProductsTable, WorkbookStore

PRODUCT_HEADER = ["Code", "Name", "Unit", "Price"]
CUSTOMER_HEADER = ["Code", "Organization", "Address", "Contact person"]
ORDER_HEADER = ["Code", "Product code", "Customer code", "Request number", "Quantity", "Order date"]

SAMPLE_PRODUCTS = [
    PRODUCT_HEADER,
    ["P1", "Bolt", "pcs", 1.50],
    ["P2", "Nut", "pcs", 0.75],
    ["P3", "Washer", "box", 12],
]
SAMPLE_CUSTOMERS = [
    CUSTOMER_HEADER,
    ["C1", "Acme", "1 Main St", "Ivan"],
    ["C2", "Globex", "5 Oak Ave", "Olga"],
    ["C3", "Initech", "3 Elm Rd", "Petr"],
]
SAMPLE_ORDERS = [
    ORDER_HEADER,
    ["O1", "P1", "C1", "R-1", 10, datetime(2023, 8, 5)],
    ["O2", "P2", "C2", "R-2", 5, datetime(2023, 8, 10)],
    ["O3", "P1", "C2", "R-3", 3, datetime(2023, 8, 12)],
    ["O4", "P2", "C2", "R-4", 1, datetime(2023, 7, 1)],
    ["O5", "P1", "C9", "R-5", 7, datetime(2023, 8, 20)],  # C9 は存在しない顧客
]


def build_store(
    products: list[list[Any]] | None = None,
    customers: list[list[Any]] | None = None,
    orders: list[list[Any]] | None = None,
    path: Path = Path("memory.xlsx"),
) -> WorkbookStore:
    """In-memory store; ``None`` means the sample sheet."""
    return WorkbookStore.from_sheets(
        path=path,
        products=SheetTable.from_rows("Products", products or SAMPLE_PRODUCTS, ProductsTable.WIDTH),
        customers=SheetTable.from_rows(
            "Customers", SAMPLE_CUSTOMERS if customers is None else customers, CustomersTable.WIDTH
        ),
        orders=SheetTable.from_rows("Orders", orders or SAMPLE_ORDERS, OrdersTable.WIDTH),
    )


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


class RecordingGateway:
    """Persistence gateway double: records flushed sheet names, optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.flushed: list[str] = []

    def flush(self, table: SheetTable) -> None:
        if self.fail:
            raise PersistenceError("disk full", sheet=table.name)
        self.flushed.append(table.name)
        table.mark_flushed()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("SALESBOOK_WORKBOOK", raising=False)
        yield p


@pytest.fixture()
def store() -> WorkbookStore:
    return build_store()


@pytest.fixture()
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    def _make(
        name: str = "sales.xlsx",
        products: list[list[Any]] | None = None,
        customers: list[list[Any]] | None = None,
        orders: list[list[Any]] | None = None,
        sheet_names: tuple[str, str, str] = ("Products", "Customers", "Orders"),
    ) -> Path:
        return write_workbook(
            temp_workdir / "data" / name,
            {
                sheet_names[0]: products or SAMPLE_PRODUCTS,
                sheet_names[1]: SAMPLE_CUSTOMERS if customers is None else customers,
                sheet_names[2]: orders or SAMPLE_ORDERS,
            },
        )

    return _make


@pytest.fixture()
def sample_workbook(make_workbook: Callable[..., Path]) -> Path:
    return make_workbook()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook: ./data/sales.xlsx
sheets:
  products: Товары
  customers: Клиенты
  orders: Заявки
date_format: "%d.%m.%Y"
log_dir: ./logs
min_year: 1900
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "salesbook.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def store_factory() -> Callable[..., WorkbookStore]:
    return build_store


@pytest.fixture()
def failing_gateway() -> RecordingGateway:
    return RecordingGateway(fail=True)
