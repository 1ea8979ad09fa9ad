from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd
from openpyxl import load_workbook

from ..models.errors import SheetNotFoundError, WorkbookError
from ..models.tables import CustomersTable, OrdersTable, ProductsTable, SheetNames, WorkbookStore
from .sheet import SheetTable

"""Workbook reader.

Sheets are read raw with openpyxl, row by row from row 1, so frame positions line
up with sheet row numbers (blank rows included) and the writer can address the
same rows in the file. The first row stays in the table as the header. Formula
cells are read through their cached values. Cell values keep their Excel types
(text such as "NA" stays text). The workbook is closed as soon as the sheets are
in memory so the writer can reopen it.
"""

logger = logging.getLogger(__name__)


def read_sheets(path: Path, sheet_names: Iterable[str]) -> dict[str, pd.DataFrame]:
    """Read the named sheets of an .xlsx file as raw ``object`` DataFrames.

    Raises
    ------
    WorkbookError: file missing or unreadable
    SheetNotFoundError: one of the requested sheets does not exist
    """
    if not path.exists():
        raise WorkbookError(f"workbook not found: {path}")
    wanted = list(sheet_names)
    try:
        wb = load_workbook(path, data_only=True)
    except Exception as e:
        raise WorkbookError(f"failed to read workbook {path}: {e}") from e
    try:
        available = [str(n) for n in wb.sheetnames]
        dfs: dict[str, pd.DataFrame] = {}
        for name in wanted:
            if name not in available:
                raise SheetNotFoundError(name, available)
            # iter_rows は 1 行目から返すので DataFrame の位置 = シート行番号 - 1
            rows = list(wb[name].iter_rows(values_only=True))
            dfs[name] = pd.DataFrame(rows, dtype=object)
    finally:
        wb.close()
    return dfs


def open_workbook(path: Path, sheet_names: SheetNames | None = None) -> WorkbookStore:
    """Load the Products / Customers / Orders sheets into a ``WorkbookStore``."""
    names = sheet_names or SheetNames()
    raw = read_sheets(path, [names.products, names.customers, names.orders])
    store = WorkbookStore.from_sheets(
        path=path,
        products=SheetTable(names.products, raw[names.products], ProductsTable.WIDTH),
        customers=SheetTable(names.customers, raw[names.customers], CustomersTable.WIDTH),
        orders=SheetTable(names.orders, raw[names.orders], OrdersTable.WIDTH),
    )
    logger.debug(
        f"opened {path.name}: products={len(raw[names.products])} "
        f"customers={len(raw[names.customers])} orders={len(raw[names.orders])} (rows incl. header)"
    )
    return store
