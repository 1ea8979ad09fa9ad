from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..models.errors import PersistenceError
from .sheet import CellChange, RowDeletion, SheetChange, SheetTable

"""Persistence gateway: write the changes of an in-memory sheet back to its workbook.

Only the cells touched by a mutation are written, and deleted rows are removed
with ``delete_rows`` so the rows below move up. Everything else in the file
(other sheets, cell styles, column widths, formulas) is left as it is. Formula
references to moved rows are not rewritten.

The write is not transactional: if it fails the on-disk state is unspecified,
the in-memory table is left as it is and its changes stay pending for the next
flush.
"""

__all__ = [
    "PersistenceGateway",
    "WorkbookWriter",
]

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    def flush(self, table: SheetTable) -> None:
        """Durably write ``table``; raise ``PersistenceError`` on failure."""
        ...


def _apply(ws: Worksheet, change: SheetChange) -> None:
    if isinstance(change, RowDeletion):
        ws.delete_rows(change.row)
    elif isinstance(change, CellChange):
        # ws.cell(..., value=None) は値を消さないので代入する
        ws.cell(row=change.row, column=change.column).value = change.value
    else:  # pragma: no cover
        raise TypeError(f"unknown sheet change: {change!r}")


class WorkbookWriter:
    """Applies pending sheet changes to an existing .xlsx file via openpyxl."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def flush(self, table: SheetTable) -> None:
        changes = table.pending_changes()
        if not changes:
            logger.debug(f"sheet '{table.name}' has no pending changes")
            return
        try:
            wb = load_workbook(self.path)
            try:
                ws = wb[table.name]
                for change in changes:
                    _apply(ws, change)
                wb.save(self.path)
            finally:
                wb.close()
        except Exception as e:
            raise PersistenceError(
                f"failed to save sheet '{table.name}' to {self.path}: {e}", sheet=table.name
            ) from e
        table.mark_flushed()
        logger.debug(f"saved {len(changes)} change(s) of sheet '{table.name}' to {self.path.name}")
