from __future__ import annotations

import numbers
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

import pandas as pd

from ..models.columns import HEADER_ROW
from ..models.errors import ParseError

"""Row model over a raw worksheet.

A ``SheetTable`` keeps one worksheet in memory as a pandas DataFrame. The frame
index is the 1-based sheet row number and the frame columns are the 1-based
column positions, so every lookup uses the same numbers a spreadsheet user sees.
All cells are stored with ``object`` dtype; typing happens in the ``SheetRow``
getters, which raise ``ParseError`` instead of guessing.

Mutations are also recorded as a list of pending changes in file row numbers
(``CellChange``, ``RowDeletion``). The persistence gateway applies exactly those
changes to the workbook file and then calls ``mark_flushed``, which renumbers the
in-memory rows the same way the file rows moved up.
"""

__all__ = [
    "SheetTable",
    "SheetRow",
    "CellChange",
    "RowDeletion",
    "DATE_TEXT_FORMATS",
]

# Excel の日付シリアル値の起点 (1900 年うるう年バグ込み)
EXCEL_EPOCH = datetime(1899, 12, 30)

DATE_TEXT_FORMATS = (
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
)

RowT = TypeVar("RowT", bound="SheetRow")


@dataclass(frozen=True)
class CellChange:
    """Set one cell. ``row`` and ``column`` are 1-based positions in the file."""
    row: int
    column: int
    value: Any


@dataclass(frozen=True)
class RowDeletion:
    """Delete one row of the file; the rows below move up by one."""
    row: int


SheetChange = CellChange | RowDeletion


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return False
    return bool(pd.isna(value))


def _is_blank(value: Any) -> bool:
    if _is_missing(value):
        return True
    return isinstance(value, str) and value.strip() == ""


class SheetRow:
    """Live view of one data row; reads always hit the current table state."""

    def __init__(self, table: SheetTable, row_number: int) -> None:
        self.table = table
        self.row_number = row_number

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"{type(self).__name__}(sheet={self.table.name!r}, row={self.row_number})"

    def value(self, column: int) -> Any:
        return self.table.cell(self.row_number, column)

    def get_string(self, column: int) -> str:
        value = self.value(column)
        if _is_missing(value):
            return ""
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, float) and value.is_integer():
            # 数値コード (例: 101.0) は Excel 表示と同じく整数表記
            return str(int(value))
        return str(value)

    def get_int(self, column: int) -> int:
        value = self.value(column)
        if _is_blank(value) or isinstance(value, bool):
            raise self._parse_error(column, value, "integer")
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, numbers.Real):
            if float(value).is_integer():
                return int(value)
            raise self._parse_error(column, value, "integer")
        try:
            return int(str(value).strip())
        except ValueError:
            raise self._parse_error(column, value, "integer") from None

    def get_decimal(self, column: int) -> Decimal:
        value = self.value(column)
        if _is_blank(value) or isinstance(value, bool):
            raise self._parse_error(column, value, "decimal")
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, numbers.Real):
            # str() 経由で binary float の誤差桁を持ち込まない
            result = Decimal(str(value))
        else:
            try:
                result = Decimal(str(value).strip())
            except InvalidOperation:
                raise self._parse_error(column, value, "decimal") from None
        if not result.is_finite():
            raise self._parse_error(column, value, "decimal")
        return result

    def get_date(self, column: int) -> date:
        value = self.value(column)
        if _is_blank(value) or isinstance(value, bool):
            raise self._parse_error(column, value, "date")
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, numbers.Real):
            try:
                return (EXCEL_EPOCH + timedelta(days=float(value))).date()
            except (OverflowError, ValueError):
                raise self._parse_error(column, value, "date") from None
        text = str(value).strip()
        for fmt in DATE_TEXT_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise self._parse_error(column, value, "date")

    def _parse_error(self, column: int, value: Any, expected: str) -> ParseError:
        return ParseError(self.table.name, self.row_number, int(column), value, expected)


class SheetTable:
    """In-memory worksheet with the structural mutations the tool needs."""

    def __init__(self, name: str, frame: pd.DataFrame, width: int = 0) -> None:
        width = max(width, frame.shape[1])
        normalized = frame.copy()
        normalized.columns = range(1, frame.shape[1] + 1)
        normalized = normalized.reindex(columns=range(1, width + 1)).astype(object)
        normalized.index = range(HEADER_ROW, HEADER_ROW + len(normalized))
        self.name = name
        self._frame = normalized
        self._pending: list[SheetChange] = []
        # 前回の flush 以降に削除したメモリ上の行番号
        self._deleted: list[int] = []

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]], width: int = 0) -> SheetTable:
        """Build a table from literal rows; ``rows[0]`` becomes sheet row 1 (the header)."""
        return cls(name, pd.DataFrame(list(rows), dtype=object), width)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    @property
    def width(self) -> int:
        return self._frame.shape[1]

    def cell(self, row_number: int, column: int) -> Any:
        return self._frame.at[row_number, int(column)]

    def has_row(self, row_number: int) -> bool:
        return row_number in self._frame.index

    def is_blank_row(self, row_number: int) -> bool:
        return all(_is_blank(v) for v in self._frame.loc[row_number].tolist())

    def used_row_numbers(self) -> list[int]:
        """Row numbers holding at least one non-blank cell, header included."""
        return [int(n) for n in self._frame.index if not self.is_blank_row(n)]

    def last_used_row_number(self) -> int:
        used = self.used_row_numbers()
        return max(used) if used else 0

    def rows(self, row_type: type[RowT] = SheetRow) -> Iterator[RowT]:  # type: ignore[assignment]
        """Yield data rows (header excluded, blank rows skipped) in sheet order.

        The generator re-reads the table on every call, so iterating again after
        a mutation reflects the mutation.
        """
        for row_number in list(self._frame.index):
            if row_number <= HEADER_ROW or not self.has_row(row_number):
                continue
            if self.is_blank_row(row_number):
                continue
            yield row_type(self, int(row_number))

    def append_row(self, values: Mapping[int, Any]) -> int:
        """Write ``values`` (column -> value) after the last used row.

        The new row number is ``last used row + 1``; gaps left by blank rows
        further up are not filled. Returns the new row number.
        """
        unknown = {int(c) for c in values} - set(self._frame.columns)
        if unknown:
            raise ValueError(f"sheet '{self.name}' has no columns {sorted(unknown)}")
        by_column = {int(c): v for c, v in values.items()}
        new_row = max(self.last_used_row_number(), HEADER_ROW) + 1
        row_values = [by_column.get(c) for c in self._frame.columns]
        self._frame.loc[new_row] = row_values
        self._frame.sort_index(inplace=True)
        file_row = self._file_row(new_row)
        # 再利用された空行に残る空白文字も上書きする
        self._pending.extend(
            CellChange(file_row, int(c), v) for c, v in zip(self._frame.columns, row_values)
        )
        return new_row

    def update_cell(self, row_number: int, column: int, value: Any) -> None:
        if not self.has_row(row_number):
            raise KeyError(f"sheet '{self.name}' has no row {row_number}")
        if int(column) not in self._frame.columns:
            raise KeyError(f"sheet '{self.name}' has no column {int(column)}")
        self._frame.at[row_number, int(column)] = value
        self._pending.append(CellChange(self._file_row(row_number), int(column), value))

    def delete_row(self, row_number: int) -> None:
        if not self.has_row(row_number):
            raise KeyError(f"sheet '{self.name}' has no row {row_number}")
        self._frame.drop(index=row_number, inplace=True)
        self._pending.append(RowDeletion(self._file_row(row_number)))
        self._deleted.append(row_number)

    def _file_row(self, row_number: int) -> int:
        """Map an in-memory row number to the file row once pending deletions are applied."""
        return row_number - sum(1 for d in self._deleted if d < row_number)

    def pending_changes(self) -> list[SheetChange]:
        """Changes made since the last successful flush, in the order they were made."""
        return list(self._pending)

    def mark_flushed(self) -> None:
        """Forget pending changes and renumber rows to match the written file."""
        if self._deleted:
            self._frame.index = [self._file_row(int(n)) for n in self._frame.index]
        self._pending.clear()
        self._deleted.clear()
