from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path

from salesbook.cli.commands import open_session, run_add_contact, run_top_customer
from salesbook.config.loader import AppConfig
from salesbook.logging.error_log import ErrorLogBuffer

"""Error log contract: one JSON object per line with a fixed key set."""

FIELDS = {"timestamp", "file", "sheet", "row", "error_type", "message"}
TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def _read_lines(path: Path) -> list[dict]:
    return [json.loads(raw) for raw in path.read_text(encoding="utf-8").splitlines()]


def test_parse_error_record(make_workbook, temp_workdir: Path):
    wb = make_workbook(
        orders=[
            ["Code", "Product code", "Customer code", "Request number", "Quantity", "Order date"],
            ["O1", "P1", "C1", "R-1", 1, datetime(2023, 8, 5)],
            ["O2", "P1", "C1", "R-2", 1, "31.02.2023"],
        ]
    )
    buf = ErrorLogBuffer(temp_workdir / "logs")
    session = open_session(wb, AppConfig(), buf, out=lambda _: None)

    assert run_top_customer(session, 2023, 8) == 1
    (record,) = _read_lines(buf.flush())
    assert set(record) == FIELDS
    assert TIMESTAMP.match(record["timestamp"])
    assert (record["file"], record["sheet"], record["row"]) == ("sales.xlsx", "Orders", 3)
    assert record["error_type"] == "PARSE_ERROR"


def test_persistence_error_record_uses_unknown_row(sample_workbook: Path, temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    session = open_session(sample_workbook, AppConfig(), buf, out=lambda _: None)
    sample_workbook.unlink()

    assert run_add_contact(session, "Anna", "Umbrella") == 1
    assert session.stats.failed == 1
    (record,) = _read_lines(buf.flush())
    assert record["sheet"] == "Customers"
    assert record["row"] == -1
    assert record["error_type"] == "PERSISTENCE_ERROR"


def test_rejections_are_not_logged(sample_workbook: Path, temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    session = open_session(sample_workbook, AppConfig(), buf, out=lambda _: None)
    assert run_top_customer(session, 2023, 1) == 2
    assert buf.flush() is None
