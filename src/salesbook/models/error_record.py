from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

A record describes one failed operation against the workbook: which file and
sheet were involved, the sheet row when it is known (-1 otherwise), the error
classification and a human readable message.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook filename
        sheet: Sheet name within the workbook
        row: Sheet row number (1-based). Use -1 when the row is unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int  # 不明な場合 -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line containing exactly the dataclass fields."""
        return json.dumps(asdict(self), ensure_ascii=False)
