from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Every failed user action (bad manifest file, gateway failure) is written as one
line with a fixed set of keys. ``row`` is -1 when the failure is not tied to a
specific manifest row, which is the usual case.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: File name or record id the action was working on
        operation: Action that failed (e.g. "parse", "save_loading_paper")
        row: Row number (1-based). -1 when the row is unknown or irrelevant
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description (gateway message for store failures)
    """
    timestamp: str
    source: str
    operation: str
    row: int  # -1 = not row specific
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, operation: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            operation=operation,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (no keys beyond the dataclass fields)."""
        return json.dumps(asdict(self), ensure_ascii=False)
