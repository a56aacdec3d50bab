from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Buffered JSON Lines error log.

- fixed key set (see ErrorRecord), one object per line
- one file per run: ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC), created on first flush
- records are buffered and written in one go (after a batch, or when a single
  CLI action fails)
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "LOGS_DIR",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer of error records; ``flush`` appends them as JSON Lines.

    Serial use only.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def record(self, source: str, operation: str, error: BaseException, row: int = -1) -> ErrorRecord:
        """Build a record from an exception and buffer it."""
        rec = ErrorRecord.create(
            source=source,
            operation=operation,
            row=row,
            error_type=_error_type(error),
            message=str(error),
        )
        self.append(rec)
        return rec

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file written, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp


def _error_type(error: BaseException) -> str:
    # JsonSyntaxError -> JSON_SYNTAX_ERROR
    name = type(error).__name__
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i and (not name[i - 1].isupper() or (i + 1 < len(name) and name[i + 1].islower())):
            out.append("_")
        out.append(ch.upper())
    return "".join(out)
