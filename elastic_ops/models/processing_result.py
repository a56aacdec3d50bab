from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Result models for the batch loading-paper import.

One FileStat per manifest file, aggregated into an ImportResult that feeds the
SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file import statistics."""
    file_name: str
    status: str  # success / failed
    saved_items: int  # line items stored for this file (0 on failure)
    elapsed_seconds: float
    paper_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ImportResult:
    """Aggregated results of one ``import-dir`` run."""
    success_files: int
    failed_files: int
    total_saved_items: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_items_per_sec: float  # total_saved_items / elapsed
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
