from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..db.gateway import Gateway, GatewayError
from ..ingest.parser import ParseError, parse_file
from ..logging.error_log import ErrorLogBuffer
from ..models.processing_result import FileStat, ImportResult
from .loading_paper_store import save_loading_paper
from .normalizer import normalize
from .progress import ProgressTracker

"""Batch import of loading paper manifests.

``import_directory`` runs parse -> normalize -> save for every ``*.json`` file
in one directory (non-recursive, name order). A bad file is logged, written to
the error log and counted as failed; the run continues with the next file.
Each saved file is its own paper, so failures never roll back earlier files.
"""

__all__ = [
    "ProcessingError",
    "scan_json_files",
    "import_directory",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch problem (directory missing or unreadable)."""


@dataclass(frozen=True)
class _FileOutcome:
    paper_id: str | None
    saved_items: int
    error: str | None = None


def scan_json_files(directory: Path) -> list[Path]:
    """List ``*.json`` files in ``directory`` (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory, or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        files = [p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".json"]
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e
    return sorted(files, key=lambda p: p.name)


def _import_file(path: Path, gateway: Gateway, error_log: ErrorLogBuffer) -> _FileOutcome:
    operation = "parse"
    try:
        parsed = parse_file(path)
        operation = "normalize"
        document = normalize(parsed.rows)
        operation = "save_loading_paper"
        paper_id = save_loading_paper(gateway, document)
    except (ParseError, GatewayError, OSError, UnicodeDecodeError) as e:
        error_log.record(source=path.name, operation=operation, error=e)
        logger.error("%s: %s failed: %s", path.name, operation, e)
        return _FileOutcome(paper_id=None, saved_items=0, error=str(e))
    logger.info("%s: saved paper %s (%d items)", path.name, paper_id, len(document.items))
    return _FileOutcome(paper_id=paper_id, saved_items=len(document.items))


def import_directory(
    directory: Path,
    gateway: Gateway,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import every manifest in ``directory``.

    Args:
        directory: Folder holding ``*.json`` manifests
        gateway: Store to save papers into
        error_log: Buffer for failed files (default: a new one under ./logs)

    Returns:
        ImportResult with per-file stats and throughput (items per second)

    Raises:
        ProcessingError: directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_paths = scan_json_files(directory)

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_items = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            file_start = datetime.now(UTC)
            outcome = _import_file(file_path, gateway, error_log)
            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()

            if outcome.error is None:
                success_count += 1
                total_items += outcome.saved_items
            else:
                failed_count += 1
            progress.set_postfix(success=success_count, failed=failed_count, items=total_items)
            progress.finish_file()

            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status="success" if outcome.error is None else "failed",
                    saved_items=outcome.saved_items,
                    elapsed_seconds=file_elapsed,
                    paper_id=outcome.paper_id,
                    error=outcome.error,
                )
            )

    # エラーログは最後に一度だけ書き出す
    try:
        written = error_log.flush()
    except OSError as e:
        logger.warning("error log could not be written: %s", e)
    else:
        if written is not None:
            logger.info("error log: %s", written)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput = total_items / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ImportResult(
        success_files=success_count,
        failed_files=failed_count,
        total_saved_items=total_items,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_items_per_sec=throughput,
        file_stats=file_stats,
    )
