from __future__ import annotations

from ..models.processing_result import ImportResult

"""SUMMARY line rendering for ``loading-paper import-dir``."""

__all__ = [
    "render_summary_line",
]


def _fmt_metric(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for a batch import.

    Format:
        SUMMARY files={total} success={success} failed={failed} items={items}
        elapsed_sec={elapsed} throughput_ips={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     success_files=2, failed_files=1, total_saved_items=40,
        ...     start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_items_per_sec=20.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=3 success=2 failed=1 items=40 elapsed_sec=2 throughput_ips=20'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"items={result.total_saved_items} "
        f"elapsed_sec={_fmt_metric(result.elapsed_seconds)} "
        f"throughput_ips={_fmt_metric(result.throughput_items_per_sec)}"
    )
