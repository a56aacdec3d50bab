from __future__ import annotations

from datetime import UTC, datetime

from elastic_ops.models.processing_result import ImportResult
from elastic_ops.services.summary import render_summary_line


def _result(elapsed: float, throughput: float) -> ImportResult:
    now = datetime.now(UTC)
    return ImportResult(
        success_files=3,
        failed_files=1,
        total_saved_items=57,
        start_time=now,
        end_time=now,
        elapsed_seconds=elapsed,
        throughput_items_per_sec=throughput,
    )


def test_summary_format():
    line = render_summary_line(_result(1.23456, 46.2))
    assert line == "SUMMARY files=4 success=3 failed=1 items=57 elapsed_sec=1.235 throughput_ips=46.2"


def test_small_elapsed_not_scientific():
    line = render_summary_line(_result(0.000123, 0))
    assert "elapsed_sec=0.000123" in line
    assert "throughput_ips=0" in line
    assert "e-" not in line
