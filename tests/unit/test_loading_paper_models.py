from __future__ import annotations

import math

import pytest

from elastic_ops.models.loading_paper import ColumnVisibility, LineItem, compute_totals, renumber


def test_compute_totals_skips_non_finite():
    items = [
        LineItem(sr=1, pack=2, qty=10, weight=1.5),
        LineItem(sr=2, pack=math.nan, qty=math.inf, weight=2),
    ]
    totals = compute_totals(items)
    assert (totals.pack, totals.qty, totals.weight) == (2, 10, 3.5)


def test_renumber_keeps_order():
    items = [LineItem(sr=5, job_no="a"), LineItem(sr=9, job_no="b")]
    out = renumber(items)
    assert [(it.sr, it.job_no) for it in out] == [(1, "a"), (2, "b")]


def test_visibility_defaults_all_shown():
    vis = ColumnVisibility()
    assert all(getattr(vis, n) for n in ColumnVisibility.column_names())


def test_visibility_hiding_accepts_dashes():
    vis = ColumnVisibility.hiding(["po-no", "gross_weight_per_ctn"])
    assert vis.po_no is False
    assert vis.gross_weight_per_ctn is False
    assert vis.sr is True


def test_visibility_hiding_rejects_unknown():
    with pytest.raises(ValueError, match="unknown column"):
        ColumnVisibility.hiding(["colour"])
