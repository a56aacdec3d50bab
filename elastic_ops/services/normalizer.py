from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from ..models.loading_paper import DocumentHeader, LineItem, LoadingPaperDocument, compute_totals, renumber

"""Loading paper normalization.

Turns the raw ``Rows`` array into a LoadingPaperDocument:

1. header from rows[0]
2. one LineItem per row (text coerced, numbers parsed permissively)
3. stable sort by DC number (numeric first, then plain string order)
4. sr renumbered 1..N in sorted order
5. totals folded over the final items
"""

__all__ = [
    "to_text",
    "to_number",
    "dc_sort_key",
    "normalize",
]

logger = logging.getLogger(__name__)

# 入力キー (ERP エクスポートの列名)
HEADER_FIELDS = {
    "dc_no": "DcNo",
    "po_no": "PoNo",
    "date": "Date",
    "acc_name": "AccName",
    "acc_address": "AccAddress",
    "remarks": "Remarks",
}


def to_text(value: Any) -> str:
    """String coercion used for every text field (absent -> "")."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    if hasattr(value, "isoformat"):  # date / timestamp 列
        return value.isoformat()
    return str(value)


def _parse_float(text: str) -> float | None:
    s = text.strip()
    if s == "":
        return 0.0
    if "_" in s:  # float() は "1_000" も数値として読んでしまう
        return None
    try:
        return float(s)
    except ValueError:
        return None


def to_number(value: Any) -> float:
    """Permissive numeric parse for pack/qty/weight.

    Anything that does not read as a finite number becomes 0. Integral values
    come back as ``int`` so they print without a trailing ``.0``.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:  # 桁あふれの整数
            return 0
    elif isinstance(value, str):
        parsed = _parse_float(value)
        if parsed is None:
            return 0
        number = parsed
    else:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def dc_sort_key(dc_no: str) -> tuple[int, float, str]:
    """Sort key for DC numbers.

    Numeric DC numbers sort before non-numeric ones and compare by value;
    non-numeric ones compare as case-sensitive strings. A blank DC number reads
    as 0.
    """
    parsed = _parse_float(dc_no)
    if parsed is not None and not math.isnan(parsed):
        return (0, parsed, "")
    return (1, 0.0, dc_no)


def _as_mapping(row: Any) -> dict[str, Any]:
    return row if isinstance(row, dict) else {}


def _header_from(row: dict[str, Any]) -> DocumentHeader:
    return DocumentHeader(
        **{attr: to_text(row.get(key)) for attr, key in HEADER_FIELDS.items()},
        header_note="",
    )


def _item_from(row: dict[str, Any], index: int, header: DocumentHeader) -> LineItem:
    po_raw = row.get("PoNo")
    dc_raw = row.get("DcNo")
    return LineItem(
        sr=index,
        detail_name=to_text(row.get("DetailName")),
        unit=to_text(row.get("DetailUnit")),
        job_no=to_text(row.get("JobNo")),
        pack=to_number(row.get("Pack")),
        qty=to_number(row.get("Qty")),
        weight=to_number(row.get("Weight")),
        po_no=header.po_no if po_raw is None else to_text(po_raw),
        dc_no=header.dc_no if dc_raw is None else to_text(dc_raw),
        remarks="",  # 行単位の備考は入力値を引き継がない
    )


def normalize(rows: Sequence[Any]) -> LoadingPaperDocument:
    """Build a LoadingPaperDocument from raw manifest rows.

    Parameters
    ----------
    rows: Raw row objects as returned by the parser (at least one)

    Returns
    -------
    LoadingPaperDocument with len(rows) items, sr dense 1..N, totals summed

    Raises
    ------
    ValueError: rows is empty
    """
    if not rows:
        raise ValueError("cannot normalize an empty row set")

    header = _header_from(_as_mapping(rows[0]))
    items = [_item_from(_as_mapping(r), i, header) for i, r in enumerate(rows, start=1)]
    # list.sort は安定: 同じ DC 番号は入力順のまま
    items.sort(key=lambda it: dc_sort_key(it.dc_no))
    final = renumber(items)
    totals = compute_totals(final)
    logger.debug(
        "normalized dc=%s items=%d pack=%s qty=%s weight=%s",
        header.dc_no,
        len(final),
        totals.pack,
        totals.qty,
        totals.weight,
    )
    return LoadingPaperDocument(header=header, items=final, totals=totals)
