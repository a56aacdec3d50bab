from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from ..services.normalizer import to_text

"""Display formatting for the printed loading paper."""

__all__ = [
    "TARE_OFFSET",
    "fmt_date",
    "fmt_weight",
    "fmt_number",
    "extract_display_name",
    "net_weight_per_unit",
    "gross_weight_per_unit",
]

# 1 カートン当たりの風袋 (kg)
TARE_OFFSET = 0.8

_SIZE_TOKEN = re.compile(r"(\d+(?:\.\d+)?)(mm|cm)", re.IGNORECASE)
_WEIGHT_STEP = Decimal("0.001")


def fmt_date(value: str) -> str:
    """``dd/mm/yyyy``; text that does not parse as a date is returned unchanged."""
    if not value or not value.strip():
        return value
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return value
    if pd.isna(ts):
        return value
    return ts.strftime("%d/%m/%Y")


def fmt_weight(value: Any) -> str:
    """At most 3 fraction digits, thousands separators; NaN prints as 0.

    >>> fmt_weight(1234.5678)
    '1,234.568'
    >>> fmt_weight(2.5)
    '2.5'
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        number = 0.0
    rounded = Decimal(repr(number)).quantize(_WEIGHT_STEP, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "0"
    text = f"{rounded:,.3f}"
    return text.rstrip("0").rstrip(".")


def fmt_number(value: Any) -> str:
    """Pack / qty cells: the number as-is (no grouping, no trailing ``.0``)."""
    return to_text(value)


def extract_display_name(detail_name: str) -> str:
    """Short item label from the ERP detail name.

    The first ``<number>MM`` / ``<number>CM`` token (any case) is kept with the
    single word in front of it: ``"Black Elastic 45MM"`` -> ``"Elastic 45MM"``.
    Names without a size token come back verbatim.
    """
    m = _SIZE_TOKEN.search(detail_name)
    if m is None:
        return detail_name
    size = f"{m.group(1)}{m.group(2).upper()}"
    before = detail_name[: m.start()].split()
    if not before:
        return size
    return f"{before[-1]} {size}"


def _per_unit(weight: float, pack: float) -> float | None:
    try:
        if not pack or not math.isfinite(pack) or not math.isfinite(weight):
            return None
    except TypeError:
        return None
    return weight / pack


def net_weight_per_unit(weight: float, pack: float) -> float:
    """weight / pack; 0 when pack is 0 (or not a usable number)."""
    per_unit = _per_unit(weight, pack)
    return 0 if per_unit is None else per_unit


def gross_weight_per_unit(weight: float, pack: float) -> float:
    """Net weight per unit plus the carton tare; 0 when pack is 0."""
    per_unit = _per_unit(weight, pack)
    return 0 if per_unit is None else per_unit + TARE_OFFSET
