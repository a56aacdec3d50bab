from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from ..db.gateway import Gateway, RecordNotFoundError
from ..models.catalog import Product, ShrinkageReport
from .products import find_product
from .validation import ValidationError, require_fields

"""Shrinkage test report generation.

A report is built from a catalog product plus the lab form. Product derived
fields (description, color, fallback item number) are copied into the report
row, so later catalog edits do not change issued reports.
"""

__all__ = [
    "REPORTS_TABLE",
    "REQUIREMENT_PRESETS",
    "ReportForm",
    "default_report_date",
    "resolve_requirement",
    "build_report",
    "create_report",
    "list_reports",
    "get_report",
    "delete_report",
]

logger = logging.getLogger(__name__)

REPORTS_TABLE = "shrinkage_reports"

REQUIREMENT_PRESETS = {
    "ASTCC": "ASTCC 135-15 = -50",
    "ISO": "ISO 6330 - 50 Temp",
}
OTHER = "OTHER"


def default_report_date(today: date | None = None) -> str:
    """Form default date, ``M/D/YYYY`` without zero padding."""
    d = today or date.today()
    return f"{d.month}/{d.day}/{d.year}"


def resolve_requirement(preset: str, custom: str = "") -> str:
    """Map a preset key (ASTCC / ISO / OTHER) to the printed requirement text.

    Raises:
        ValidationError: unknown preset
    """
    key = preset.strip().upper()
    if key == OTHER:
        return custom
    try:
        return REQUIREMENT_PRESETS[key]
    except KeyError:
        raise ValidationError(
            f"report: unknown shrinkage requirement {preset!r}; expected one of "
            f"{', '.join([*REQUIREMENT_PRESETS, OTHER])}",
            ["shrinkage_requirement"],
        ) from None


@dataclass(frozen=True)
class ReportForm:
    """Lab form input. Defaults are the values the lab normally records."""
    product_code: str = ""
    po_number: str = ""
    date: str = field(default_factory=default_report_date)
    item_number: str = ""
    requirement: str = "ASTCC"
    custom_requirement: str = ""
    temp: str = "+/- 3%"
    dimensional_change: str = "-1.65%"
    ph: str = "5.2"
    result: str = "Pass"


def build_report(product: Product, form: ReportForm) -> ShrinkageReport:
    """Unsaved report (empty id) for ``product``."""
    return ShrinkageReport(
        id="",
        product_code=product.product_code,
        po_number=form.po_number,
        dc_number="",
        date=form.date,
        item_number=form.item_number or product.product_code,
        product_description=f"Elastic {product.width}",
        color=product.color,
        shrinkage_requirement=resolve_requirement(form.requirement, form.custom_requirement),
        temp=form.temp,
        dimensional_change=form.dimensional_change,
        ph=form.ph,
        result=form.result,
    )


def create_report(gateway: Gateway, products: Iterable[Product], form: ReportForm) -> ShrinkageReport:
    """Validate, insert and return the stored report.

    Args:
        gateway: Persistence gateway
        products: Catalog to resolve ``form.product_code`` against
        form: Lab form values

    Raises:
        ValidationError: product or PO number missing, or product not in the catalog
        GatewayError: insert failed
    """
    require_fields(
        {"product_code": form.product_code, "po_number": form.po_number},
        ("product_code", "po_number"),
        what="report",
    )
    product = find_product(products, form.product_code)
    if product is None:
        raise ValidationError(f"report: unknown product {form.product_code!r}", ["product_code"])

    report = build_report(product, form)
    stored = gateway.insert(REPORTS_TABLE, [report.to_row()])
    saved = ShrinkageReport.from_row(stored[0])
    logger.debug("created report id=%s product=%s po=%s", saved.id, saved.product_code, saved.po_number)
    return saved


def list_reports(gateway: Gateway) -> list[ShrinkageReport]:
    """All reports, newest first."""
    rows = gateway.select(REPORTS_TABLE, order_by="created_at", descending=True)
    return [ShrinkageReport.from_row(r) for r in rows]


def get_report(gateway: Gateway, report_id: str) -> ShrinkageReport:
    rows = gateway.select(REPORTS_TABLE, filters={"id": report_id})
    if not rows:
        raise RecordNotFoundError(f"report not found: {report_id}")
    return ShrinkageReport.from_row(rows[0])


def delete_report(gateway: Gateway, report_id: str) -> None:
    if not gateway.delete(REPORTS_TABLE, filters={"id": report_id}):
        raise RecordNotFoundError(f"report not found: {report_id}")
