from __future__ import annotations

from datetime import date

import pytest

from elastic_ops.config.loader import CompanyConfig
from elastic_ops.db.gateway import RecordNotFoundError
from elastic_ops.models.catalog import Product
from elastic_ops.render.shrinkage_report import SYSTEM_NOTICE, render_shrinkage_report
from elastic_ops.services.shrinkage_reports import (
    ReportForm,
    build_report,
    create_report,
    default_report_date,
    delete_report,
    get_report,
    list_reports,
    resolve_requirement,
)
from elastic_ops.services.validation import ValidationError

PRODUCT = Product(id="p1", product_code="E-20", description="ELASTIC", width="20MM", color="Black")


def test_default_date_is_unpadded():
    assert default_report_date(date(2024, 3, 5)) == "3/5/2024"


def test_form_defaults():
    form = ReportForm(product_code="E-20", po_number="PO-1")
    assert (form.temp, form.dimensional_change, form.ph, form.result) == ("+/- 3%", "-1.65%", "5.2", "Pass")
    assert form.requirement == "ASTCC"


@pytest.mark.parametrize(
    ("preset", "custom", "expected"),
    [
        ("ASTCC", "", "ASTCC 135-15 = -50"),
        ("iso", "", "ISO 6330 - 50 Temp"),
        ("OTHER", "AATCC 135 3x", "AATCC 135 3x"),
    ],
)
def test_resolve_requirement(preset, custom, expected):
    assert resolve_requirement(preset, custom) == expected


def test_resolve_requirement_unknown():
    with pytest.raises(ValidationError):
        resolve_requirement("BS")


def test_build_report_copies_product_fields():
    report = build_report(PRODUCT, ReportForm(product_code="E-20", po_number="PO-1", date="1/2/2024"))
    assert report.item_number == "E-20"
    assert report.product_description == "Elastic 20MM"
    assert report.color == "Black"
    assert report.dc_number == ""
    assert report.shrinkage_requirement == "ASTCC 135-15 = -50"


def test_build_report_keeps_given_item_number():
    report = build_report(PRODUCT, ReportForm(product_code="E-20", po_number="PO-1", item_number="IT-9"))
    assert report.item_number == "IT-9"


@pytest.mark.parametrize(
    "form",
    [ReportForm(product_code="", po_number="PO-1"), ReportForm(product_code="E-20", po_number=" ")],
)
def test_create_requires_product_and_po(memory_gateway, form):
    with pytest.raises(ValidationError):
        create_report(memory_gateway, [PRODUCT], form)
    assert memory_gateway.select("shrinkage_reports") == []


def test_create_unknown_product(memory_gateway):
    with pytest.raises(ValidationError, match="unknown product"):
        create_report(memory_gateway, [PRODUCT], ReportForm(product_code="E-99", po_number="PO-1"))


def test_create_list_get_delete(memory_gateway):
    first = create_report(memory_gateway, [PRODUCT], ReportForm(product_code="E-20", po_number="PO-1"))
    second = create_report(
        memory_gateway, [PRODUCT], ReportForm(product_code="E-20", po_number="PO-2", result="Fail")
    )
    assert first.id and first.created_at
    assert [r.id for r in list_reports(memory_gateway)] == [second.id, first.id]
    assert get_report(memory_gateway, second.id).passed is False

    delete_report(memory_gateway, first.id)
    assert [r.id for r in list_reports(memory_gateway)] == [second.id]
    with pytest.raises(RecordNotFoundError):
        get_report(memory_gateway, first.id)


def test_certificate_page():
    report = build_report(PRODUCT, ReportForm(product_code="E-20", po_number="PO-1", result="Fail"))
    company = CompanyConfig(name="Adsons Global", tagline="Pre-Shrink Elastic Experts", email="info@adsonent.com")
    html = render_shrinkage_report(report, company).to_html()
    assert "Laboratory Test Report" in html
    assert "ADSONS GLOBAL" in html
    assert 'class="badge fail">FAIL<' in html
    assert "Elastic 20MM" in html
    assert SYSTEM_NOTICE in html
    assert "@page" not in html
