from __future__ import annotations

from html import escape

from ..config.loader import CompanyConfig
from ..models.catalog import ShrinkageReport
from .printing import PrintableDocument

"""Portrait laboratory test certificate for one shrinkage report."""

__all__ = [
    "SYSTEM_NOTICE",
    "render_shrinkage_report",
]

SYSTEM_NOTICE = "This is a system-generated report, does not need any sign or stamp."


def _card(label: str, value: str) -> str:
    return f'<div class="card"><div class="label">{label}</div><div><strong>{escape(value)}</strong></div></div>'


def _result_row(label: str, value_html: str) -> str:
    return (
        '<tr><th style="width:50%;text-align:left">'
        f'<span class="label">{label}</span></th><td>{value_html}</td></tr>'
    )


def render_shrinkage_report(report: ShrinkageReport, company: CompanyConfig) -> PrintableDocument:
    badge_class = "pass" if report.passed else "fail"
    badge = f'<span class="badge {badge_class}">{escape(report.result.upper())}</span>'
    contact = "<br>".join(escape(p) for p in (company.address, company.email) if p)
    body = f"""<div class="bar"></div>
<div class="page shrinkage-report">
  <header class="grid grid-2">
    <div>
      <h1>{escape(company.name.upper())}</h1>
      <div class="muted">{escape(company.tagline)}</div>
    </div>
    <div style="text-align:right"><span class="card label">CERTIFIED</span></div>
  </header>
  <h2 style="background:#d1d5db;padding:10px 12px;text-transform:uppercase">Laboratory Test Report</h2>
  <section>
    <h3>Product Information</h3>
    <div class="grid grid-3">
      {_card("Test Date", report.date)}
      {_card("Item Number", report.item_number)}
      {_card("Color", report.color)}
    </div>
    <div class="grid grid-2" style="margin-top:8px">
      {_card("Product Description", report.product_description)}
      {_card("Purchase Order", report.po_number)}
    </div>
  </section>
  <section>
    <h3>Test Results &amp; Analysis</h3>
    <div class="grid grid-2 card">
      <div><div class="label">Shrinkage Requirement</div><strong>{escape(report.shrinkage_requirement)}</strong></div>
      <div style="text-align:right"><div class="label">Temperature</div><strong>{escape(report.temp)}</strong></div>
    </div>
    <table class="items results" style="margin-top:8px">
      {_result_row("Dimensional Change", escape(report.dimensional_change))}
      {_result_row("PH Level", escape(report.ph))}
      {_result_row("Test Result", badge)}
    </table>
  </section>
  <footer class="grid grid-2">
    <div>
      <div class="label">Authorized By</div>
      <div><strong>{escape(company.name.upper())}</strong></div>
      <div>{escape(company.department)}</div>
    </div>
    <div style="text-align:right">{contact}</div>
  </footer>
  <p class="muted" style="text-align:center;font-style:italic">{SYSTEM_NOTICE}</p>
</div>
<div class="bar"></div>"""
    return PrintableDocument(title=f"Shrinkage Report {report.item_number}".strip(), body=body)
